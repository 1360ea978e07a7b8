"""
Retry Configuration Models

This module contains models for configuring retry behavior including
exponential backoff, attempt tracking, and the outcome of a voice load.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Callable, Dict, Any
import time
import random
import logging

from speechdesk.models.validation import UserFriendlyMessage
from speechdesk.models.voice import Voice


@dataclass
class RetryAttempt:
    """Information about a failed attempt."""
    attempt_number: int
    error: BaseException
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior with exponential backoff.

    The delay before retrying after attempt ``n`` is
    ``initial_delay * exponential_base ** n``, so the defaults wait
    2s after the first attempt and 4s after the second. Waits are
    unbounded unless ``max_delay`` is set.
    """

    # Basic retry parameters
    max_attempts: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: Optional[float] = None  # seconds, None for no cap
    exponential_base: float = 2.0
    jitter: bool = False

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must not be negative")
        if self.max_delay is not None and self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.exponential_base < 1:
            raise ValueError("exponential_base must be >= 1")

    def calculate_delay(self, attempt_number: int) -> float:
        """
        Calculate the wait after a failed attempt.

        Args:
            attempt_number: The attempt that just failed (1-based)

        Returns:
            float: Delay in seconds before the next attempt
        """
        if attempt_number <= 0:
            return 0.0

        delay = self.initial_delay * (self.exponential_base ** attempt_number)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)

        # Add jitter to avoid thundering herd
        if self.jitter:
            jitter_amount = delay * 0.1  # ±10% jitter
            delay += random.uniform(-jitter_amount, jitter_amount)

        return max(0.0, delay)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for serialization."""
        return {
            "max_attempts": self.max_attempts,
            "initial_delay": self.initial_delay,
            "max_delay": self.max_delay,
            "exponential_base": self.exponential_base,
            "jitter": self.jitter,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RetryConfig':
        """Create RetryConfig from dictionary."""
        return cls(**data)


# Predefined configurations for common scenarios
class RetryConfigs:
    """Predefined retry configurations for common use cases."""

    # Startup voice enumeration: 2 ** attempt seconds, uncapped
    VOICE_LOADING = RetryConfig(
        max_attempts=3,
        initial_delay=1.0,
        max_delay=None,
        exponential_base=2.0,
        jitter=False
    )


@dataclass
class LoadAttemptState:
    """
    Progress of the voice loader's retry loop.

    Owned by VoiceLoader; callers only ever see copies.
    """
    is_loading: bool = False
    current_attempt: int = 0
    max_attempts: int = 3
    last_error: Optional[BaseException] = None

    def copy(self) -> 'LoadAttemptState':
        return LoadAttemptState(
            is_loading=self.is_loading,
            current_attempt=self.current_attempt,
            max_attempts=self.max_attempts,
            last_error=self.last_error
        )


@dataclass
class VoiceLoadResult:
    """
    Outcome of a complete voice load sequence.

    Attributes:
        success: Whether a non-empty voice list was obtained
        voices: Loaded voices (empty on failure)
        attempt: Attempt number that produced the outcome
        attempts: Total attempts made in the sequence
        error: Last error when the sequence failed
        troubleshooting: Guidance for the user on failure
        user_message: Error banner content on failure
    """
    success: bool
    voices: List[Voice] = field(default_factory=list)
    attempt: int = 0
    attempts: int = 0
    error: Optional[BaseException] = None
    troubleshooting: List[str] = field(default_factory=list)
    user_message: Optional[UserFriendlyMessage] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            "success": self.success,
            "voices": [voice.to_dict() for voice in self.voices],
            "attempt": self.attempt,
            "attempts": self.attempts,
            "error": str(self.error) if self.error else None,
            "troubleshooting": list(self.troubleshooting),
            "user_message": self.user_message.message if self.user_message else None,
        }


def create_retry_callback(logger: logging.Logger) -> Callable[[RetryAttempt], None]:
    """
    Create a retry callback function for logging.

    Args:
        logger: Logger instance to use

    Returns:
        Callable: Callback function for retry attempts
    """
    def retry_callback(attempt: RetryAttempt):
        logger.warning(
            f"Retry attempt {attempt.attempt_number} failed: "
            f"{attempt.error}, waiting {attempt.delay_seconds:.1f}s"
        )

    return retry_callback
