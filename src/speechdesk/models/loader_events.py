"""
Voice Loader Event Models

Notifications emitted by the voice loader while it works through a retry
sequence. For one sequence the order is always: STARTED, then per attempt
ATTEMPT (followed by RETRY_SCHEDULED when a non-final attempt fails), then
exactly one SUCCESS or FAILED.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from speechdesk.models.voice import Voice


class LoaderEventKind(Enum):
    """Voice loader notifications."""
    STARTED = "started"
    ATTEMPT = "attempt"
    RETRY_SCHEDULED = "retryScheduled"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadStartedEvent:
    max_attempts: int


@dataclass(frozen=True)
class LoadAttemptEvent:
    attempt: int
    max_attempts: int


@dataclass(frozen=True)
class RetryScheduledEvent:
    attempt: int
    next_attempt: int
    delay_seconds: float
    error: BaseException


@dataclass(frozen=True)
class LoadSucceededEvent:
    attempt: int
    voices: List[Voice] = field(default_factory=list)


@dataclass(frozen=True)
class LoadFailedEvent:
    attempts: int
    error: BaseException
    troubleshooting: List[str] = field(default_factory=list)


PAYLOAD_TYPES = {
    LoaderEventKind.STARTED: LoadStartedEvent,
    LoaderEventKind.ATTEMPT: LoadAttemptEvent,
    LoaderEventKind.RETRY_SCHEDULED: RetryScheduledEvent,
    LoaderEventKind.SUCCESS: LoadSucceededEvent,
    LoaderEventKind.FAILED: LoadFailedEvent,
}
