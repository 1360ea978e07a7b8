"""
Core Settings Model

This module contains the CoreSettings data model holding the tunables of the
startup core: retry policy, process timeouts, chunk size and the voice listing
command. Values arrive already loaded from the settings layer; this model only
validates them and converts to and from plain dictionaries.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any, List

from speechdesk.models.retry_config import RetryConfig
from speechdesk.models.validation import ValidationResult, ValidationIssue, ValidationStatus


logger = logging.getLogger(__name__)

MIN_CHUNK_LENGTH = 1000
MAX_CHUNK_LENGTH = 50000
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CoreSettings:
    """
    Settings for the startup core.

    Attributes:
        max_voice_load_attempts: Attempts per voice load sequence
        retry_initial_delay: Backoff base delay in seconds
        retry_exponential_base: Backoff growth factor
        retry_max_delay: Upper bound for a single backoff wait in seconds (None for no cap)
        retry_jitter: Whether to add ±10% jitter to backoff waits
        probe_timeout: Seconds allowed for ``ffmpeg -version``
        locate_timeout: Seconds allowed for the where/which lookup
        enumeration_timeout: Seconds allowed for the voice listing command
        max_chunk_length: Maximum characters per synthesis chunk
        voice_list_command: Command that prints the voice list
        default_voice_locale: Locale prefix of the suggested default voice
        resources_directory: Override for the bundled resources directory
        log_level: Application logging level
    """

    # Voice loading
    max_voice_load_attempts: int = 3
    retry_initial_delay: float = 1.0
    retry_exponential_base: float = 2.0
    retry_max_delay: Optional[float] = None
    retry_jitter: bool = False
    enumeration_timeout: float = 5.0
    voice_list_command: List[str] = field(default_factory=lambda: ["edge-tts", "--list-voices"])
    default_voice_locale: str = "en"

    # FFmpeg probing
    probe_timeout: float = 5.0
    locate_timeout: float = 5.0
    resources_directory: Optional[str] = None

    # Text chunking
    max_chunk_length: int = 5000

    # Logging configuration
    log_level: str = "INFO"

    def validate(self) -> ValidationResult:
        """
        Validate the settings for consistency and correctness.

        Returns:
            ValidationResult: Detailed validation result with issues and warnings
        """
        issues = []
        warnings = []

        if self.max_voice_load_attempts < 1:
            issues.append(ValidationIssue(
                field="max_voice_load_attempts",
                message="At least one voice loading attempt is required",
                code="INVALID_RANGE",
                severity=ValidationStatus.INVALID
            ))
        elif self.max_voice_load_attempts > 10:
            warnings.append(ValidationIssue(
                field="max_voice_load_attempts",
                message="More than 10 attempts can delay startup for minutes",
                code="HIGH_VALUE",
                severity=ValidationStatus.WARNING
            ))

        for name in ("probe_timeout", "locate_timeout", "enumeration_timeout"):
            if getattr(self, name) <= 0:
                issues.append(ValidationIssue(
                    field=name,
                    message="Timeout must be positive",
                    code="INVALID_RANGE",
                    severity=ValidationStatus.INVALID
                ))

        if self.retry_initial_delay < 0:
            issues.append(ValidationIssue(
                field="retry_initial_delay",
                message="Retry delay must not be negative",
                code="INVALID_RANGE",
                severity=ValidationStatus.INVALID
            ))
        if self.retry_exponential_base < 1:
            issues.append(ValidationIssue(
                field="retry_exponential_base",
                message="Backoff growth factor must be at least 1",
                code="INVALID_RANGE",
                severity=ValidationStatus.INVALID
            ))
        if self.retry_max_delay is not None and self.retry_max_delay < self.retry_initial_delay:
            issues.append(ValidationIssue(
                field="retry_max_delay",
                message="Maximum retry delay must not be below the initial delay",
                code="INVALID_RANGE",
                severity=ValidationStatus.INVALID
            ))

        if not MIN_CHUNK_LENGTH <= self.max_chunk_length <= MAX_CHUNK_LENGTH:
            issues.append(ValidationIssue(
                field="max_chunk_length",
                message=f"Max chunk length must be between {MIN_CHUNK_LENGTH:,} and {MAX_CHUNK_LENGTH:,} characters",
                code="INVALID_RANGE",
                severity=ValidationStatus.INVALID
            ))

        if not self.voice_list_command or not all(isinstance(part, str) and part for part in self.voice_list_command):
            issues.append(ValidationIssue(
                field="voice_list_command",
                message="Voice list command must be a non-empty list of strings",
                code="INVALID_TYPE",
                severity=ValidationStatus.INVALID
            ))

        if not self.default_voice_locale.strip():
            warnings.append(ValidationIssue(
                field="default_voice_locale",
                message="Empty default locale marks the first voice as default",
                code="EMPTY_VALUE",
                severity=ValidationStatus.WARNING
            ))

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            issues.append(ValidationIssue(
                field="log_level",
                message=f"Log level must be one of: {', '.join(VALID_LOG_LEVELS)}",
                code="INVALID_VALUE",
                severity=ValidationStatus.INVALID
            ))

        is_valid = not issues
        if is_valid and warnings:
            status = ValidationStatus.WARNING
        elif is_valid:
            status = ValidationStatus.VALID
        else:
            status = ValidationStatus.INVALID

        return ValidationResult(is_valid=is_valid, status=status, issues=issues, warnings=warnings)

    def retry_config(self) -> RetryConfig:
        """Build the voice loader's retry policy from these settings."""
        return RetryConfig(
            max_attempts=self.max_voice_load_attempts,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            exponential_base=self.retry_exponential_base,
            jitter=self.retry_jitter
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return {
            "max_voice_load_attempts": self.max_voice_load_attempts,
            "retry_initial_delay": self.retry_initial_delay,
            "retry_exponential_base": self.retry_exponential_base,
            "retry_max_delay": self.retry_max_delay,
            "retry_jitter": self.retry_jitter,
            "enumeration_timeout": self.enumeration_timeout,
            "voice_list_command": list(self.voice_list_command),
            "default_voice_locale": self.default_voice_locale,
            "probe_timeout": self.probe_timeout,
            "locate_timeout": self.locate_timeout,
            "resources_directory": self.resources_directory,
            "max_chunk_length": self.max_chunk_length,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CoreSettings':
        """
        Create CoreSettings from a dictionary.

        Unknown keys are ignored with a warning so settings written by newer
        versions still load.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown settings keys: {', '.join(unknown)}")

        values = {key: value for key, value in data.items() if key in known}
        if "voice_list_command" in values:
            values["voice_list_command"] = list(values["voice_list_command"])

        settings = cls(**values)
        validation_result = settings.validate()
        if not validation_result.is_valid:
            logger.warning(f"Settings validation issues found: {len(validation_result.issues)} issues")
            for issue in validation_result.issues:
                logger.warning(f"  - {issue.field}: {issue.message}")
        return settings
