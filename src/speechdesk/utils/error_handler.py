"""
Error Handler Utility

Centralized error handling with user-friendly messages.

Provides:
- ErrorMessageFormatter: Formats errors with "[What happened] + [What to do]" pattern
- Coarse failure classification (permission, connectivity, generic)
- Curated troubleshooting steps for each failure class
"""

import asyncio
import logging
from typing import Optional, Dict, List
from enum import Enum

from speechdesk.models.error import SpeechDeskError, ErrorSeverity
from speechdesk.models.validation import UserFriendlyMessage


class ErrorCode(Enum):
    """Standard error codes for consistent error handling."""

    # Voice Errors
    VOICE_ENUMERATION_FAILED = "VOICE_ENUMERATION_FAILED"
    NO_VOICES_FOUND = "NO_VOICES_FOUND"

    # General Errors
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


# Format: "what" (what happened) + "action" (what to do)
ERROR_MESSAGE_TEMPLATES: Dict[str, Dict[str, object]] = {
    # Voice Errors
    ErrorCode.VOICE_ENUMERATION_FAILED.value: {
        "what": "Could not list the available voices",
        "action": "Retry loading voices. If the problem continues, restart SpeechDesk.",
        "severity": ErrorSeverity.ERROR
    },
    ErrorCode.NO_VOICES_FOUND.value: {
        "what": "No text-to-speech voices were found",
        "action": "Make sure the speech engine is installed, then retry loading voices.",
        "severity": ErrorSeverity.CRITICAL
    },

    # General Errors
    ErrorCode.UNEXPECTED_ERROR.value: {
        "what": "An unexpected error occurred",
        "action": "Please try again. If the problem continues, restart SpeechDesk.",
        "severity": ErrorSeverity.ERROR
    },
}


class FailureKind(Enum):
    """Coarse classification used to pick troubleshooting steps."""
    PERMISSION_DENIED = "permission_denied"
    CONNECTIVITY = "connectivity"
    GENERIC = "generic"


TROUBLESHOOTING_STEPS: Dict[FailureKind, List[str]] = {
    FailureKind.PERMISSION_DENIED: [
        "Try running the application as administrator",
        "Check that your account is allowed to run the speech engine (edge-tts)",
        "Make sure security software is not blocking the speech engine",
        "Restart the application after changing permissions",
    ],
    FailureKind.CONNECTIVITY: [
        "Check your internet connection",
        "Check firewall or proxy settings for the speech engine",
        "Wait a moment and retry loading voices",
        "Restart the application if the problem persists",
    ],
    FailureKind.GENERIC: [
        "Make sure the speech engine is installed (pip install edge-tts)",
        "Try restarting the application",
        "Check Windows Settings > Time & Language > Speech",
        "Contact support if the problem persists",
    ],
}

_PERMISSION_MARKERS = ("permission", "access is denied", "access denied", "eacces", "eperm")
_CONNECTIVITY_MARKERS = ("timeout", "timed out", "network", "connect", "getaddrinfo", "unreachable", "dns")


def classify_failure(error: Optional[BaseException]) -> FailureKind:
    """
    Classify an error for troubleshooting purposes.

    Exception types are checked first, then the message text, so wrapped
    errors that only mention the cause still classify correctly.
    """
    if error is None:
        return FailureKind.GENERIC

    if isinstance(error, PermissionError):
        return FailureKind.PERMISSION_DENIED
    if isinstance(error, (TimeoutError, asyncio.TimeoutError, ConnectionError)):
        return FailureKind.CONNECTIVITY

    text = str(error).lower()
    if any(marker in text for marker in _PERMISSION_MARKERS):
        return FailureKind.PERMISSION_DENIED
    if any(marker in text for marker in _CONNECTIVITY_MARKERS):
        return FailureKind.CONNECTIVITY
    return FailureKind.GENERIC


def get_troubleshooting_steps(error: Optional[BaseException] = None) -> List[str]:
    """Troubleshooting steps for an error; generic steps when nothing matches."""
    return list(TROUBLESHOOTING_STEPS[classify_failure(error)])


def build_user_message(error: BaseException, context: str = "") -> UserFriendlyMessage:
    """
    Convert an error into a user-facing message with troubleshooting.

    A SpeechDeskError keeps its own "[What happened]. [What to do]" text;
    other errors get the standard message for their failure class.

    Args:
        error: The exception that occurred
        context: Optional description of the failed operation

    Returns:
        UserFriendlyMessage: Message for the error banner
    """
    kind = classify_failure(error)
    details = f"{context}: {error}" if context else str(error)

    if kind == FailureKind.PERMISSION_DENIED:
        title, message, severity = "Access Error", "Permission denied while starting the speech engine", "error"
    elif kind == FailureKind.CONNECTIVITY:
        title, message, severity = "Connection Problem", "The speech engine did not respond in time", "warning"
    else:
        title, message, severity = "Voice Loading Error", "Voices could not be loaded", "error"

    if isinstance(error, SpeechDeskError):
        message = get_error_formatter().format_speechdesk_error(error)

    return UserFriendlyMessage(
        title=title,
        message=message,
        details=details,
        action_suggestions=get_troubleshooting_steps(error),
        severity=severity,
        is_recoverable=kind != FailureKind.PERMISSION_DENIED
    )


class ErrorMessageFormatter:
    """
    Formats error messages with user-friendly patterns.

    All errors follow the pattern "[What happened] + [What to do]"
    to help users understand and resolve issues without technical knowledge.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._templates = ERROR_MESSAGE_TEMPLATES.copy()

    def format_speechdesk_error(self, error: SpeechDeskError) -> str:
        """Format a SpeechDeskError into a user-friendly message."""
        if error.suggested_action:
            return f"{error.user_message}. {error.suggested_action}"
        return error.user_message

    def create_error(self, error_code: str, technical_details: Optional[str] = None) -> SpeechDeskError:
        """
        Create a complete SpeechDeskError from an error code.

        Args:
            error_code: Error code from ErrorCode enum
            technical_details: Optional technical details for logging

        Returns:
            SpeechDeskError with formatted message
        """
        template = self._templates.get(error_code)
        if not template:
            # Fallback to generic error
            template = self._templates[ErrorCode.UNEXPECTED_ERROR.value]
            self.logger.warning(f"Unknown error code: {error_code}")

        return SpeechDeskError(
            severity=template.get("severity", ErrorSeverity.ERROR),
            code=error_code,
            user_message=template["what"],
            suggested_action=template["action"],
            technical_details=technical_details
        )


# Global instance
_error_formatter: Optional[ErrorMessageFormatter] = None


def get_error_formatter() -> ErrorMessageFormatter:
    """Get the global ErrorMessageFormatter instance."""
    global _error_formatter
    if _error_formatter is None:
        _error_formatter = ErrorMessageFormatter()
    return _error_formatter


def create_error(error_code: str, technical_details: Optional[str] = None) -> SpeechDeskError:
    """Convenience function to create a SpeechDeskError."""
    return get_error_formatter().create_error(error_code, technical_details)
