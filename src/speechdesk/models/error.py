"""
SpeechDesk Error Models

This module contains standardized error response formats for the SpeechDesk application.
"""

from dataclasses import dataclass
from typing import Optional
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class SpeechDeskError(Exception):
    """Standardized error response format that can be raised as an exception"""
    severity: ErrorSeverity
    code: str
    user_message: str
    technical_details: Optional[str] = None
    suggested_action: Optional[str] = None
    timestamp: Optional[str] = None

    def __post_init__(self):
        if self.timestamp is None:
            from datetime import datetime
            self.timestamp = datetime.now().isoformat()

        # Initialize the Exception base class with the user message
        super().__init__(self.user_message)

    def __str__(self) -> str:
        if self.technical_details:
            return f"{self.user_message} ({self.technical_details})"
        return self.user_message

    @classmethod
    def from_exception(cls, exception: Exception, user_message: str = None) -> 'SpeechDeskError':
        """
        Create a SpeechDeskError from an exception.

        Args:
            exception: The exception to convert
            user_message: Optional user-friendly message

        Returns:
            SpeechDeskError: Standardized error object
        """
        if isinstance(exception, SpeechDeskError):
            return exception

        # Default user message if not provided
        if user_message is None:
            user_message = "An unexpected error occurred"

        severity = ErrorSeverity.ERROR
        suggested_action = "Try again later or contact support if the problem persists"

        # Order matters: PermissionError and FileNotFoundError are OSErrors
        if isinstance(exception, PermissionError):
            severity = ErrorSeverity.ERROR
            suggested_action = "Check file permissions or run the application as administrator"
        elif isinstance(exception, FileNotFoundError):
            severity = ErrorSeverity.ERROR
            suggested_action = "Check that the required program is installed and on your PATH"
        elif isinstance(exception, TimeoutError):
            severity = ErrorSeverity.WARNING
            suggested_action = "The program took too long to respond. Try again in a moment"
        elif isinstance(exception, ConnectionError):
            severity = ErrorSeverity.ERROR
            suggested_action = "Check your internet connection and try again"
        elif isinstance(exception, (ValueError, TypeError)):
            severity = ErrorSeverity.ERROR
            suggested_action = "Check your input parameters and try again"

        return cls(
            severity=severity,
            code=exception.__class__.__name__.upper(),
            user_message=user_message,
            technical_details=str(exception),
            suggested_action=suggested_action
        )
