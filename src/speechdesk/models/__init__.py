"""
SpeechDesk Data Models Package

This package contains all data models and value objects for the SpeechDesk startup core.
"""

from .error import SpeechDeskError, ErrorSeverity
from .validation import (
    ValidationResult, ValidationIssue, ValidationStatus, UserFriendlyMessage, FormatValidationResult
)
from .retry_config import (
    RetryConfig, RetryAttempt, RetryConfigs, LoadAttemptState, VoiceLoadResult
)
from .app_settings import CoreSettings
from .voice import Voice
from .capability_status import CapabilityStatus, ValidationOutcome
from .readiness_state import ReadinessSignals, FormatOption, FormatRecommendation, DegradationNotice
from .readiness_events import (
    ReadinessEventKind, CoordinatorAction, StateChangeEvent, FormatAvailabilityEvent,
    AutomaticFormatChangeEvent, ActionEvent
)
from .loader_events import (
    LoaderEventKind, LoadStartedEvent, LoadAttemptEvent, RetryScheduledEvent,
    LoadSucceededEvent, LoadFailedEvent
)
from .service_enums import ServiceStatus, FFmpegSource, OutputFormat

__all__ = [
    'SpeechDeskError', 'ErrorSeverity',
    'ValidationResult', 'ValidationIssue', 'ValidationStatus', 'UserFriendlyMessage',
    'FormatValidationResult',
    'RetryConfig', 'RetryAttempt', 'RetryConfigs', 'LoadAttemptState', 'VoiceLoadResult',
    'CoreSettings', 'Voice', 'CapabilityStatus', 'ValidationOutcome',
    'ReadinessSignals', 'FormatOption', 'FormatRecommendation', 'DegradationNotice',
    'ReadinessEventKind', 'CoordinatorAction', 'StateChangeEvent', 'FormatAvailabilityEvent',
    'AutomaticFormatChangeEvent', 'ActionEvent',
    'LoaderEventKind', 'LoadStartedEvent', 'LoadAttemptEvent', 'RetryScheduledEvent',
    'LoadSucceededEvent', 'LoadFailedEvent',
    'ServiceStatus', 'FFmpegSource', 'OutputFormat',
]
