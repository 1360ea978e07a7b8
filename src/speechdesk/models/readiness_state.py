"""
Readiness State Models

This module contains the immutable snapshot of the application's readiness
signals plus the small value objects the readiness coordinator hands out
(format options, recommendations and degradation notices).
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Dict, Any, List

from speechdesk.models.service_enums import FFmpegSource, OutputFormat
from speechdesk.models.voice import Voice


INITIAL_LOADING_MESSAGE = "Initializing application..."


@dataclass(frozen=True)
class ReadinessSignals:
    """
    Snapshot of every signal that decides whether a conversion can start.

    Instances are immutable; the coordinator replaces its snapshot on every
    update, so a snapshot obtained from ``get_state()`` never changes.

    Attributes:
        initializing: Whether startup checks are still running
        voices_loading: Whether a voice load sequence is in flight
        voices_loaded: Whether voices were loaded successfully
        voices: Loaded voices
        voice_load_attempts: Attempts made by the last load sequence
        voice_load_error: Last voice loading error message
        ffmpeg_available: Whether an ffmpeg binary was found
        ffmpeg_source: Where ffmpeg was found
        ffmpeg_validated: Whether ffmpeg answered the version check
        output_folder_set: Whether the user picked an output folder
        default_output_folder: Fallback output folder, if one exists
        selected_format: Active output format
        ready: Derived readiness flag
        show_retry_button: Whether the UI should offer a voice reload
        show_troubleshooting: Whether the UI should show troubleshooting steps
        loading_message: Status line text
    """
    initializing: bool = True
    voices_loading: bool = False
    voices_loaded: bool = False
    voices: Tuple[Voice, ...] = ()
    voice_load_attempts: int = 0
    voice_load_error: Optional[str] = None
    ffmpeg_available: bool = False
    ffmpeg_source: FFmpegSource = FFmpegSource.NONE
    ffmpeg_validated: bool = False
    output_folder_set: bool = False
    default_output_folder: Optional[str] = None
    selected_format: OutputFormat = OutputFormat.WAV
    ready: bool = False
    show_retry_button: bool = False
    show_troubleshooting: bool = False
    loading_message: str = INITIAL_LOADING_MESSAGE

    @property
    def mp3_available(self) -> bool:
        """MP3 output needs a validated ffmpeg."""
        return self.ffmpeg_available and self.ffmpeg_validated

    def compute_ready(self) -> bool:
        """Evaluate the readiness rule against this snapshot's inputs."""
        return (
            not self.initializing
            and self.voices_loaded
            and (self.output_folder_set or self.default_output_folder is not None)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary for serialization."""
        return {
            "initializing": self.initializing,
            "voices_loading": self.voices_loading,
            "voices_loaded": self.voices_loaded,
            "voices": [voice.to_dict() for voice in self.voices],
            "voice_load_attempts": self.voice_load_attempts,
            "voice_load_error": self.voice_load_error,
            "ffmpeg_available": self.ffmpeg_available,
            "ffmpeg_source": self.ffmpeg_source.value,
            "ffmpeg_validated": self.ffmpeg_validated,
            "output_folder_set": self.output_folder_set,
            "default_output_folder": self.default_output_folder,
            "selected_format": self.selected_format.value,
            "ready": self.ready,
            "show_retry_button": self.show_retry_button,
            "show_troubleshooting": self.show_troubleshooting,
            "loading_message": self.loading_message,
        }


@dataclass(frozen=True)
class FormatOption:
    """An output format as offered to the user."""
    value: OutputFormat
    label: str
    available: bool
    description: str
    requires_ffmpeg: bool = False


@dataclass(frozen=True)
class FormatRecommendation:
    """Suggested output format with the reasoning behind each option."""
    recommended: OutputFormat
    reasons: Dict[OutputFormat, str]
    ffmpeg_available: bool
    ffmpeg_source: FFmpegSource
    ffmpeg_validated: bool


@dataclass(frozen=True)
class DegradationNotice:
    """
    Advice shown when a feature falls back to a reduced mode.

    Attributes:
        feature: Degraded feature ("mp3_conversion", "voice_loading", "output_folder")
        reason: Short cause
        message: What the application does instead
        guidance: Steps the user can take
    """
    feature: str
    reason: str
    message: str
    guidance: List[str] = field(default_factory=list)
