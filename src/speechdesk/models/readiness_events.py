"""
Readiness Event Models

Closed set of event kinds emitted by the readiness coordinator, each with its
own payload type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from speechdesk.models.readiness_state import ReadinessSignals
from speechdesk.models.service_enums import FFmpegSource, OutputFormat


class ReadinessEventKind(Enum):
    """Events a coordinator listener can subscribe to."""
    VOICE = "voice"
    FFMPEG = "ffmpeg"
    OUTPUT_FOLDER = "outputFolder"
    INITIALIZATION = "initialization"
    FORMAT_AVAILABILITY = "formatAvailability"
    AUTOMATIC_FORMAT_CHANGE = "automaticFormatChange"
    ACTION = "action"
    STATE_CHANGE = "stateChange"


class CoordinatorAction(Enum):
    """User-requested actions relayed through the coordinator."""
    RETRY_VOICE_LOADING = "retryVoiceLoading"
    SELECT_OUTPUT_FOLDER = "selectOutputFolder"
    OPEN_SETTINGS = "openSettings"


MP3_UNAVAILABLE_REASON = "mp3_unavailable"


@dataclass(frozen=True)
class StateChangeEvent:
    """
    Payload for section events and the generic STATE_CHANGE event.

    ``section`` tells STATE_CHANGE listeners which update produced it.
    """
    section: ReadinessEventKind
    current: ReadinessSignals
    previous: ReadinessSignals

    @property
    def ready_changed(self) -> bool:
        return self.current.ready != self.previous.ready


@dataclass(frozen=True)
class FormatAvailabilityEvent:
    """MP3 availability flipped."""
    mp3_available: bool
    ffmpeg_source: FFmpegSource


@dataclass(frozen=True)
class AutomaticFormatChangeEvent:
    """The coordinator switched the active format on its own."""
    new_format: OutputFormat
    previous_format: OutputFormat
    reason: str


@dataclass(frozen=True)
class ActionEvent:
    """A user action relayed to whoever handles it."""
    action: CoordinatorAction
    data: Optional[Any] = None


PAYLOAD_TYPES = {
    ReadinessEventKind.VOICE: StateChangeEvent,
    ReadinessEventKind.FFMPEG: StateChangeEvent,
    ReadinessEventKind.OUTPUT_FOLDER: StateChangeEvent,
    ReadinessEventKind.INITIALIZATION: StateChangeEvent,
    ReadinessEventKind.STATE_CHANGE: StateChangeEvent,
    ReadinessEventKind.FORMAT_AVAILABILITY: FormatAvailabilityEvent,
    ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE: AutomaticFormatChangeEvent,
    ReadinessEventKind.ACTION: ActionEvent,
}
