"""
Readiness Coordinator

This module implements the ReadinessCoordinator, the single owner of the
signals that decide whether a conversion can start and which output format is
active.

Signals arrive independently (voice loading, ffmpeg probing, output folder,
startup progress) through the ``update_*`` setters. Each update replaces the
immutable ReadinessSignals snapshot, recomputes the ready flag and notifies
listeners. When ffmpeg stops being usable while MP3 is selected, the selection
falls back to WAV inside the same update.

Event order for one update:
    AUTOMATIC_FORMAT_CHANGE (downgrade only)
    FORMAT_AVAILABILITY (ffmpeg updates that flip MP3 availability)
    VOICE | FFMPEG | OUTPUT_FOLDER | INITIALIZATION
    STATE_CHANGE
"""

import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional, Sequence, Union

from speechdesk.models.capability_status import CapabilityStatus
from speechdesk.models.readiness_events import (
    ReadinessEventKind, CoordinatorAction, StateChangeEvent, FormatAvailabilityEvent,
    AutomaticFormatChangeEvent, ActionEvent, MP3_UNAVAILABLE_REASON, PAYLOAD_TYPES
)
from speechdesk.models.readiness_state import (
    ReadinessSignals, FormatOption, FormatRecommendation, DegradationNotice
)
from speechdesk.models.retry_config import VoiceLoadResult
from speechdesk.models.service_enums import FFmpegSource, OutputFormat
from speechdesk.models.validation import FormatValidationResult
from speechdesk.models.voice import Voice
from speechdesk.utils.event_bus import EventBus


FormatLike = Union[OutputFormat, str]


class ReadinessCoordinator:
    """
    Single source of truth for application readiness and format selection.

    All methods are synchronous and must be called from the event loop
    thread. Listeners run synchronously inside the update that triggered them.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._state = ReadinessSignals()
        self._events: EventBus[ReadinessEventKind] = EventBus(PAYLOAD_TYPES, name="ReadinessCoordinator.events")

    # Signal updates

    def update_voice_state(
        self,
        loading: bool,
        loaded: bool,
        voices: Sequence[Voice] = (),
        attempts: int = 0,
        error: Optional[Union[BaseException, str]] = None
    ) -> None:
        """
        Update voice loading state.

        Args:
            loading: Whether a load sequence is in flight
            loaded: Whether voices were loaded successfully
            voices: Loaded voices
            attempts: Attempts made so far
            error: Last loading error, if any
        """
        previous = self._state
        show_retry = not loading and not loaded and attempts > 0

        loading_message = previous.loading_message
        if loading:
            loading_message = f"Loading voices... (attempt {attempts})" if attempts > 0 else "Loading voices..."
        elif not loaded and error:
            loading_message = "Failed to load voices"

        state = replace(
            previous,
            voices_loading=loading,
            voices_loaded=loaded,
            voices=tuple(voices),
            voice_load_attempts=attempts,
            voice_load_error=str(error) if error else None,
            show_retry_button=show_retry,
            show_troubleshooting=show_retry and attempts >= 3,
            loading_message=loading_message
        )

        self.logger.debug(f"Voice state: loading={loading}, loaded={loaded}, voices={len(state.voices)}, attempts={attempts}")
        self._commit(ReadinessEventKind.VOICE, previous, state)

    def update_ffmpeg_state(
        self,
        available: bool,
        source: FFmpegSource = FFmpegSource.NONE,
        validated: bool = False
    ) -> None:
        """
        Update ffmpeg availability.

        A change that makes MP3 unusable while it is selected switches the
        selection to WAV. A change that makes MP3 usable again never switches
        the selection back.

        Args:
            available: Whether an ffmpeg binary was found
            source: Where it was found
            validated: Whether it passed the version check
        """
        previous = self._state
        state = replace(previous, ffmpeg_available=available, ffmpeg_source=source, ffmpeg_validated=validated)

        pending = []
        if previous.mp3_available and not state.mp3_available:
            self.logger.warning("MP3 output is no longer available: FFmpeg not usable")
            if state.selected_format == OutputFormat.MP3:
                state = replace(state, selected_format=OutputFormat.WAV)
                self.logger.info("Output format switched from MP3 to WAV")
                pending.append((
                    ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE,
                    AutomaticFormatChangeEvent(
                        new_format=OutputFormat.WAV,
                        previous_format=OutputFormat.MP3,
                        reason=MP3_UNAVAILABLE_REASON
                    )
                ))
            pending.append((
                ReadinessEventKind.FORMAT_AVAILABILITY,
                FormatAvailabilityEvent(mp3_available=False, ffmpeg_source=source)
            ))
        elif state.mp3_available and not previous.mp3_available:
            self.logger.info(f"MP3 output is now available (FFmpeg source: {source.value})")
            pending.append((
                ReadinessEventKind.FORMAT_AVAILABILITY,
                FormatAvailabilityEvent(mp3_available=True, ffmpeg_source=source)
            ))

        self._commit(ReadinessEventKind.FFMPEG, previous, state, pending)

    def update_output_folder_state(self, folder_set: bool, default_folder: Optional[str] = None) -> None:
        """
        Update output folder state.

        Args:
            folder_set: Whether the user picked an output folder
            default_folder: Fallback folder resolved by the settings layer
        """
        previous = self._state
        state = replace(previous, output_folder_set=folder_set, default_output_folder=default_folder)
        self._commit(ReadinessEventKind.OUTPUT_FOLDER, previous, state)

    def update_initialization_state(self, initializing: bool) -> None:
        """Mark startup checks as running or finished."""
        previous = self._state
        state = replace(previous, initializing=initializing)

        if not initializing:
            state = replace(state, loading_message="Ready" if state.compute_ready() else "Initialization complete")

        self._commit(ReadinessEventKind.INITIALIZATION, previous, state)

    def apply_capability_status(self, status: CapabilityStatus) -> None:
        """Apply a probe result."""
        self.update_ffmpeg_state(status.available, status.source, status.validated)

    def apply_voice_load_result(self, result: VoiceLoadResult) -> None:
        """Apply the outcome of a finished voice load sequence."""
        self.update_voice_state(
            loading=False,
            loaded=result.success,
            voices=result.voices,
            attempts=result.attempts,
            error=result.error
        )

    # Queries

    def is_ready(self) -> bool:
        return self._state.ready

    def has_voices(self) -> bool:
        return self._state.voices_loaded and len(self._state.voices) > 0

    def can_convert_to_mp3(self) -> bool:
        return self._state.mp3_available

    def get_state(self) -> ReadinessSignals:
        """Current snapshot. Snapshots are immutable and never change after being returned."""
        return self._state

    # Format selection

    def get_selected_format(self) -> OutputFormat:
        return self._state.selected_format

    def set_selected_format(self, fmt: FormatLike, force: bool = False) -> bool:
        """
        Select the output format.

        WAV always succeeds. MP3 succeeds only while ffmpeg is usable;
        otherwise WAV is selected instead and False is returned, even with
        ``force``.

        Args:
            fmt: Requested format
            force: Log and return False for unknown formats instead of raising

        Returns:
            bool: True if the requested format is now selected

        Raises:
            ValueError: If the format is unknown and force is False
        """
        try:
            requested = OutputFormat.parse(fmt)
        except ValueError:
            if not force:
                raise
            self.logger.warning(f"Invalid format: {fmt}")
            return False

        if requested == OutputFormat.MP3 and not self.can_convert_to_mp3():
            self.logger.warning("MP3 format not available, falling back to WAV")
            self._state = replace(self._state, selected_format=OutputFormat.WAV)
            return False

        if requested != self._state.selected_format:
            self.logger.info(f"Output format set to {requested.value}")
        self._state = replace(self._state, selected_format=requested)
        return True

    def validate_format_selection(self, fmt: FormatLike) -> FormatValidationResult:
        """
        Check whether a format can be used right now.

        Pure query; never changes state. Used before a conversion starts.
        """
        try:
            requested = OutputFormat.parse(fmt)
        except ValueError:
            return FormatValidationResult(
                valid=False,
                reason=f"Invalid format: {fmt}",
                suggested_format=OutputFormat.WAV
            )

        if requested == OutputFormat.MP3 and not self.can_convert_to_mp3():
            return FormatValidationResult(
                valid=False,
                reason="FFmpeg is required for MP3 conversion but is not available",
                suggested_format=OutputFormat.WAV
            )

        return FormatValidationResult(valid=True)

    def get_available_formats(self) -> List[FormatOption]:
        mp3_available = self.can_convert_to_mp3()
        return [
            FormatOption(
                value=OutputFormat.WAV,
                label="WAV (Uncompressed)",
                available=True,
                description="High quality uncompressed audio format"
            ),
            FormatOption(
                value=OutputFormat.MP3,
                label="MP3 (Compressed)",
                available=mp3_available,
                description=("Compressed audio format with smaller file size" if mp3_available
                             else "Requires FFmpeg for conversion"),
                requires_ffmpeg=True
            ),
        ]

    def get_format_recommendations(self) -> FormatRecommendation:
        mp3_available = self.can_convert_to_mp3()
        return FormatRecommendation(
            recommended=OutputFormat.MP3 if mp3_available else OutputFormat.WAV,
            reasons={
                OutputFormat.MP3: ("Smaller file size, good quality" if mp3_available
                                   else "Not available - FFmpeg required"),
                OutputFormat.WAV: "Always available, highest quality, larger file size",
            },
            ffmpeg_available=self._state.ffmpeg_available,
            ffmpeg_source=self._state.ffmpeg_source,
            ffmpeg_validated=self._state.ffmpeg_validated
        )

    def get_degradation_notices(self) -> List[DegradationNotice]:
        """Features currently running in a reduced mode, with advice for the user."""
        state = self._state
        notices = []

        if not state.mp3_available:
            notices.append(DegradationNotice(
                feature="mp3_conversion",
                reason="FFmpeg not available",
                message="MP3 conversion unavailable. Using WAV format instead.",
                guidance=[
                    "WAV format provides excellent audio quality",
                    "Install FFmpeg to enable MP3 conversion",
                    "WAV files work on all audio players",
                ]
            ))

        if not state.voices_loaded and not state.voices_loading:
            notices.append(DegradationNotice(
                feature="voice_loading",
                reason="No TTS voices detected",
                message="Voice loading failed. Conversion is unavailable until voices are loaded.",
                guidance=[
                    "Retry loading voices",
                    "Check that the speech engine is installed",
                    "Restart the application to retry voice detection",
                ]
            ))

        if not state.output_folder_set and state.default_output_folder is None:
            notices.append(DegradationNotice(
                feature="output_folder",
                reason="No writable output location found",
                message="No output folder available. Select a folder before converting.",
                guidance=[
                    "Select an output folder",
                    "Check folder permissions if access is denied",
                ]
            ))

        return notices

    # Events

    def notify_action(self, action: Union[CoordinatorAction, str], data: Optional[Any] = None) -> None:
        """Relay a user action (retry, folder selection, settings) to its handler."""
        if not isinstance(action, CoordinatorAction):
            action = CoordinatorAction(action)
        self.logger.debug(f"Action requested: {action.value}")
        self._events.emit(ReadinessEventKind.ACTION, ActionEvent(action=action, data=data))

    def add_event_listener(self, kind: ReadinessEventKind, callback: Callable[[object], None]) -> None:
        self._events.subscribe(kind, callback)

    def remove_event_listener(self, kind: ReadinessEventKind, callback: Callable[[object], None]) -> bool:
        return self._events.unsubscribe(kind, callback)

    def reset(self) -> None:
        """
        Restore the initial state. Listeners stay registered.

        Follows the update event order: AUTOMATIC_FORMAT_CHANGE when MP3 was
        selected, FORMAT_AVAILABILITY when MP3 was available, then one
        STATE_CHANGE whose section is STATE_CHANGE.
        """
        previous = self._state
        state = ReadinessSignals()
        self.logger.info("Readiness state reset")

        pending = []
        if previous.selected_format != state.selected_format:
            pending.append((
                ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE,
                AutomaticFormatChangeEvent(
                    new_format=state.selected_format,
                    previous_format=previous.selected_format,
                    reason=MP3_UNAVAILABLE_REASON
                )
            ))
        if previous.mp3_available:
            pending.append((
                ReadinessEventKind.FORMAT_AVAILABILITY,
                FormatAvailabilityEvent(mp3_available=False, ffmpeg_source=state.ffmpeg_source)
            ))

        self._state = state
        for kind, payload in pending:
            self._events.emit(kind, payload)
        self._events.emit(
            ReadinessEventKind.STATE_CHANGE,
            StateChangeEvent(section=ReadinessEventKind.STATE_CHANGE, current=state, previous=previous)
        )

    def _commit(self, section: ReadinessEventKind, previous: ReadinessSignals, state: ReadinessSignals,
                pending: Sequence = ()) -> None:
        ready = state.compute_ready()
        if ready and not previous.ready:
            state = replace(state, ready=True, loading_message="Ready")
            self.logger.info("Application is ready")
        elif ready != state.ready:
            state = replace(state, ready=ready)
            self.logger.info("Application is no longer ready")

        self._state = state

        for kind, payload in pending:
            self._events.emit(kind, payload)

        change = StateChangeEvent(section=section, current=state, previous=previous)
        self._events.emit(section, change)
        self._events.emit(ReadinessEventKind.STATE_CHANGE, change)
