"""Tests for the readiness coordinator.

Covers:
- Readiness truth table (initializing, voices, output folder)
- Automatic MP3 -> WAV downgrade with exactly one event
- No automatic upgrade when ffmpeg returns
- Event order and listener isolation
- set_selected_format and validate_format_selection rules
- Voice UI hints and loading messages
- Format options, recommendations and degradation notices
- Actions, snapshots and reset
"""

import itertools

import pytest

from speechdesk.models.capability_status import CapabilityStatus
from speechdesk.models.readiness_events import (
    ReadinessEventKind, CoordinatorAction, MP3_UNAVAILABLE_REASON
)
from speechdesk.models.retry_config import VoiceLoadResult
from speechdesk.models.service_enums import FFmpegSource, OutputFormat
from speechdesk.models.voice import Voice
from speechdesk.services.readiness_coordinator import ReadinessCoordinator


VOICES = [Voice(id="en-US-GuyNeural", name="en-US-GuyNeural", gender="Male", language="en-US", is_default=True)]


def record(coordinator: ReadinessCoordinator, kinds=tuple(ReadinessEventKind)):
    events = []
    for kind in kinds:
        coordinator.add_event_listener(kind, lambda payload, kind=kind: events.append((kind, payload)))
    return events


@pytest.fixture
def coordinator():
    return ReadinessCoordinator()


@pytest.fixture
def mp3_coordinator(coordinator):
    coordinator.update_ffmpeg_state(True, FFmpegSource.BUNDLED, True)
    assert coordinator.set_selected_format("mp3")
    return coordinator


class TestReadiness:
    """The ready flag."""

    def test_initial_state_not_ready(self, coordinator):
        state = coordinator.get_state()

        assert not coordinator.is_ready()
        assert state.initializing
        assert state.selected_format == OutputFormat.WAV
        assert state.loading_message == "Initializing application..."

    @pytest.mark.parametrize("initializing, loaded, folder_set, default_folder", list(itertools.product(
        [True, False], [True, False], [True, False], [None, "/home/user/Documents"]
    )))
    def test_truth_table(self, coordinator, initializing, loaded, folder_set, default_folder):
        coordinator.update_voice_state(False, loaded, VOICES if loaded else ())
        coordinator.update_output_folder_state(folder_set, default_folder)
        coordinator.update_initialization_state(initializing)

        expected = (not initializing) and loaded and (folder_set or default_folder is not None)
        assert coordinator.is_ready() == expected
        assert coordinator.get_state().ready == expected

    def test_initializing_overrides_everything(self, coordinator):
        coordinator.update_voice_state(False, True, VOICES)
        coordinator.update_output_folder_state(True, "/tmp/out")
        coordinator.update_ffmpeg_state(True, FFmpegSource.SYSTEM, True)
        coordinator.update_initialization_state(False)
        assert coordinator.is_ready()

        coordinator.update_initialization_state(True)
        assert not coordinator.is_ready()

    def test_ready_message(self, coordinator):
        coordinator.update_voice_state(False, True, VOICES)
        coordinator.update_output_folder_state(False, "/tmp/out")
        coordinator.update_initialization_state(False)

        assert coordinator.get_state().loading_message == "Ready"

    def test_initialization_complete_message_when_not_ready(self, coordinator):
        coordinator.update_initialization_state(False)
        assert coordinator.get_state().loading_message == "Initialization complete"

    def test_state_change_reports_ready_flip(self, coordinator):
        events = record(coordinator, [ReadinessEventKind.STATE_CHANGE])
        coordinator.update_voice_state(False, True, VOICES)
        coordinator.update_output_folder_state(True)
        coordinator.update_initialization_state(False)

        assert [event.ready_changed for _, event in events] == [False, False, True]
        assert events[-1][1].section == ReadinessEventKind.INITIALIZATION


class TestFormatDowngrade:
    """MP3 availability transitions."""

    def test_losing_ffmpeg_switches_to_wav(self, mp3_coordinator):
        events = record(mp3_coordinator)

        mp3_coordinator.update_ffmpeg_state(False)

        assert mp3_coordinator.get_selected_format() == OutputFormat.WAV
        changes = [p for k, p in events if k == ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE]
        assert len(changes) == 1
        assert changes[0].new_format == OutputFormat.WAV
        assert changes[0].previous_format == OutputFormat.MP3
        assert changes[0].reason == MP3_UNAVAILABLE_REASON == "mp3_unavailable"

    def test_downgrade_event_order(self, mp3_coordinator):
        events = record(mp3_coordinator)

        mp3_coordinator.update_ffmpeg_state(True, FFmpegSource.BUNDLED, validated=False)

        assert [kind for kind, _ in events] == [
            ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE,
            ReadinessEventKind.FORMAT_AVAILABILITY,
            ReadinessEventKind.FFMPEG,
            ReadinessEventKind.STATE_CHANGE,
        ]
        assert events[1][1].mp3_available is False

    def test_selection_already_wav_on_event(self, mp3_coordinator):
        seen = []
        mp3_coordinator.add_event_listener(
            ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE,
            lambda event: seen.append(mp3_coordinator.get_selected_format())
        )

        mp3_coordinator.update_ffmpeg_state(False)

        assert seen == [OutputFormat.WAV]

    def test_losing_ffmpeg_with_wav_selected_emits_no_format_change(self, coordinator):
        coordinator.update_ffmpeg_state(True, FFmpegSource.SYSTEM, True)
        events = record(coordinator)

        coordinator.update_ffmpeg_state(False)

        kinds = [kind for kind, _ in events]
        assert ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE not in kinds
        assert kinds.count(ReadinessEventKind.FORMAT_AVAILABILITY) == 1

    def test_repeated_unavailable_updates_emit_once(self, mp3_coordinator):
        events = record(mp3_coordinator, [ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE])

        mp3_coordinator.update_ffmpeg_state(False)
        mp3_coordinator.update_ffmpeg_state(False)

        assert len(events) == 1

    def test_ffmpeg_returning_does_not_upgrade(self, mp3_coordinator):
        mp3_coordinator.update_ffmpeg_state(False)
        events = record(mp3_coordinator)

        mp3_coordinator.update_ffmpeg_state(True, FFmpegSource.SYSTEM, True)

        assert mp3_coordinator.get_selected_format() == OutputFormat.WAV
        availability = [p for k, p in events if k == ReadinessEventKind.FORMAT_AVAILABILITY]
        assert len(availability) == 1
        assert availability[0].mp3_available is True
        assert availability[0].ffmpeg_source == FFmpegSource.SYSTEM
        assert ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE not in [k for k, _ in events]

    def test_apply_capability_status(self, coordinator):
        coordinator.apply_capability_status(CapabilityStatus(
            available=True, source=FFmpegSource.BUNDLED, validated=True, version="6.1"
        ))
        assert coordinator.can_convert_to_mp3()

        coordinator.apply_capability_status(CapabilityStatus.unavailable("gone"))
        assert not coordinator.can_convert_to_mp3()


class TestFormatSelection:
    """set_selected_format and validate_format_selection."""

    def test_wav_always_accepted(self, coordinator):
        assert coordinator.set_selected_format("wav")
        assert coordinator.set_selected_format(OutputFormat.WAV)

    def test_mp3_accepted_with_ffmpeg(self, mp3_coordinator):
        assert mp3_coordinator.get_selected_format() == OutputFormat.MP3

    @pytest.mark.parametrize("force", [False, True])
    def test_mp3_without_ffmpeg_falls_back(self, coordinator, force):
        assert coordinator.set_selected_format("mp3", force=force) is False
        assert coordinator.get_selected_format() == OutputFormat.WAV

    def test_mp3_requires_validated_ffmpeg(self, coordinator):
        coordinator.update_ffmpeg_state(True, FFmpegSource.SYSTEM, validated=False)
        assert not coordinator.set_selected_format("mp3")

    def test_unknown_format_raises(self, coordinator):
        with pytest.raises(ValueError):
            coordinator.set_selected_format("flac")

    def test_unknown_format_forced_returns_false(self, coordinator):
        assert coordinator.set_selected_format("flac", force=True) is False
        assert coordinator.get_selected_format() == OutputFormat.WAV

    def test_format_string_normalized(self, mp3_coordinator):
        assert mp3_coordinator.set_selected_format(" WAV ")
        assert mp3_coordinator.get_selected_format() == OutputFormat.WAV

    def test_validate_mp3_without_ffmpeg(self, coordinator):
        result = coordinator.validate_format_selection("mp3")

        assert not result.valid
        assert result.reason == "FFmpeg is required for MP3 conversion but is not available"
        assert result.suggested_format == OutputFormat.WAV

    def test_validate_unknown_format(self, coordinator):
        result = coordinator.validate_format_selection("ogg")

        assert not result.valid
        assert result.reason == "Invalid format: ogg"
        assert result.suggested_format == OutputFormat.WAV

    def test_validate_is_pure(self, coordinator):
        events = record(coordinator)
        before = coordinator.get_state()

        coordinator.validate_format_selection("mp3")
        coordinator.validate_format_selection("bogus")
        coordinator.validate_format_selection("wav")

        assert coordinator.get_state() is before
        assert events == []

    def test_validate_valid_formats(self, mp3_coordinator):
        assert mp3_coordinator.validate_format_selection("mp3").valid
        assert mp3_coordinator.validate_format_selection(OutputFormat.WAV).valid


class TestVoiceState:
    """Voice section and UI hints."""

    def test_loading_message_with_attempt(self, coordinator):
        coordinator.update_voice_state(True, False, attempts=2)

        state = coordinator.get_state()
        assert state.loading_message == "Loading voices... (attempt 2)"
        assert not state.show_retry_button

    def test_loading_message_without_attempt(self, coordinator):
        coordinator.update_voice_state(True, False)
        assert coordinator.get_state().loading_message == "Loading voices..."

    def test_failure_hints(self, coordinator):
        coordinator.update_voice_state(False, False, attempts=3, error=RuntimeError("boom"))

        state = coordinator.get_state()
        assert state.loading_message == "Failed to load voices"
        assert state.show_retry_button
        assert state.show_troubleshooting
        assert state.voice_load_error == "boom"

    def test_retry_without_troubleshooting_below_three_attempts(self, coordinator):
        coordinator.update_voice_state(False, False, attempts=1, error="boom")

        state = coordinator.get_state()
        assert state.show_retry_button
        assert not state.show_troubleshooting

    def test_apply_voice_load_result(self, coordinator):
        coordinator.apply_voice_load_result(VoiceLoadResult(success=True, voices=VOICES, attempt=1, attempts=1))

        assert coordinator.has_voices()
        assert coordinator.get_state().voices == tuple(VOICES)

    def test_loaded_without_voices_has_no_voices(self, coordinator):
        coordinator.update_voice_state(False, True, ())
        assert not coordinator.has_voices()

    def test_section_event_order(self, coordinator):
        events = record(coordinator)

        coordinator.update_voice_state(True, False, attempts=1)

        assert [kind for kind, _ in events] == [ReadinessEventKind.VOICE, ReadinessEventKind.STATE_CHANGE]
        assert events[0][1] is events[1][1]
        assert events[0][1].previous.voices_loading is False
        assert events[0][1].current.voices_loading is True


class TestListeners:
    """Listener isolation and removal."""

    def test_failing_listener_does_not_block_others(self, mp3_coordinator):
        received = []

        def broken(event):
            raise RuntimeError("listener bug")

        mp3_coordinator.add_event_listener(ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE, broken)
        mp3_coordinator.add_event_listener(ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE, received.append)

        mp3_coordinator.update_ffmpeg_state(False)

        assert len(received) == 1
        assert mp3_coordinator.get_selected_format() == OutputFormat.WAV

    def test_remove_listener(self, coordinator):
        received = []
        coordinator.add_event_listener(ReadinessEventKind.OUTPUT_FOLDER, received.append)

        assert coordinator.remove_event_listener(ReadinessEventKind.OUTPUT_FOLDER, received.append)
        assert not coordinator.remove_event_listener(ReadinessEventKind.OUTPUT_FOLDER, received.append)
        coordinator.update_output_folder_state(True)

        assert received == []


class TestQueries:
    """Format options, recommendations and degradation notices."""

    def test_available_formats_without_ffmpeg(self, coordinator):
        wav, mp3 = coordinator.get_available_formats()

        assert wav.value == OutputFormat.WAV and wav.available
        assert wav.label == "WAV (Uncompressed)"
        assert mp3.value == OutputFormat.MP3 and not mp3.available
        assert mp3.requires_ffmpeg
        assert mp3.description == "Requires FFmpeg for conversion"

    def test_recommendation_follows_ffmpeg(self, coordinator):
        assert coordinator.get_format_recommendations().recommended == OutputFormat.WAV

        coordinator.update_ffmpeg_state(True, FFmpegSource.BUNDLED, True)
        recommendation = coordinator.get_format_recommendations()

        assert recommendation.recommended == OutputFormat.MP3
        assert recommendation.ffmpeg_source == FFmpegSource.BUNDLED
        assert recommendation.reasons[OutputFormat.MP3] == "Smaller file size, good quality"

    def test_degradation_notices(self, coordinator):
        coordinator.update_voice_state(False, False, attempts=3, error="boom")

        features = [notice.feature for notice in coordinator.get_degradation_notices()]

        assert features == ["mp3_conversion", "voice_loading", "output_folder"]

    def test_no_degradation_when_everything_works(self, coordinator):
        coordinator.update_voice_state(False, True, VOICES)
        coordinator.update_ffmpeg_state(True, FFmpegSource.SYSTEM, True)
        coordinator.update_output_folder_state(False, "/tmp/out")

        assert coordinator.get_degradation_notices() == []


class TestActionsAndSnapshots:
    """Actions, immutable snapshots and reset."""

    def test_notify_action(self, coordinator):
        events = record(coordinator, [ReadinessEventKind.ACTION])

        coordinator.notify_action(CoordinatorAction.RETRY_VOICE_LOADING)
        coordinator.notify_action("selectOutputFolder", data={"source": "banner"})

        assert [event.action for _, event in events] == [
            CoordinatorAction.RETRY_VOICE_LOADING, CoordinatorAction.SELECT_OUTPUT_FOLDER
        ]
        assert events[1][1].data == {"source": "banner"}

    def test_unknown_action_rejected(self, coordinator):
        with pytest.raises(ValueError):
            coordinator.notify_action("launchRockets")

    def test_snapshot_is_immutable(self, coordinator):
        snapshot = coordinator.get_state()

        with pytest.raises(AttributeError):
            snapshot.ready = True

        coordinator.update_output_folder_state(True)
        assert snapshot.output_folder_set is False

    def test_reset(self, mp3_coordinator):
        received = []
        mp3_coordinator.add_event_listener(ReadinessEventKind.OUTPUT_FOLDER, received.append)

        mp3_coordinator.reset()

        assert mp3_coordinator.get_selected_format() == OutputFormat.WAV
        assert not mp3_coordinator.can_convert_to_mp3()
        mp3_coordinator.update_output_folder_state(True)
        assert len(received) == 1

    def test_reset_notifies_listeners(self, mp3_coordinator):
        mp3_coordinator.update_voice_state(False, True, VOICES, attempts=1)
        mp3_coordinator.update_output_folder_state(True)
        mp3_coordinator.update_initialization_state(False)
        assert mp3_coordinator.is_ready()
        events = record(mp3_coordinator)

        mp3_coordinator.reset()

        assert [kind for kind, _ in events] == [
            ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE,
            ReadinessEventKind.FORMAT_AVAILABILITY,
            ReadinessEventKind.STATE_CHANGE,
        ]
        assert events[0][1].previous_format == OutputFormat.MP3
        assert events[1][1].mp3_available is False
        change = events[2][1]
        assert change.section == ReadinessEventKind.STATE_CHANGE
        assert change.ready_changed
        assert change.previous.ready and not change.current.ready

    def test_reset_of_initial_state_only_reports_state_change(self, coordinator):
        events = record(coordinator)

        coordinator.reset()

        assert [kind for kind, _ in events] == [ReadinessEventKind.STATE_CHANGE]
        assert not events[0][1].ready_changed
