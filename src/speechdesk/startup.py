"""
SpeechDesk Startup

Runs the startup checks and wires the loader, probe and coordinator together:
ffmpeg detection and voice loading run concurrently, their results feed the
ReadinessCoordinator, and the coordinator's retry action drives manual voice
reloads.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Set, Union

from speechdesk.models.capability_status import CapabilityStatus
from speechdesk.models.loader_events import LoaderEventKind, LoadAttemptEvent
from speechdesk.models.readiness_events import ReadinessEventKind, CoordinatorAction, ActionEvent
from speechdesk.models.retry_config import VoiceLoadResult
from speechdesk.services.capability_probe import FFmpegProbe
from speechdesk.services.readiness_coordinator import ReadinessCoordinator
from speechdesk.services.voice_loader import VoiceLoader


logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None):
    """
    Configure application logging.

    Args:
        level: Logging level name
        log_file: Optional file receiving a copy of the log
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )


@dataclass
class StartupReport:
    """Results of the startup checks."""
    capability: CapabilityStatus
    voices: VoiceLoadResult

    @property
    def ready_for_conversion(self) -> bool:
        return self.voices.success


async def run_startup_checks(
    coordinator: ReadinessCoordinator,
    probe: FFmpegProbe,
    loader: VoiceLoader
) -> StartupReport:
    """
    Detect ffmpeg and load voices, then publish both results.

    Neither check raises for an unavailable resource, so the initializing
    flag is always cleared when this returns.

    Args:
        coordinator: Coordinator receiving the results
        probe: FFmpeg detector
        loader: Voice loader

    Returns:
        StartupReport: Probe status and voice load outcome
    """
    logger.info("Running startup checks")
    coordinator.update_initialization_state(True)
    coordinator.update_voice_state(loading=True, loaded=False)

    capability, voices = await asyncio.gather(probe.detect(), loader.load_with_retry())

    coordinator.apply_capability_status(capability)
    coordinator.apply_voice_load_result(voices)
    coordinator.update_initialization_state(False)

    if capability.available:
        logger.info(f"FFmpeg {capability.version} found ({capability.source.value}) in {capability.detection_time:.2f}s")
    else:
        logger.warning(f"FFmpeg unavailable, MP3 output disabled: {capability.error}")

    return StartupReport(capability=capability, voices=voices)


def connect_retry_action(coordinator: ReadinessCoordinator, loader: VoiceLoader) -> Callable[[], None]:
    """
    Wire the coordinator to the voice loader.

    Loader attempts are mirrored into the coordinator's voice state, and a
    RETRY_VOICE_LOADING action starts a manual retry whose outcome is applied
    to the coordinator. Requires a running event loop when the action fires.

    Returns:
        Callable[[], None]: Function that removes the wiring
    """
    tasks: Set[asyncio.Task] = set()

    def on_attempt(event: LoadAttemptEvent):
        coordinator.update_voice_state(loading=True, loaded=False, attempts=event.attempt)

    async def retry():
        try:
            result = await loader.retry_voice_loading()
        except Exception as e:
            logger.error(f"Manual voice loading retry failed: {e}")
            coordinator.update_voice_state(
                loading=False,
                loaded=False,
                attempts=loader.get_state().current_attempt,
                error=e
            )
            return
        if result is not None:
            coordinator.apply_voice_load_result(result)

    def on_action(event: ActionEvent):
        if event.action != CoordinatorAction.RETRY_VOICE_LOADING:
            return
        task = asyncio.get_running_loop().create_task(retry())
        tasks.add(task)
        task.add_done_callback(tasks.discard)

    loader.add_event_listener(LoaderEventKind.ATTEMPT, on_attempt)
    coordinator.add_event_listener(ReadinessEventKind.ACTION, on_action)

    def disconnect():
        loader.remove_event_listener(LoaderEventKind.ATTEMPT, on_attempt)
        coordinator.remove_event_listener(ReadinessEventKind.ACTION, on_action)

    return disconnect
