"""
Voice Loader Service

This module implements the VoiceLoader service, which obtains the list of
synthesis voices from the external voice listing command and retries
transient failures with exponential backoff.

Retry sequence:
    Idle -> Attempting(1) -> Success
                          -> BackoffWait(delay(1)) -> Attempting(2) -> ...
                          -> Exhausted after max_attempts

An attempt that parses zero voices counts as a failed attempt and goes
through the same backoff path as an attempt that raised.

Only one sequence runs at a time. An automatic load requested while one is
in flight joins it; a manual retry requested while one is in flight is ignored.
A running sequence is shielded from caller cancellation and always runs to
completion or to its own timeouts.
"""

import asyncio
import re
from typing import Awaitable, Callable, List, Optional, Sequence

from speechdesk.models.app_settings import CoreSettings
from speechdesk.models.error import SpeechDeskError
from speechdesk.models.loader_events import (
    LoaderEventKind, LoadStartedEvent, LoadAttemptEvent, RetryScheduledEvent,
    LoadSucceededEvent, LoadFailedEvent, PAYLOAD_TYPES
)
from speechdesk.models.retry_config import (
    RetryConfig, RetryConfigs, RetryAttempt, LoadAttemptState, VoiceLoadResult,
    create_retry_callback
)
from speechdesk.models.service_enums import ServiceStatus
from speechdesk.models.voice import Voice
from speechdesk.services.core.base_service import BaseService
from speechdesk.services.process_runner import AsyncProcessRunner, ProcessRunner
from speechdesk.utils.error_handler import ErrorCode, create_error, get_troubleshooting_steps
from speechdesk.utils.event_bus import EventBus


DEFAULT_VOICE_LIST_COMMAND = ("edge-tts", "--list-voices")
DEFAULT_ENUMERATION_TIMEOUT = 5.0

# Name: en-US-AriaNeural, Gender: Female, Language: en-US
VOICE_LINE_PATTERN = re.compile(
    r"Name:\s*([^,]+?)\s*,\s*Gender:\s*([^,]+?)\s*,\s*Language:\s*([^,\s]+)"
)


def parse_voice_list(output: str, default_locale: str = "en") -> List[Voice]:
    """
    Parse the voice listing command's output.

    Each line must carry a name, a gender and a language in the form
    ``Name: <n>, Gender: <g>, Language: <l>``. Other lines are skipped.
    The first voice whose language starts with ``default_locale`` is marked
    as the default.

    Args:
        output: Raw standard output of the listing command
        default_locale: Locale prefix for the default voice

    Returns:
        List[Voice]: Voices in output order

    Raises:
        SpeechDeskError: NO_VOICES_FOUND when no line is well-formed
    """
    voices = []
    default_marked = False

    for line in output.splitlines():
        match = VOICE_LINE_PATTERN.search(line)
        if not match:
            continue

        name, gender, language = (group.strip() for group in match.groups())
        is_default = not default_marked and language.lower().startswith(default_locale.lower())
        default_marked = default_marked or is_default

        voices.append(Voice(
            id=name,
            name=name,
            gender=gender,
            language=language,
            is_default=is_default
        ))

    if not voices:
        raise create_error(
            ErrorCode.NO_VOICES_FOUND.value,
            technical_details="No TTS voices found in the voice list output"
        )

    return voices


class VoiceLoader(BaseService):
    """
    Service that loads TTS voices with retry and backoff.

    Listeners registered with ``add_event_listener`` receive, for each
    sequence: STARTED, then ATTEMPT per attempt, RETRY_SCHEDULED after each
    failed non-final attempt, and exactly one SUCCESS or FAILED.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        retry_config: Optional[RetryConfig] = None,
        list_command: Optional[Sequence[str]] = None,
        enumeration_timeout: float = DEFAULT_ENUMERATION_TIMEOUT,
        default_locale: str = "en",
        backoff: Optional[Callable[[int], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        """
        Initialize the VoiceLoader.

        Args:
            runner: Process runner (defaults to AsyncProcessRunner)
            retry_config: Attempt count and backoff parameters
            list_command: Command printing the voice list
            enumeration_timeout: Seconds allowed for one listing call
            default_locale: Locale prefix of the default voice
            backoff: Delay policy ``attempt -> seconds`` (defaults to retry_config)
            sleep: Awaitable sleep used between attempts (defaults to asyncio.sleep)
        """
        super().__init__("VoiceLoader")

        self.runner = runner or AsyncProcessRunner()
        self.retry_config = retry_config or RetryConfigs.VOICE_LOADING
        self.list_command = list(list_command or DEFAULT_VOICE_LIST_COMMAND)
        self.enumeration_timeout = enumeration_timeout
        self.default_locale = default_locale

        self._backoff = backoff or self.retry_config.calculate_delay
        self._sleep = sleep or asyncio.sleep
        self._on_retry = create_retry_callback(self.logger)

        # Service state
        self._state = LoadAttemptState(max_attempts=self.retry_config.max_attempts)
        self._voices: List[Voice] = []
        self._inflight: Optional[asyncio.Future] = None
        self._events: EventBus[LoaderEventKind] = EventBus(PAYLOAD_TYPES, name="VoiceLoader.events")

        self.logger.debug(f"VoiceLoader initialized with command: {' '.join(self.list_command)}")

    @classmethod
    def from_settings(cls, settings: CoreSettings, runner: Optional[ProcessRunner] = None, **kwargs) -> 'VoiceLoader':
        """Build a loader from the core settings."""
        return cls(
            runner=runner,
            retry_config=settings.retry_config(),
            list_command=settings.voice_list_command,
            enumeration_timeout=settings.enumeration_timeout,
            default_locale=settings.default_voice_locale,
            **kwargs
        )

    # Service lifecycle

    async def start(self) -> bool:
        """
        Start the service by running the startup voice load.

        Returns:
            bool: True if voices were loaded
        """
        await self._update_status(ServiceStatus.STARTING)
        result = await self.load_with_retry()
        await self._update_status(ServiceStatus.RUNNING if result.success else ServiceStatus.ERROR)
        return result.success

    async def stop(self) -> bool:
        """
        Stop the service.

        An in-flight sequence is not interrupted; it finishes on its own.
        """
        await self._update_status(ServiceStatus.STOPPING)
        if self.is_loading():
            self.logger.info("Voice loading still in progress; it will finish in the background")
        await self._update_status(ServiceStatus.STOPPED)
        return True

    async def health_check(self) -> tuple[bool, Optional[SpeechDeskError]]:
        if self._voices:
            return True, None
        error = self._state.last_error
        if error is None:
            return False, create_error(ErrorCode.NO_VOICES_FOUND.value, technical_details="Voices not loaded yet")
        return False, SpeechDeskError.from_exception(error, "Voices could not be loaded")

    # Loading

    def is_loading(self) -> bool:
        """Whether a load sequence is in flight."""
        return self._state.is_loading

    async def load_with_retry(self, max_attempts: Optional[int] = None) -> VoiceLoadResult:
        """
        Load voices, retrying failures with exponential backoff.

        Never raises for load failures: the outcome, including troubleshooting
        steps on failure, is reported in the returned VoiceLoadResult.

        Args:
            max_attempts: Attempts for this sequence (defaults to retry_config)

        Returns:
            VoiceLoadResult: Outcome of the sequence
        """
        if self.is_loading() and self._inflight is not None:
            self.logger.info("Voice loading already in progress; waiting for the running sequence")
            return await asyncio.shield(self._inflight)

        attempts = self.retry_config.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        # Claim the in-flight flag before yielding to the event loop
        self._state.is_loading = True
        self._inflight = asyncio.ensure_future(self._run_sequence(attempts))
        return await asyncio.shield(self._inflight)

    async def retry_voice_loading(self) -> Optional[VoiceLoadResult]:
        """
        Manually retry loading voices.

        Resets the attempt counter and starts a new sequence. Does nothing
        while a sequence is already in flight.

        Returns:
            Optional[VoiceLoadResult]: Successful result, or None when ignored

        Raises:
            Exception: The last error of the sequence when every attempt failed
        """
        if self.is_loading():
            self.logger.info("Voice loading already in progress; manual retry ignored")
            return None

        self.logger.info("Manual voice loading retry requested")
        self._state.current_attempt = 0
        result = await self.load_with_retry()
        if not result.success:
            raise result.error
        return result

    async def enumerate_voices(self) -> List[Voice]:
        """
        Run the voice listing command once and parse its output.

        Raises:
            SpeechDeskError: If the command fails or lists no voices
            ProcessTimeoutError: If the command outlives the enumeration timeout
            OSError: If the command cannot be started
        """
        result = await self.runner.run(self.list_command, timeout=self.enumeration_timeout)
        if not result.ok:
            raise create_error(
                ErrorCode.VOICE_ENUMERATION_FAILED.value,
                technical_details=f"{' '.join(self.list_command)} exited with code "
                                  f"{result.returncode}: {result.stderr.strip()}"
            )
        return parse_voice_list(result.stdout, self.default_locale)

    async def _run_sequence(self, max_attempts: int) -> VoiceLoadResult:
        state = self._state
        state.is_loading = True
        state.current_attempt = 0
        state.max_attempts = max_attempts
        state.last_error = None

        self.logger.info(f"Loading voices (up to {max_attempts} attempts)")
        self._events.emit(LoaderEventKind.STARTED, LoadStartedEvent(max_attempts=max_attempts))

        try:
            for attempt in range(1, max_attempts + 1):
                state.current_attempt = attempt
                self._events.emit(LoaderEventKind.ATTEMPT, LoadAttemptEvent(attempt=attempt, max_attempts=max_attempts))

                try:
                    voices = await self.enumerate_voices()
                    if not voices:
                        raise create_error(ErrorCode.NO_VOICES_FOUND.value, technical_details="Voice list was empty")
                except Exception as e:
                    state.last_error = e
                    self.logger.debug(f"Voice loading attempt {attempt}/{max_attempts} failed: {e}")

                    if attempt >= max_attempts:
                        break

                    delay = self._backoff(attempt)
                    self._on_retry(RetryAttempt(attempt_number=attempt, error=e, delay_seconds=delay))
                    self._events.emit(
                        LoaderEventKind.RETRY_SCHEDULED,
                        RetryScheduledEvent(attempt=attempt, next_attempt=attempt + 1, delay_seconds=delay, error=e)
                    )
                    await self._sleep(delay)
                    continue

                self._voices = list(voices)
                state.last_error = None
                state.is_loading = False
                if attempt > 1:
                    self.logger.info(f"Loaded {len(voices)} voices on attempt {attempt} after {attempt - 1} failures")
                else:
                    self.logger.info(f"Loaded {len(voices)} voices")

                self._events.emit(LoaderEventKind.SUCCESS, LoadSucceededEvent(attempt=attempt, voices=list(voices)))
                return VoiceLoadResult(success=True, voices=list(voices), attempt=attempt, attempts=attempt)

            error = state.last_error
            state.is_loading = False
            message = self.handle_service_error(error, f"voice loading after {max_attempts} attempts")
            troubleshooting = list(message.action_suggestions)

            self._events.emit(
                LoaderEventKind.FAILED,
                LoadFailedEvent(attempts=max_attempts, error=error, troubleshooting=list(troubleshooting))
            )
            return VoiceLoadResult(
                success=False,
                attempt=max_attempts,
                attempts=max_attempts,
                error=error,
                troubleshooting=troubleshooting,
                user_message=message
            )
        finally:
            state.is_loading = False
            self._inflight = None

    # Queries

    def get_state(self) -> LoadAttemptState:
        """Get a copy of the current attempt state."""
        return self._state.copy()

    def get_voices(self) -> List[Voice]:
        """Get the voices from the last successful load."""
        return list(self._voices)

    def get_troubleshooting_steps(self, error: Optional[BaseException] = None) -> List[str]:
        """Troubleshooting steps for an error (defaults to the last failure)."""
        return get_troubleshooting_steps(error if error is not None else self._state.last_error)

    def add_event_listener(self, kind: LoaderEventKind, callback: Callable[[object], None]) -> None:
        self._events.subscribe(kind, callback)

    def remove_event_listener(self, kind: LoaderEventKind, callback: Callable[[object], None]) -> bool:
        return self._events.unsubscribe(kind, callback)

    def get_status_info(self):
        info = super().get_status_info()
        info.update({
            "is_loading": self._state.is_loading,
            "current_attempt": self._state.current_attempt,
            "max_attempts": self._state.max_attempts,
            "voice_count": len(self._voices),
            "last_error": str(self._state.last_error) if self._state.last_error else None,
        })
        return info
