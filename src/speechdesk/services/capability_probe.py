"""
FFmpeg Capability Probe

This module answers "is there a usable ffmpeg, and where" for MP3 output.
Candidates are tried in order until one validates:

1. the bundled binary under resources/<platform>/<arch>/
2. the path reported by the platform locate command (where/which)
3. the bare command name, resolved by the OS search path

The probe never raises. Every failure along the chain is recorded only in the
``error`` field of the returned CapabilityStatus, since a missing encoder just
means MP3 output is unavailable.
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from speechdesk.models.app_settings import CoreSettings
from speechdesk.models.capability_status import CapabilityStatus, ValidationOutcome
from speechdesk.models.service_enums import FFmpegSource
from speechdesk.services.process_runner import AsyncProcessRunner, ProcessRunner, ProcessTimeoutError
from speechdesk.utils.portable_paths import get_bundled_ffmpeg_path, normalize_platform


VERSION_PATTERN = re.compile(r"version\s+(\S+)", re.IGNORECASE)

DEFAULT_VALIDATION_TIMEOUT = 5.0
DEFAULT_LOCATE_TIMEOUT = 5.0


class FFmpegProbe:
    """
    Detects and validates an ffmpeg executable.

    Stateless per call: ``detect()`` may be invoked again at any time to
    re-probe, and each call returns a fresh CapabilityStatus.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        bundled_path: Optional[Union[str, Path]] = None,
        validation_timeout: float = DEFAULT_VALIDATION_TIMEOUT,
        locate_timeout: float = DEFAULT_LOCATE_TIMEOUT,
        system_platform: Optional[str] = None,
        command_name: str = "ffmpeg",
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the probe.

        Args:
            runner: Process runner (defaults to AsyncProcessRunner)
            bundled_path: Override for the bundled binary location
            validation_timeout: Seconds allowed for ``ffmpeg -version``
            locate_timeout: Seconds allowed for the where/which lookup
            system_platform: Override for ``sys.platform``
            command_name: Bare command tried as the last resort
            clock: Monotonic clock used for detection timing
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.runner = runner or AsyncProcessRunner()
        self._bundled_path = Path(bundled_path) if bundled_path else None
        self.validation_timeout = validation_timeout
        self.locate_timeout = locate_timeout
        self.system_platform = system_platform
        self.command_name = command_name
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: CoreSettings, runner: Optional[ProcessRunner] = None) -> 'FFmpegProbe':
        """Build a probe from the core settings."""
        return cls(
            runner=runner,
            bundled_path=get_bundled_ffmpeg_path(settings.resources_directory),
            validation_timeout=settings.probe_timeout,
            locate_timeout=settings.locate_timeout
        )

    def get_bundled_path(self) -> Path:
        """Get the path where the bundled binary is expected."""
        if self._bundled_path is not None:
            return self._bundled_path
        return get_bundled_ffmpeg_path(system_platform=self.system_platform)

    async def detect(self) -> CapabilityStatus:
        """
        Run the bundled-then-system fallback chain.

        Returns:
            CapabilityStatus: First candidate that validated, or an
            unavailable status carrying the last failure
        """
        start_time = self._clock()

        try:
            bundled_path = str(self.get_bundled_path())
            outcome = await self.validate(bundled_path)
            if outcome.valid:
                self.logger.info(f"Using bundled FFmpeg {outcome.version} at {bundled_path}")
                return CapabilityStatus(
                    available=True,
                    source=FFmpegSource.BUNDLED,
                    validated=True,
                    path=bundled_path,
                    version=outcome.version,
                    detection_time=self._clock() - start_time
                )

            self.logger.info(f"Bundled FFmpeg unusable ({outcome.error}); trying system FFmpeg")
            last_error = outcome.error

            for candidate in await self._system_candidates():
                outcome = await self.validate(candidate)
                if outcome.valid:
                    self.logger.info(f"Using system FFmpeg {outcome.version} at {candidate}")
                    return CapabilityStatus(
                        available=True,
                        source=FFmpegSource.SYSTEM,
                        validated=True,
                        path=candidate,
                        version=outcome.version,
                        detection_time=self._clock() - start_time
                    )
                self.logger.debug(f"System FFmpeg candidate {candidate} rejected: {outcome.error}")
                last_error = outcome.error

            self.logger.warning(f"No working FFmpeg installation found; MP3 output disabled ({last_error})")
            return CapabilityStatus.unavailable(
                error=f"No working FFmpeg installation found: {last_error}",
                detection_time=self._clock() - start_time
            )

        except Exception as e:
            self.logger.exception(f"FFmpeg detection failed unexpectedly: {e}")
            return CapabilityStatus.unavailable(
                error=f"FFmpeg initialization failed: {e}",
                detection_time=self._clock() - start_time
            )

    async def validate(self, ffmpeg_path: Optional[str]) -> ValidationOutcome:
        """
        Check that a candidate runs and reports a version.

        Args:
            ffmpeg_path: File path, or a bare command name resolved via PATH

        Returns:
            ValidationOutcome: valid flag plus version or error
        """
        if not ffmpeg_path:
            return ValidationOutcome(valid=False, error="No FFmpeg path provided")

        if self._is_filesystem_path(ffmpeg_path) and not Path(ffmpeg_path).is_file():
            return ValidationOutcome(valid=False, error=f"FFmpeg not found at {ffmpeg_path}")

        try:
            result = await self.runner.run([ffmpeg_path, "-version"], timeout=self.validation_timeout)
        except ProcessTimeoutError as e:
            return ValidationOutcome(valid=False, error=f"FFmpeg validation timed out: {e}")
        except OSError as e:
            return ValidationOutcome(valid=False, error=f"FFmpeg validation failed: {e}")

        if not result.ok:
            details = result.stderr.strip().splitlines()
            suffix = f": {details[-1]}" if details else ""
            return ValidationOutcome(
                valid=False,
                error=f"FFmpeg exited with code {result.returncode}{suffix}"
            )

        match = VERSION_PATTERN.search(result.stdout)
        if not match:
            return ValidationOutcome(valid=False, error="FFmpeg version check failed: unrecognized output")

        return ValidationOutcome(valid=True, version=match.group(1))

    async def locate_system_binary(self) -> Optional[str]:
        """Ask the platform locate command where ffmpeg lives."""
        candidate, _ = await self._locate()
        return candidate

    async def _system_candidates(self) -> List[str]:
        candidates = []
        located, locate_error = await self._locate()
        if located:
            candidates.append(located)
        elif locate_error:
            self.logger.debug(f"System FFmpeg lookup failed: {locate_error}")

        if self.command_name not in candidates:
            candidates.append(self.command_name)
        return candidates

    async def _locate(self) -> Tuple[Optional[str], Optional[str]]:
        locate_command = "where" if normalize_platform(self.system_platform) == "win32" else "which"

        try:
            result = await self.runner.run([locate_command, self.command_name], timeout=self.locate_timeout)
        except (ProcessTimeoutError, OSError) as e:
            return None, f"{locate_command} {self.command_name} failed: {e}"

        if not result.ok:
            return None, f"{locate_command} {self.command_name} exited with code {result.returncode}"

        for line in result.stdout.splitlines():
            if line.strip():
                return line.strip(), None
        return None, f"{locate_command} {self.command_name} returned no path"

    @staticmethod
    def _is_filesystem_path(value: str) -> bool:
        return os.sep in value or "/" in value or Path(value).is_absolute()
