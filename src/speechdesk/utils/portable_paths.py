"""
Portable Path Management for SpeechDesk

This module resolves the locations of bundled resources in a portable
distribution. Bundled binaries live under the resources directory, keyed by
platform and CPU architecture:

    resources/<platform>/<arch>/<binary>

Usage:
    from speechdesk.utils.portable_paths import get_bundled_ffmpeg_path

    ffmpeg = get_bundled_ffmpeg_path()  # e.g. resources/win32/x64/ffmpeg.exe
"""

import sys
import platform
from pathlib import Path
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)


# platform.machine() spellings -> bundle directory names
_ARCH_ALIASES = {
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv8": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "ia32": "ia32",
}


def get_app_root() -> Path:
    """
    Get the root directory of the application.

    This function works correctly whether running:
    - From source (development)
    - As a PyInstaller executable (frozen)

    Returns:
        Path: Absolute path to the application root directory
    """
    if getattr(sys, 'frozen', False):
        # Running as compiled executable (PyInstaller)
        # We want the directory containing the executable
        app_root = Path(sys.executable).parent
    else:
        # Running from source (development mode)
        # Path: src/speechdesk/utils/portable_paths.py -> project_root
        app_root = Path(__file__).parent.parent.parent.parent

    logger.debug(f"Application root directory: {app_root}")
    return app_root.resolve()


def get_resources_path(resources_directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Get the bundled resources directory.

    Args:
        resources_directory: Explicit override (absolute, or relative to the app root)

    Returns:
        Path: Resources directory (not created if missing)
    """
    if resources_directory:
        path = Path(resources_directory)
        if not path.is_absolute():
            path = get_app_root() / path
        return path
    return get_app_root() / "resources"


def normalize_platform(system_platform: Optional[str] = None) -> str:
    """
    Map ``sys.platform`` to the bundle directory name.

    Returns:
        str: "win32", "darwin" or "linux" (other values pass through)
    """
    value = (system_platform or sys.platform).lower()
    if value.startswith("win") or value == "cygwin":
        return "win32"
    if value.startswith("linux"):
        return "linux"
    return value


def normalize_arch(machine: Optional[str] = None) -> str:
    """
    Map ``platform.machine()`` to the bundle directory name.

    Returns:
        str: "x64", "arm64" or "ia32" (unknown values are lower-cased and passed through)
    """
    value = (machine if machine is not None else platform.machine()).lower()
    return _ARCH_ALIASES.get(value, value or "unknown")


def get_ffmpeg_binary_name(system_platform: Optional[str] = None) -> str:
    """Executable file name of ffmpeg for a platform."""
    return "ffmpeg.exe" if normalize_platform(system_platform) == "win32" else "ffmpeg"


def get_bundled_ffmpeg_path(
    resources_directory: Optional[Union[str, Path]] = None,
    system_platform: Optional[str] = None,
    machine: Optional[str] = None
) -> Path:
    """
    Get the path where a bundled ffmpeg binary is expected.

    Args:
        resources_directory: Override for the resources directory
        system_platform: Override for ``sys.platform``
        machine: Override for ``platform.machine()``

    Returns:
        Path: Expected binary path (it may not exist)

    Example:
        Returns: C:/Users/JohnDoe/SpeechDesk/resources/win32/x64/ffmpeg.exe
    """
    path = (
        get_resources_path(resources_directory)
        / normalize_platform(system_platform)
        / normalize_arch(machine)
        / get_ffmpeg_binary_name(system_platform)
    )
    logger.debug(f"Bundled ffmpeg path: {path}")
    return path
