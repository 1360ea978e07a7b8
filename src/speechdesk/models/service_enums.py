"""
Service Status Enumerations

This module contains service and capability enums to avoid circular imports.
"""

from enum import Enum


class ServiceStatus(Enum):
    """Service status enumeration."""
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    ERROR = "error"


class FFmpegSource(Enum):
    """Where a usable ffmpeg binary was found."""
    BUNDLED = "bundled"
    SYSTEM = "system"
    NONE = "none"


class OutputFormat(Enum):
    """Audio output formats offered by the converter."""
    WAV = "wav"
    MP3 = "mp3"

    @classmethod
    def parse(cls, value) -> "OutputFormat":
        """
        Coerce a string or OutputFormat into an OutputFormat.

        Raises:
            ValueError: If the value does not name a known format
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip().lower())
        raise ValueError(f"Invalid format: {value!r}")
