"""
Capability Status Models

Snapshot of an ffmpeg probe cycle.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from speechdesk.models.service_enums import FFmpegSource


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating a single ffmpeg candidate."""
    valid: bool
    version: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CapabilityStatus:
    """
    Result of one ffmpeg detection cycle.

    Replaced wholesale on every re-probe; never mutated.

    Attributes:
        available: Whether a usable ffmpeg binary was found
        source: Where it was found (bundled, system or none)
        validated: Whether the binary answered the version check
        path: Path or command name of the binary
        version: Version token parsed from the banner
        error: Last failure along the fallback chain when unavailable
        detection_time: Seconds spent probing
    """
    available: bool
    source: FFmpegSource = FFmpegSource.NONE
    validated: bool = False
    path: Optional[str] = None
    version: Optional[str] = None
    error: Optional[str] = None
    detection_time: float = 0.0

    @classmethod
    def unavailable(cls, error: str, detection_time: float = 0.0) -> 'CapabilityStatus':
        """Build the status reported when no candidate validated."""
        return cls(
            available=False,
            source=FFmpegSource.NONE,
            validated=False,
            error=error,
            detection_time=detection_time
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert status to dictionary for serialization."""
        return {
            "available": self.available,
            "source": self.source.value,
            "validated": self.validated,
            "path": self.path,
            "version": self.version,
            "error": self.error,
            "detection_time": self.detection_time,
        }
