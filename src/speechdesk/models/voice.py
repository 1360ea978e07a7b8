"""
Voice Model

A synthesis voice reported by the voice listing command.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class Voice:
    """
    A text-to-speech voice.

    Attributes:
        id: Identifier passed to the synthesis engine (same as name)
        name: Voice name, e.g. "en-US-AriaNeural"
        gender: Reported gender
        language: Locale code, e.g. "en-US"
        is_default: Whether this is the suggested default voice
    """
    id: str
    name: str
    gender: str
    language: str
    is_default: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert voice to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "gender": self.gender,
            "language": self.language,
            "is_default": self.is_default,
        }
