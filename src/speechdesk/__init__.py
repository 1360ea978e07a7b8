"""
SpeechDesk - Desktop Text-to-Speech Startup Core

Startup resilience and readiness coordination for the SpeechDesk desktop
text-to-speech converter: ffmpeg capability probing, voice enumeration with
retry, text chunking and the readiness/format state machine.

Version: 1.0.0
Author: SpeechDesk Development Team
License: MIT
"""

__version__ = "1.0.0"
__author__ = "SpeechDesk Development Team"
__email__ = "support@speechdesk.local"
__license__ = "MIT"

# Package metadata
__title__ = "SpeechDesk"
__description__ = "Startup resilience and readiness coordination for a desktop TTS converter"
__url__ = "https://github.com/speechdesk/speechdesk"

# Import main application components
from speechdesk.services.capability_probe import FFmpegProbe
from speechdesk.services.voice_loader import VoiceLoader
from speechdesk.services.readiness_coordinator import ReadinessCoordinator
from speechdesk.utils.text_segmenter import split_text

__all__ = [
    "FFmpegProbe",
    "VoiceLoader",
    "ReadinessCoordinator",
    "split_text",
    "__version__",
    "__author__",
    "__title__",
    "__description__"
]
