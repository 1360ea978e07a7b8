"""
SpeechDesk Utilities Package

This package contains utility functions and helpers for the SpeechDesk startup core.
"""

from speechdesk.utils.event_bus import EventBus
from speechdesk.utils.text_segmenter import split_text, TextSegmenter

__all__ = ["EventBus", "split_text", "TextSegmenter"]
