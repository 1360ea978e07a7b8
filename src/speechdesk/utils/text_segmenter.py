"""
Text Segmenter Utility

Splits long text into chunks the synthesis engine accepts. Chunks break at
sentence ends where possible, then at whitespace, and only hard-cut a single
token that is longer than the limit.
"""

import logging
import re
from typing import List

from speechdesk.models.app_settings import CoreSettings, MIN_CHUNK_LENGTH, MAX_CHUNK_LENGTH


logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"[.!?]\s")
WHITESPACE = re.compile(r"\s")


def split_text(text: str, max_length: int) -> List[str]:
    """
    Split text into chunks of at most ``max_length`` characters.

    Args:
        text: Text to split
        max_length: Maximum characters per chunk

    Returns:
        List[str]: ``[text]`` unchanged when it fits, otherwise trimmed non-empty chunks

    Raises:
        ValueError: If max_length is not positive
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    if len(text) <= max_length:
        return [text]

    chunks = []
    remaining = text.lstrip()

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining.strip())
            break

        # One extra character so a boundary right at the limit is visible
        window = remaining[:max_length + 1]
        cut = _find_cut(window, max_length)

        chunks.append(remaining[:cut].strip())
        remaining = remaining[cut:].lstrip()

    return [chunk for chunk in chunks if chunk]


def _find_cut(window: str, max_length: int) -> int:
    sentence_end = None
    for match in SENTENCE_BOUNDARY.finditer(window):
        sentence_end = match.start() + 1
    if sentence_end is not None:
        return sentence_end

    whitespace = None
    for match in WHITESPACE.finditer(window):
        whitespace = match.start()
    if whitespace:
        return whitespace

    return max_length


class TextSegmenter:
    """Splits text with a configured chunk length."""

    def __init__(self, max_chunk_length: int = 5000):
        if not MIN_CHUNK_LENGTH <= max_chunk_length <= MAX_CHUNK_LENGTH:
            raise ValueError(
                f"Max chunk length must be between {MIN_CHUNK_LENGTH:,} and {MAX_CHUNK_LENGTH:,} characters"
            )
        self.max_chunk_length = max_chunk_length

    @classmethod
    def from_settings(cls, settings: CoreSettings) -> 'TextSegmenter':
        return cls(settings.max_chunk_length)

    def split(self, text: str) -> List[str]:
        chunks = split_text(text, self.max_chunk_length)
        if len(chunks) > 1:
            logger.debug(f"Split {len(text)} characters into {len(chunks)} chunks")
        return chunks
