"""Paragraph chunking for Markdown text.

Splits Markdown on blank lines and keeps only paragraphs long enough to be
worth embedding.  Headings, captions and stray page numbers fall under the
threshold and are dropped.
"""

from __future__ import annotations

from typing import Iterable

import structlog

logger = structlog.get_logger(logger_name=__name__)

_PARAGRAPH_SEPARATOR = "\n\n"


class ParagraphChunker:
    """Splits Markdown documents into paragraph chunks.

    Parameters
    ----------
    min_chars:
        Paragraphs whose trimmed length is less than or equal to this value
        are discarded (default 50).
    """

    def __init__(self, min_chars: int = 50) -> None:
        if min_chars < 0:
            raise ValueError(f"min_chars must be >= 0, got {min_chars}")
        self._min_chars = min_chars

    @property
    def min_chars(self) -> int:
        return self._min_chars

    def split(self, markdown: str) -> list[str]:
        """Return the paragraphs of *markdown* that pass the length filter."""
        paragraphs: list[str] = []
        for raw in markdown.split(_PARAGRAPH_SEPARATOR):
            paragraph = raw.strip()
            if paragraph and len(paragraph) > self._min_chars:
                paragraphs.append(paragraph)
        return paragraphs

    def chunk(self, documents: Iterable[str]) -> list[tuple[str, int]]:
        """Split several documents in order and number the surviving paragraphs.

        Positions are zero-based and consecutive across all documents.
        """
        chunks: list[tuple[str, int]] = []
        dropped = 0
        for markdown in documents:
            kept = self.split(markdown)
            dropped += sum(1 for p in markdown.split(_PARAGRAPH_SEPARATOR) if p.strip()) - len(kept)
            for paragraph in kept:
                chunks.append((paragraph, len(chunks)))

        logger.debug(
            "paragraphs_chunked",
            chunks=len(chunks),
            dropped_short=dropped,
            min_chars=self._min_chars,
        )
        return chunks
