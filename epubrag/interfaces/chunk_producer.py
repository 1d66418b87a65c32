"""Abstract base class for document chunk producers.

A producer turns a source (a file path for the EPUB processor) into an
ordered sequence of ``(text, position)`` pairs.  The ingestion pipeline
consumes that sequence without knowing anything about the document format.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IChunkProducer(ABC):
    """Contract for components that split a document into candidate chunks."""

    @abstractmethod
    def produce_chunks(self, source: str) -> list[tuple[str, int]]:
        """Return the document's chunks in reading order.

        Parameters
        ----------
        source:
            Identifier of the document to read, typically a file path.

        Returns
        -------
        list[tuple[str, int]]
            ``(chunk_text, position)`` pairs; positions are zero-based and
            increase with reading order.

        Raises
        ------
        epubrag.utils.errors.DocumentError
            If the document cannot be opened or read.
        """
