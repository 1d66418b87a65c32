"""Source processor for EPUB book files.

Reads EPUB files using ebooklib and walks the **spine** (the publisher's
reading order, which can differ from manifest order).  Each content
document is converted from XHTML to Markdown, and the Markdown of the
whole book is split into paragraph chunks for embedding.

The processor also exposes the book's Dublin Core metadata and its raw
NCX table of contents for the ``inspect`` command.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog
from bs4 import BeautifulSoup
from ebooklib import epub

from epubrag.interfaces.chunk_producer import IChunkProducer
from epubrag.models.book import BookChapter, BookMetadata
from epubrag.services.ingestion.chunker import ParagraphChunker
from epubrag.services.ingestion.markdown import html_to_markdown
from epubrag.utils.errors import DocumentError

logger = structlog.get_logger(logger_name=__name__)

_NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
_CHAPTER_HEADING = re.compile(r"^h[1-3]$")


class EPUBProcessor(IChunkProducer):
    """Turns an EPUB file into Markdown chapters and paragraph chunks.

    Parameters
    ----------
    chunker:
        Paragraph splitter applied to the converted Markdown.  Defaults to
        a :class:`ParagraphChunker` with its default length threshold.
    """

    def __init__(self, chunker: ParagraphChunker | None = None) -> None:
        self._chunker = chunker or ParagraphChunker()

    # ------------------------------------------------------------------
    # IChunkProducer implementation
    # ------------------------------------------------------------------

    def produce_chunks(self, source: str) -> list[tuple[str, int]]:
        """Read the EPUB at *source* and return its paragraph chunks in reading order."""
        chapters = self.read_chapters(source)
        chunks = self._chunker.chunk(chapter.markdown for chapter in chapters)
        logger.info(
            "epub_processed",
            file_path=source,
            chapters=len(chapters),
            chunks=len(chunks),
        )
        return chunks

    # ------------------------------------------------------------------
    # Book structure
    # ------------------------------------------------------------------

    def read_metadata(self, file_path: str) -> BookMetadata:
        """Return title, creator and language from the package metadata."""
        book = self._open(file_path)
        return BookMetadata(
            title=_first_dc_value(book, "title"),
            creator=_first_dc_value(book, "creator"),
            language=_first_dc_value(book, "language"),
        )

    def read_chapters(self, file_path: str) -> list[BookChapter]:
        """Convert every spine item to Markdown, in spine order.

        Spine entries that point at a missing manifest item, or whose
        content cannot be read, are logged and skipped.
        """
        book = self._open(file_path)
        chapters: list[BookChapter] = []

        for index, entry in enumerate(book.spine):
            item_id = entry[0] if isinstance(entry, (tuple, list)) else entry
            item = book.get_item_with_id(item_id)
            if item is None:
                logger.warning("epub_spine_item_missing", file_path=file_path, item_id=item_id)
                continue
            try:
                html_content = item.get_content().decode("utf-8", errors="replace")
            except Exception as exc:  # noqa: BLE001 - ebooklib raises assorted lxml/zip errors
                logger.warning(
                    "epub_spine_item_unreadable",
                    file_path=file_path,
                    item_id=item_id,
                    error=str(exc),
                )
                continue

            chapters.append(
                BookChapter(
                    index=index,
                    item_id=item_id,
                    title=_chapter_title(html_content),
                    markdown=html_to_markdown(html_content),
                )
            )

        if not chapters:
            logger.warning("epub_no_chapters_extracted", file_path=file_path)
        return chapters

    def read_toc(self, file_path: str) -> str | None:
        """Return the raw NCX table of contents, or ``None`` if the book has none."""
        book = self._open(file_path)
        for item in book.get_items():
            if item.media_type == _NCX_MEDIA_TYPE:
                return item.get_content().decode("utf-8", errors="replace")
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _open(file_path: str) -> epub.EpubBook:
        if not Path(file_path).is_file():
            raise DocumentError(message=f"EPUB file not found: {file_path}")
        try:
            return epub.read_epub(file_path, options={"ignore_ncx": True})
        except Exception as exc:
            logger.error("epub_open_failed", file_path=file_path, error=str(exc))
            raise DocumentError(message=f"Failed to open EPUB file {file_path}: {exc}") from exc


def _first_dc_value(book: epub.EpubBook, name: str) -> str | None:
    values = book.get_metadata("DC", name)
    if not values:
        return None
    value = values[0][0]
    return value.strip() if isinstance(value, str) and value.strip() else None


def _chapter_title(html_content: str) -> str:
    heading = BeautifulSoup(html_content, "html.parser").find(_CHAPTER_HEADING)
    return heading.get_text(" ", strip=True) if heading else ""
