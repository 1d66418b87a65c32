"""Ingestion: EPUB reading, Markdown conversion, paragraph chunking, embedding."""

from epubrag.services.ingestion.chunker import ParagraphChunker
from epubrag.services.ingestion.epub_processor import EPUBProcessor
from epubrag.services.ingestion.ingestion_service import IngestionService
from epubrag.services.ingestion.markdown import html_to_markdown

__all__ = ["EPUBProcessor", "IngestionService", "ParagraphChunker", "html_to_markdown"]
