"""epubrag domain models - re-exports all public model classes."""

from epubrag.models.book import BookChapter, BookMetadata
from epubrag.models.rag import (
    AnswerResult,
    ChunkFailure,
    ChunkRecord,
    IngestionReport,
    SearchHit,
    StoreSnapshot,
)

__all__ = [
    "AnswerResult",
    "BookChapter",
    "BookMetadata",
    "ChunkFailure",
    "ChunkRecord",
    "IngestionReport",
    "SearchHit",
    "StoreSnapshot",
]
