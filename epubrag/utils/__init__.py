"""Utility modules for epubrag.

- **errors** -- Domain-specific exception hierarchy rooted at EpubRagError;
  each layer raises its own subclass so callers can handle failures
  granularly without broad ``except Exception`` blocks.
- **concurrency** -- bounded ``asyncio.gather`` used to fan out per-chunk
  embedding calls during ingestion.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from epubrag.utils.concurrency import throttled_gather
from epubrag.utils.errors import (
    ConfigurationError,
    DimensionMismatchError,
    DocumentError,
    EmbeddingError,
    EpubRagError,
    GenerationError,
    ProviderUnavailableError,
    StoreCorruptError,
    StoreNotFoundError,
)
from epubrag.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "DimensionMismatchError",
    "DocumentError",
    "EmbeddingError",
    "EpubRagError",
    "GenerationError",
    "ProviderUnavailableError",
    "StoreCorruptError",
    "StoreNotFoundError",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
