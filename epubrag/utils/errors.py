"""Custom exception hierarchy for epubrag.

All application exceptions inherit from :class:`EpubRagError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "ollama", "openai", "anthropic") caused the failure.

The hierarchy is organized by the layer that raises it:

    EpubRagError  (base -- catch-all for any epubrag error)
    +-- DimensionMismatchError   (store: embedding length disagrees with store)
    +-- StoreNotFoundError       (store: persisted file does not exist)
    +-- StoreCorruptError        (store: persisted file does not parse)
    +-- EmbeddingError           (embedding provider call failed / malformed)
    +-- GenerationError          (generation provider call failed)
    +-- DocumentError            (e-book could not be opened or read)
    +-- ConfigurationError       (startup / bad settings)
    +-- ProviderUnavailableError (external service down / unreachable)

Store errors are structural and always surfaced.  Only the batch
ingestion boundary recovers from :class:`EmbeddingError` and
:class:`DimensionMismatchError`, one chunk at a time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from epubrag.models.rag import SearchHit


class EpubRagError(Exception):
    """Base exception for all epubrag errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[ollama] connection refused``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------

class DimensionMismatchError(EpubRagError):
    """Raised when an embedding's length disagrees with the store's dimension.

    Fatal to the single insertion (or strict query) that triggered it; the
    store itself is left unchanged.
    """

    def __init__(self, expected: int, actual: int, message: str | None = None) -> None:
        self._expected = expected
        self._actual = actual
        super().__init__(
            message=message
            or f"Embedding dimension mismatch: expected {expected}, got {actual}",
        )

    @property
    def expected(self) -> int:
        return self._expected

    @property
    def actual(self) -> int:
        return self._actual


class StoreNotFoundError(EpubRagError):
    """Raised when loading a store from a path that does not exist."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self._path = path
        super().__init__(message=message or f"Vector store not found: {path}")

    @property
    def path(self) -> str:
        return self._path


class StoreCorruptError(EpubRagError):
    """Raised when a persisted store does not parse into a valid store.

    Covers malformed JSON, missing fields, non-numeric embedding values and
    embeddings whose lengths violate the single-dimension invariant.
    """

    def __init__(self, path: str, message: str | None = None) -> None:
        self._path = path
        super().__init__(message=message or f"Vector store is corrupt: {path}")

    @property
    def path(self) -> str:
        return self._path


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class EmbeddingError(EpubRagError):
    """Raised when an embedding call fails or returns malformed data."""

    def __init__(
        self,
        message: str = "Embedding call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class GenerationError(EpubRagError):
    """Raised when a generation call fails.

    When raised from the answer service, ``hits`` holds the retrieval
    results that were already computed so the caller can degrade to
    search-only output instead of losing them.
    """

    def __init__(
        self,
        message: str = "Generation call failed",
        provider_name: str | None = None,
        hits: list[SearchHit] | None = None,
    ) -> None:
        self._hits = list(hits or [])
        super().__init__(message=message, provider_name=provider_name)

    @property
    def hits(self) -> list[SearchHit]:
        return list(self._hits)


class ProviderUnavailableError(EpubRagError):
    """Raised when an external service or provider is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Input / configuration errors
# ---------------------------------------------------------------------------

class DocumentError(EpubRagError):
    """Raised when an e-book cannot be opened or its content cannot be read."""

    def __init__(
        self,
        message: str = "Document could not be read",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(EpubRagError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
