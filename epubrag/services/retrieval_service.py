"""Question retrieval against a loaded vector store.

Embeds the question with the same provider that built the store and
delegates ranking to :meth:`VectorStore.search`.  There is no fallback:
if the question cannot be embedded the query fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from epubrag.models.rag import SearchHit
from epubrag.services.embeddings import validate_embedding

if TYPE_CHECKING:
    from epubrag.interfaces.embedding_provider import IEmbeddingProvider
    from epubrag.store.vector_store import VectorStore

logger = structlog.get_logger(logger_name=__name__)


class RetrievalService:
    """Ranks stored chunks against a free-text question.

    Parameters
    ----------
    embedding_provider:
        Provider used to embed the question.
    strict_dimensions:
        When ``True``, a question embedding whose length differs from the
        store's dimension raises
        :class:`~epubrag.utils.errors.DimensionMismatchError`.  When
        ``False`` it scores ``0.0`` against every chunk.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        strict_dimensions: bool = False,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._strict_dimensions = strict_dimensions

    async def query(self, store: VectorStore, question: str, top_k: int) -> list[SearchHit]:
        """Return the *top_k* chunks most similar to *question*, best first.

        Raises
        ------
        ValueError
            If *question* is blank or *top_k* is less than 1.
        EmbeddingError
            If the question cannot be embedded.
        DimensionMismatchError
            In strict mode, if the question embedding has the wrong length.
        """
        if not question.strip():
            raise ValueError("question must not be empty")
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")

        vector = validate_embedding(
            await self._embedding_provider.embed_single(question),
            self._embedding_provider.get_provider_name(),
        )
        if store.embedding_dim and len(vector) != store.embedding_dim and not self._strict_dimensions:
            logger.warning(
                "query_dimension_mismatch",
                expected=store.embedding_dim,
                actual=len(vector),
            )

        hits = store.search(vector, top_k, strict=self._strict_dimensions)
        logger.info(
            "retrieval_complete",
            top_k=top_k,
            hits=len(hits),
            best_score=round(hits[0].score, 4) if hits else None,
        )
        return hits
