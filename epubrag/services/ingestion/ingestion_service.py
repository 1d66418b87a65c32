"""Orchestrator for the ingestion pipeline.

Pipeline stages: **produce -> embed -> store -> persist**.

:class:`IngestionService` receives an ordered sequence of raw chunk texts
(from an :class:`~epubrag.interfaces.chunk_producer.IChunkProducer`, or
directly from a caller), embeds each non-empty one through the injected
:class:`~epubrag.interfaces.embedding_provider.IEmbeddingProvider`, appends
the successes to a fresh :class:`~epubrag.store.vector_store.VectorStore`
and saves it.

Failure policy is per chunk: an embedding call that raises (or is
cancelled), returns malformed data, or returns a vector of the wrong
length marks that one chunk as failed.  The run always finishes with a
definite :class:`~epubrag.models.rag.IngestionReport`, and every failure is
both logged and listed in the report.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Sequence

import structlog

from epubrag.models.rag import ChunkFailure, IngestionReport
from epubrag.services.embeddings import validate_embedding
from epubrag.services.ingestion.epub_processor import EPUBProcessor
from epubrag.store.vector_store import VectorStore
from epubrag.utils.concurrency import throttled_gather
from epubrag.utils.errors import DimensionMismatchError, EmbeddingError

if TYPE_CHECKING:
    from epubrag.interfaces.chunk_producer import IChunkProducer
    from epubrag.interfaces.embedding_provider import IEmbeddingProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Builds and persists a vector store from chunk texts.

    Parameters
    ----------
    embedding_provider:
        Long-lived embedding client, shared with retrieval.
    concurrency:
        Maximum number of embedding calls in flight.  ``1`` embeds chunks
        one after another.
    embedding_dim:
        Fixed store dimension.  ``None`` (or ``0``) adopts the length of the
        first successful embedding.
    producer:
        Chunk producer used by :meth:`ingest_epub`.  Defaults to an
        :class:`EPUBProcessor`.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        concurrency: int = 1,
        embedding_dim: int | None = None,
        producer: IChunkProducer | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._embedding_provider = embedding_provider
        self._concurrency = concurrency
        self._embedding_dim = embedding_dim or None
        self._producer = producer or EPUBProcessor()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_epub(self, file_path: str, store_path: str) -> IngestionReport:
        """Ingest an EPUB file into a new store at *store_path*.

        The file path is recorded as the ``source`` of every chunk.

        Raises
        ------
        DocumentError
            If the EPUB cannot be opened.
        """
        produced = self._producer.produce_chunks(file_path)
        return await self.ingest_chunks(
            [text for text, _ in produced],
            file_path,
            store_path,
            positions=[position for _, position in produced],
        )

    async def ingest_chunks(
        self,
        chunks: Sequence[str],
        source_id: str,
        store_path: str,
        positions: Sequence[int] | None = None,
    ) -> IngestionReport:
        """Embed *chunks*, store the successes, and save the store.

        ``chunk_index`` in each stored chunk's metadata is the chunk's
        position in the source: the matching entry of *positions* when
        given, otherwise its index in *chunks* as given, counting the empty
        texts that were filtered out before embedding.  Texts are trimmed
        before embedding and storage.  A store is written even when no
        chunk succeeds.

        Parameters
        ----------
        chunks:
            Raw chunk texts in source order.
        source_id:
            Identifier recorded as ``source`` in every chunk's metadata.
        store_path:
            Where to save the resulting store (overwritten if present).
        positions:
            Source positions reported by a chunk producer, one per text.

        Returns
        -------
        IngestionReport
            Counts of stored, skipped (empty) and failed chunks.
        """
        if positions is not None and len(positions) != len(chunks):
            raise ValueError(
                f"positions has {len(positions)} entries for {len(chunks)} chunks"
            )
        start = time.monotonic()

        candidates: list[tuple[int, str]] = []
        skipped = 0
        for offset, raw in enumerate(chunks):
            text = raw.strip()
            if text:
                index = positions[offset] if positions is not None else offset
                candidates.append((index, text))
            else:
                skipped += 1

        logger.info(
            "ingestion_started",
            source=source_id,
            chunks=len(chunks),
            to_embed=len(candidates),
            skipped_empty=skipped,
            concurrency=self._concurrency,
        )

        results = await throttled_gather(
            [self._embedding_provider.embed_single(text) for _, text in candidates],
            limit=self._concurrency,
            return_exceptions=True,
        )

        store = VectorStore(embedding_dim=self._embedding_dim)
        failures: list[ChunkFailure] = []
        for (index, text), result in zip(candidates, results):
            try:
                embedding = self._embedding_from_result(result)
                store.add(
                    text,
                    embedding,
                    metadata={"source": source_id, "chunk_index": str(index)},
                )
            except (EmbeddingError, DimensionMismatchError) as exc:
                reason = str(exc)
                logger.warning("chunk_embed_failed", source=source_id, chunk_index=index, reason=reason)
                failures.append(ChunkFailure(chunk_index=index, reason=reason))

        store.save(store_path)

        report = IngestionReport(
            source_id=source_id,
            store_path=str(store_path),
            chunks_stored=len(store),
            chunks_skipped=skipped,
            chunks_failed=len(failures),
            failures=failures,
            embedding_dim=store.embedding_dim,
            ingestion_time=round(time.monotonic() - start, 3),
        )
        logger.info(
            "ingestion_complete",
            source=source_id,
            stored=report.chunks_stored,
            skipped=report.chunks_skipped,
            failed=report.chunks_failed,
            embedding_dim=report.embedding_dim,
            time_s=report.ingestion_time,
        )
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _embedding_from_result(self, result: object) -> list[float]:
        """Turn one gather result into a usable vector or raise :class:`EmbeddingError`."""
        provider = self._embedding_provider.get_provider_name()

        if isinstance(result, asyncio.CancelledError):
            raise EmbeddingError(message="Embedding call was cancelled", provider_name=provider)
        if isinstance(result, EmbeddingError):
            raise result
        if isinstance(result, BaseException):
            raise EmbeddingError(
                message=f"{type(result).__name__}: {result}", provider_name=provider
            )

        return validate_embedding(result, provider)
