"""In-memory vector store with JSON persistence.

The store is an insertion-ordered list of :class:`ChunkRecord` objects plus
the embedding dimensionality they all share.  It supports exactly four
operations:

* :meth:`VectorStore.add` -- append a chunk (the only mutation; there is no
  update or delete, re-ingestion builds a new store);
* :meth:`VectorStore.search` -- full linear scan ranked by cosine
  similarity, no index;
* :meth:`VectorStore.save` / :meth:`VectorStore.load` -- complete snapshot
  to / from a pretty-printed JSON document.

Dimension policy: a store created with ``embedding_dim=None`` adopts the
length of the first embedding added; a store created with an explicit
dimension enforces it from the start.  Either way every later insertion
must match, and a mismatch fails at :meth:`add`, never at query time.

Concurrency: each :meth:`load` returns an independent object.  Concurrent
readers of one file are safe.  Two writers saving to the same path are not
coordinated and the last rename wins.
"""

from __future__ import annotations

import json
import os
import tempfile
import uuid
from pathlib import Path
from typing import Iterator, Mapping, Sequence

import structlog
from pydantic import ValidationError

from epubrag.models.rag import ChunkRecord, SearchHit, StoreSnapshot
from epubrag.store.similarity import cosine_similarity
from epubrag.utils.errors import (
    DimensionMismatchError,
    StoreCorruptError,
    StoreNotFoundError,
)

logger = structlog.get_logger(logger_name=__name__)


class VectorStore:
    """Append-only collection of embedded chunks.

    Parameters
    ----------
    embedding_dim:
        Fixed embedding length.  ``None`` (or ``0``) defers the choice to
        the first :meth:`add`.
    """

    def __init__(self, embedding_dim: int | None = None) -> None:
        if embedding_dim is not None and embedding_dim < 0:
            raise ValueError(f"embedding_dim must be >= 0, got {embedding_dim}")
        self._embedding_dim = embedding_dim or 0
        self._chunks: list[ChunkRecord] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def embedding_dim(self) -> int:
        """Length every embedding must have; ``0`` while still unset."""
        return self._embedding_dim

    @property
    def chunks(self) -> tuple[ChunkRecord, ...]:
        """All chunks in insertion order."""
        return tuple(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self) -> Iterator[ChunkRecord]:
        return iter(tuple(self._chunks))

    def get(self, chunk_id: str) -> ChunkRecord | None:
        """Return the chunk with *chunk_id*, or ``None``."""
        for chunk in self._chunks:
            if chunk.id == chunk_id:
                return chunk
        return None

    def sources(self) -> list[str]:
        """Distinct ``source`` metadata values in first-seen order."""
        seen: dict[str, None] = {}
        for chunk in self._chunks:
            source = chunk.metadata.get("source")
            if source is not None:
                seen.setdefault(source, None)
        return list(seen)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(
        self,
        content: str,
        embedding: Sequence[float],
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        """Append a new chunk and return its freshly generated id.

        Raises
        ------
        DimensionMismatchError
            If the store's dimension is fixed and ``len(embedding)`` differs.
            The store is left unchanged.
        pydantic.ValidationError
            If *content* is empty, *embedding* is empty or holds a non-finite
            value, or *metadata* is not a string-to-string mapping.
        """
        vector = [float(v) for v in embedding]
        if self._embedding_dim and len(vector) != self._embedding_dim:
            raise DimensionMismatchError(expected=self._embedding_dim, actual=len(vector))

        chunk = ChunkRecord(
            id=str(uuid.uuid4()),
            content=content,
            embedding=vector,
            metadata=dict(metadata or {}),
        )
        if not self._embedding_dim:
            self._embedding_dim = len(vector)
            logger.debug("store_dimension_inferred", embedding_dim=self._embedding_dim)
        self._chunks.append(chunk)
        return chunk.id

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int,
        strict: bool = False,
    ) -> list[SearchHit]:
        """Rank every chunk against *query_embedding* and return the best *top_k*.

        Results are sorted by descending score; equal scores keep insertion
        order (Python's sort is stable).  An empty store, or ``top_k <= 0``,
        yields an empty list.

        A query whose length differs from :attr:`embedding_dim` scores
        ``0.0`` against every chunk, so the result is simply the first
        *top_k* chunks in insertion order.  Pass ``strict=True`` to raise
        :class:`DimensionMismatchError` instead.
        """
        if strict and self._embedding_dim and len(query_embedding) != self._embedding_dim:
            raise DimensionMismatchError(
                expected=self._embedding_dim,
                actual=len(query_embedding),
                message=(
                    f"Query embedding has length {len(query_embedding)}, "
                    f"store expects {self._embedding_dim}"
                ),
            )
        if top_k <= 0 or not self._chunks:
            return []

        scored = [
            SearchHit(score=cosine_similarity(query_embedding, chunk.embedding), chunk=chunk)
            for chunk in self._chunks
        ]
        scored.sort(key=lambda hit: hit.score, reverse=True)
        return scored[:top_k]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(embedding_dim=self._embedding_dim, chunks=list(self._chunks))

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> VectorStore:
        store = cls(embedding_dim=snapshot.embedding_dim)
        store._chunks = list(snapshot.chunks)
        return store

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write a complete snapshot of the store to *path*, replacing any file there.

        The JSON is written to a temporary file in the same directory and
        renamed over *path*, so readers never observe a half-written store.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        document = json.dumps(
            self.to_snapshot().model_dump(mode="python"),
            indent=2,
            ensure_ascii=False,
            allow_nan=False,
        )

        fd, tmp_name = tempfile.mkstemp(
            dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(document)
                fh.write("\n")
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(
            "store_saved",
            path=str(target),
            chunks=len(self._chunks),
            embedding_dim=self._embedding_dim,
        )

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> VectorStore:
        """Reconstruct a store previously written by :meth:`save`.

        Raises
        ------
        StoreNotFoundError
            If *path* does not exist.
        StoreCorruptError
            If the file is not valid JSON or does not describe a valid store
            (missing fields, malformed numbers, inconsistent embedding
            lengths, duplicate ids).  Nothing is partially loaded.
        """
        source = Path(path)
        if not source.is_file():
            raise StoreNotFoundError(path=str(source))

        try:
            raw = json.loads(source.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StoreCorruptError(
                path=str(source), message=f"Vector store {source} is not valid JSON: {exc}"
            ) from exc

        try:
            snapshot = StoreSnapshot.model_validate(raw)
        except ValidationError as exc:
            raise StoreCorruptError(
                path=str(source),
                message=(
                    f"Vector store {source} has an invalid structure: "
                    f"{exc.error_count()} error(s), first: {exc.errors()[0]['msg']}"
                ),
            ) from exc

        store = cls.from_snapshot(snapshot)
        logger.info(
            "store_loaded",
            path=str(source),
            chunks=len(store),
            embedding_dim=store.embedding_dim,
        )
        return store
