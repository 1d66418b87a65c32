"""Data models for the epubrag embedding store and retrieval layer.

Defines Pydantic v2 models for stored chunks, search hits, the persisted
store document, ingestion reports and generated answers.  All models use
frozen config to enforce immutability once constructed.

Flow overview:

    1. INGESTION: paragraph chunks from an e-book are embedded one by one
       and appended to a :class:`~epubrag.store.vector_store.VectorStore`
       as :class:`ChunkRecord` objects.  The run is summarised by an
       :class:`IngestionReport`.
    2. STORAGE: the store is written to disk as a :class:`StoreSnapshot`
       (pretty-printed JSON, human-inspectable).
    3. RETRIEVAL: a question embedding is ranked against every chunk;
       results come back as :class:`SearchHit` objects.
    4. GENERATION: the hits are formatted into a prompt context and the
       model's reply is wrapped in an :class:`AnswerResult`.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, model_validator

# Persisted numbers must be real, finite numbers and metadata values real
# strings; "0.5", true or NaN in the wrong place is a corrupt store.
EmbeddingValue = Annotated[StrictFloat, Field(allow_inf_nan=False)]


# ---------------------------------------------------------------------------
# ChunkRecord - the atomic stored unit.
# ---------------------------------------------------------------------------
class ChunkRecord(BaseModel):
    """A chunk of text with its embedding vector and passthrough metadata.

    ``metadata`` is opaque to the store.  The ingestion pipeline writes at
    least ``source`` (originating source identifier) and ``chunk_index``
    (position within the source) into it.
    """

    model_config = ConfigDict(frozen=True)

    id: StrictStr = Field(min_length=1, description="Globally unique identifier (UUID4).")
    content: StrictStr = Field(min_length=1, description="The chunk's textual content.")
    embedding: list[EmbeddingValue] = Field(
        min_length=1,
        description="Embedding vector; length equals the store's embedding_dim.",
    )
    metadata: dict[StrictStr, StrictStr] = Field(
        default_factory=dict,
        description="String-to-string metadata, passed through unchanged.",
    )


# ---------------------------------------------------------------------------
# StoreSnapshot - the persisted document format.
# ---------------------------------------------------------------------------
class StoreSnapshot(BaseModel):
    """Complete, self-describing serialisation of a vector store.

    Validation enforces the single-dimension invariant and id uniqueness so
    that a hand-edited or truncated file is rejected as a whole rather than
    partially loaded.
    """

    model_config = ConfigDict(frozen=True)

    embedding_dim: StrictInt = Field(ge=0, description="Length of every embedding in the store.")
    chunks: list[ChunkRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_dimensions(self) -> StoreSnapshot:
        if self.chunks and self.embedding_dim == 0:
            raise ValueError("embedding_dim is 0 but the store contains chunks")
        seen: set[str] = set()
        for position, chunk in enumerate(self.chunks):
            if len(chunk.embedding) != self.embedding_dim:
                raise ValueError(
                    f"chunk {position} has embedding length {len(chunk.embedding)}, "
                    f"expected {self.embedding_dim}"
                )
            if chunk.id in seen:
                raise ValueError(f"duplicate chunk id {chunk.id!r}")
            seen.add(chunk.id)
        return self


# ---------------------------------------------------------------------------
# SearchHit - one ranked result.
# ---------------------------------------------------------------------------
class SearchHit(BaseModel):
    """A stored chunk paired with its similarity to the query.

    Scores are cosine similarities: in ``[-1, 1]`` for non-zero vectors and
    exactly ``0.0`` for zero-norm or mismatched-length comparisons.
    """

    model_config = ConfigDict(frozen=True)

    score: float = Field(description="Cosine similarity between the query and this chunk.")
    chunk: ChunkRecord = Field(description="The matched chunk.")

    @property
    def content(self) -> str:
        return self.chunk.content


# ---------------------------------------------------------------------------
# Ingestion reporting
# ---------------------------------------------------------------------------
class ChunkFailure(BaseModel):
    """A chunk that could not be stored, and why."""

    model_config = ConfigDict(frozen=True)

    chunk_index: int = Field(ge=0, description="Position of the chunk in the source sequence.")
    reason: str = Field(description="Error message from the failed embed or insert.")


class IngestionReport(BaseModel):
    """Summary of a single ingestion run.

    ``chunks_skipped`` counts texts that were empty after trimming and never
    sent to the embedding service.  ``chunks_failed`` counts texts whose
    embedding call failed or whose embedding was rejected by the store;
    each of those has a matching entry in ``failures``.
    """

    model_config = ConfigDict(frozen=True)

    source_id: str = Field(description="Identifier of the ingested source.")
    store_path: str = Field(description="Where the resulting store was saved.")
    chunks_stored: int = Field(default=0, ge=0)
    chunks_skipped: int = Field(default=0, ge=0)
    chunks_failed: int = Field(default=0, ge=0)
    failures: list[ChunkFailure] = Field(default_factory=list)
    embedding_dim: int = Field(default=0, ge=0)
    ingestion_time: float = Field(
        default=0.0,
        ge=0.0,
        description="Wall-clock time in seconds for the ingestion run.",
    )


# ---------------------------------------------------------------------------
# AnswerResult - output of retrieval-augmented answering.
# ---------------------------------------------------------------------------
class AnswerResult(BaseModel):
    """A generated answer together with the passages it was grounded on.

    ``generated`` is ``False`` when no passages were retrieved and the
    service short-circuited with the "no relevant content" sentinel instead
    of calling the model.
    """

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    hits: list[SearchHit] = Field(default_factory=list)
    generated: bool = True
