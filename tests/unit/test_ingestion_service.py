"""Unit tests for IngestionService - embed, store and persist chunk texts."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from epubrag.interfaces.chunk_producer import IChunkProducer
from epubrag.services.ingestion.ingestion_service import IngestionService
from epubrag.store.vector_store import VectorStore
from epubrag.utils.errors import EmbeddingError

TEXT_A = "a" * 60
TEXT_B = "b" * 60
TEXT_C = "c" * 60


@pytest.fixture
def store_path(tmp_path: Path) -> str:
    return str(tmp_path / "store.json")


class TestIngestChunks:
    @pytest.mark.asyncio
    async def test_empty_texts_are_skipped_and_positions_kept(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(overrides={TEXT_A: [0.1, 0.2]})
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks(["", TEXT_A, "   "], "book.epub", store_path)

        assert report.chunks_stored == 1
        assert report.chunks_skipped == 2
        assert report.chunks_failed == 0
        assert report.embedding_dim == 2
        assert provider.calls == [TEXT_A]

        store = VectorStore.load(store_path)
        assert len(store) == 1
        chunk = store.chunks[0]
        assert chunk.content == TEXT_A
        assert chunk.embedding == [0.1, 0.2]
        assert chunk.metadata == {"source": "book.epub", "chunk_index": "1"}

    @pytest.mark.asyncio
    async def test_single_failure_does_not_abort_run(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(
            overrides={TEXT_B: EmbeddingError(message="timeout", provider_name="mock-embedding")}
        )
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks([TEXT_A, TEXT_B, TEXT_C], "src", store_path)

        assert report.chunks_stored == 2
        assert report.chunks_failed == 1
        assert report.failures[0].chunk_index == 1
        assert "timeout" in report.failures[0].reason

        store = VectorStore.load(store_path)
        assert [c.metadata["chunk_index"] for c in store.chunks] == ["0", "2"]

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_a_chunk_failure(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(overrides={TEXT_A: RuntimeError("socket closed")})
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks([TEXT_A, TEXT_B], "src", store_path)

        assert report.chunks_stored == 1
        assert report.failures[0].chunk_index == 0
        assert "RuntimeError" in report.failures[0].reason

    @pytest.mark.asyncio
    async def test_cancelled_call_is_a_chunk_failure(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(overrides={TEXT_B: asyncio.CancelledError()})
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks([TEXT_A, TEXT_B], "src", store_path)

        assert report.chunks_stored == 1
        assert report.chunks_failed == 1
        assert "cancelled" in report.failures[0].reason

    @pytest.mark.asyncio
    async def test_malformed_vector_is_a_chunk_failure(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(
            overrides={TEXT_A: [float("nan"), 1.0], TEXT_B: [], TEXT_C: [True, 1.0]}
        )
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks([TEXT_A, TEXT_B, TEXT_C], "src", store_path)

        assert report.chunks_stored == 0
        assert report.chunks_failed == 3

    @pytest.mark.asyncio
    async def test_wrong_dimension_fails_that_chunk_only(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(overrides={TEXT_B: [1.0, 2.0, 3.0]})
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks([TEXT_A, TEXT_B, TEXT_C], "src", store_path)

        assert report.chunks_stored == 2
        assert report.embedding_dim == 128
        assert report.failures[0].chunk_index == 1
        assert "dimension" in report.failures[0].reason.lower()

    @pytest.mark.asyncio
    async def test_fixed_dimension_is_enforced(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider, embedding_dim=64)

        report = await service.ingest_chunks([TEXT_A], "src", store_path)

        assert report.chunks_stored == 0
        assert report.chunks_failed == 1
        assert VectorStore.load(store_path).embedding_dim == 64

    @pytest.mark.asyncio
    async def test_empty_store_is_still_saved(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider)

        report = await service.ingest_chunks(["", "  "], "src", store_path)

        assert report.chunks_stored == 0
        assert report.chunks_skipped == 2
        raw = json.loads(Path(store_path).read_text(encoding="utf-8"))
        assert raw == {"embedding_dim": 0, "chunks": []}

    @pytest.mark.asyncio
    async def test_existing_store_is_replaced(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider)
        await service.ingest_chunks([TEXT_A, TEXT_B], "first", store_path)

        await service.ingest_chunks([TEXT_C], "second", store_path)

        store = VectorStore.load(store_path)
        assert [c.content for c in store.chunks] == [TEXT_C]
        assert store.sources() == ["second"]

    @pytest.mark.asyncio
    async def test_text_is_trimmed_before_storage(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider)

        await service.ingest_chunks([f"  {TEXT_A}\n"], "src", store_path)

        assert embedding_provider.calls == [TEXT_A]
        assert VectorStore.load(store_path).chunks[0].content == TEXT_A

    @pytest.mark.asyncio
    async def test_oversized_integer_is_a_chunk_failure(
        self, make_embedding_provider, store_path: str
    ) -> None:
        provider = make_embedding_provider(overrides={TEXT_A: [10**400, 1.0]})
        service = IngestionService(embedding_provider=provider)

        report = await service.ingest_chunks([TEXT_A, TEXT_B], "src", store_path)

        assert report.chunks_stored == 1
        assert report.failures[0].chunk_index == 0
        assert Path(store_path).exists()

    @pytest.mark.asyncio
    async def test_explicit_positions_are_recorded(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider)

        await service.ingest_chunks([TEXT_A, "", TEXT_B], "src", store_path, positions=[3, 4, 9])

        store = VectorStore.load(store_path)
        assert [c.metadata["chunk_index"] for c in store.chunks] == ["3", "9"]

    @pytest.mark.asyncio
    async def test_positions_length_must_match(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider)

        with pytest.raises(ValueError):
            await service.ingest_chunks([TEXT_A, TEXT_B], "src", store_path, positions=[0])


class TestConcurrency:
    def test_rejects_zero_concurrency(self, embedding_provider) -> None:
        with pytest.raises(ValueError):
            IngestionService(embedding_provider=embedding_provider, concurrency=0)

    @pytest.mark.asyncio
    async def test_in_flight_calls_are_bounded_and_order_preserved(
        self, make_embedding_provider, store_path: str
    ) -> None:
        base = make_embedding_provider

        class SlowProvider(base):
            def __init__(self) -> None:
                super().__init__()
                self.in_flight = 0
                self.peak = 0

            async def embed_single(self, text: str) -> list[float]:
                self.in_flight += 1
                self.peak = max(self.peak, self.in_flight)
                await asyncio.sleep(0.01)
                self.in_flight -= 1
                return await super().embed_single(text)

        provider = SlowProvider()
        service = IngestionService(embedding_provider=provider, concurrency=2)
        texts = [f"{i:02d}" + "x" * 60 for i in range(6)]

        report = await service.ingest_chunks(texts, "src", store_path)

        assert report.chunks_stored == 6
        assert provider.peak == 2
        store = VectorStore.load(store_path)
        assert [c.content for c in store.chunks] == texts
        assert [c.metadata["chunk_index"] for c in store.chunks] == [str(i) for i in range(6)]


class _GappedProducer(IChunkProducer):
    def produce_chunks(self, source: str) -> list[tuple[str, int]]:
        return [(TEXT_A, 0), (TEXT_B, 5)]


class TestIngestEpub:
    @pytest.mark.asyncio
    async def test_producer_positions_are_kept(self, embedding_provider, store_path: str) -> None:
        service = IngestionService(embedding_provider=embedding_provider, producer=_GappedProducer())

        report = await service.ingest_epub("gapped.epub", store_path)

        assert report.chunks_stored == 2
        store = VectorStore.load(store_path)
        assert [c.metadata["chunk_index"] for c in store.chunks] == ["0", "5"]

    @pytest.mark.asyncio
    async def test_ingest_epub_records_source_and_positions(
        self, embedding_provider, sample_epub: Path, book_paragraphs, store_path: str
    ) -> None:
        service = IngestionService(embedding_provider=embedding_provider)

        report = await service.ingest_epub(str(sample_epub), store_path)

        assert report.source_id == str(sample_epub)
        assert report.chunks_stored == 3
        store = VectorStore.load(store_path)
        assert [c.content for c in store.chunks] == list(book_paragraphs)
        assert {c.metadata["source"] for c in store.chunks} == {str(sample_epub)}
        assert [c.metadata["chunk_index"] for c in store.chunks] == ["0", "1", "2"]
