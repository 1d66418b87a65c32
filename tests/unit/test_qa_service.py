"""Unit tests for QAService and its prompt helpers."""

from __future__ import annotations

import pytest

from epubrag.models.rag import ChunkRecord, SearchHit
from epubrag.services.qa_service import (
    NO_RELEVANT_CONTENT,
    QAService,
    build_context,
    build_prompt,
)
from epubrag.services.retrieval_service import RetrievalService
from epubrag.store.vector_store import VectorStore
from epubrag.utils.errors import EmbeddingError, GenerationError


def _hit(content: str, score: float) -> SearchHit:
    chunk = ChunkRecord(id=f"id-{content}", content=content, embedding=[1.0])
    return SearchHit(score=score, chunk=chunk)


def _store() -> VectorStore:
    store = VectorStore()
    store.add("The keeper lit the lamp at dusk.", [1.0, 0.0])
    store.add("Gulls nested on the cliffs.", [0.0, 1.0])
    return store


def _service(provider, llm, **kwargs) -> QAService:
    return QAService(llm=llm, retrieval=RetrievalService(provider), **kwargs)


class TestPromptHelpers:
    def test_context_with_scores(self) -> None:
        context = build_context([_hit("first", 0.87349), _hit("second", 0.5)])
        assert context == "(Score: 0.873) first\n\n(Score: 0.500) second"

    def test_context_without_scores(self) -> None:
        assert build_context([_hit("first", 0.9), _hit("second", 0.1)], show_scores=False) == (
            "first\n\nsecond"
        )

    def test_empty_context(self) -> None:
        assert build_context([]) == ""

    def test_prompt_template(self) -> None:
        prompt = build_prompt("Who lit the lamp?", "(Score: 0.900) The keeper.")
        assert prompt == (
            "Based on the following context from an EPUB book, answer the question: "
            "Who lit the lamp?\n\nContext:\n(Score: 0.900) The keeper.\n\nAnswer:"
        )

    def test_prompt_embeds_question_verbatim(self) -> None:
        question = "What about {braces} and\nnewlines?"
        assert question in build_prompt(question, "")


class TestAnswer:
    @pytest.mark.asyncio
    async def test_answer_uses_ranked_context(self, make_embedding_provider, fake_llm) -> None:
        provider = make_embedding_provider(overrides={"Who lit the lamp?": [1.0, 0.2]})
        service = _service(provider, fake_llm)

        result = await service.answer(_store(), "Who lit the lamp?", top_k=2)

        assert result.answer == "A generated answer."
        assert result.generated is True
        assert [h.content for h in result.hits] == [
            "The keeper lit the lamp at dusk.",
            "Gulls nested on the cliffs.",
        ]
        prompt = fake_llm.prompts[0]
        assert prompt.startswith(
            "Based on the following context from an EPUB book, answer the question: Who lit the lamp?"
        )
        assert prompt.index("The keeper lit the lamp") < prompt.index("Gulls nested")
        assert prompt.endswith("\n\nAnswer:")

    @pytest.mark.asyncio
    async def test_scores_can_be_hidden(self, make_embedding_provider, fake_llm) -> None:
        provider = make_embedding_provider(overrides={"q": [1.0, 0.0]})
        service = _service(provider, fake_llm, show_scores=False)

        await service.answer(_store(), "q", top_k=1)

        assert "Score:" not in fake_llm.prompts[0]

    @pytest.mark.asyncio
    async def test_empty_store_short_circuits(self, embedding_provider, fake_llm) -> None:
        service = _service(embedding_provider, fake_llm)

        result = await service.answer(VectorStore(), "Anything?", top_k=3)

        assert result.answer == NO_RELEVANT_CONTENT
        assert result.generated is False
        assert result.hits == []
        assert fake_llm.prompts == []

    @pytest.mark.asyncio
    async def test_empty_store_generate_policy_calls_model(self, embedding_provider, fake_llm) -> None:
        service = _service(embedding_provider, fake_llm, empty_context_policy="generate")

        result = await service.answer(VectorStore(), "Anything?", top_k=3)

        assert result.generated is True
        assert "Context:\n\n\nAnswer:" in fake_llm.prompts[0]

    def test_unknown_policy_rejected(self, embedding_provider, fake_llm) -> None:
        with pytest.raises(ValueError):
            _service(embedding_provider, fake_llm, empty_context_policy="guess")

    @pytest.mark.asyncio
    async def test_generation_error_carries_hits(self, make_embedding_provider, make_llm) -> None:
        provider = make_embedding_provider(overrides={"q": [1.0, 0.0]})
        llm = make_llm(error=GenerationError(message="model offline", provider_name="mock-llm"))
        service = _service(provider, llm)

        with pytest.raises(GenerationError) as exc_info:
            await service.answer(_store(), "q", top_k=2)

        assert exc_info.value.provider_name == "mock-llm"
        assert [h.content for h in exc_info.value.hits][0] == "The keeper lit the lamp at dusk."

    @pytest.mark.asyncio
    async def test_unexpected_llm_exception_becomes_generation_error(
        self, make_embedding_provider, make_llm
    ) -> None:
        provider = make_embedding_provider(overrides={"q": [1.0, 0.0]})
        service = _service(provider, make_llm(error=ConnectionError("reset")))

        with pytest.raises(GenerationError) as exc_info:
            await service.answer(_store(), "q", top_k=1)

        assert "ConnectionError" in exc_info.value.message
        assert len(exc_info.value.hits) == 1

    @pytest.mark.asyncio
    async def test_embedding_failure_is_not_wrapped(self, make_embedding_provider, fake_llm) -> None:
        provider = make_embedding_provider(overrides={"q": EmbeddingError(message="down")})
        service = _service(provider, fake_llm)

        with pytest.raises(EmbeddingError):
            await service.answer(_store(), "q", top_k=1)
        assert fake_llm.prompts == []
