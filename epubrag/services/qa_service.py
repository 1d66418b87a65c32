"""Retrieval-augmented answering over a vector store.

Data flow:
  1. RETRIEVE -- :class:`RetrievalService` returns the top-K passages.
  2. CONTEXT  -- passages are concatenated in ranked order, each optionally
                 prefixed with its score, separated by a blank line.
  3. PROMPT   -- the question and context are embedded verbatim in a fixed
                 template.
  4. GENERATE -- the prompt goes to the injected :class:`ILLMProvider` and
                 the reply is returned unchanged.

When retrieval comes back empty the configured ``empty_context_policy``
decides what happens: ``"short_circuit"`` answers with
:data:`NO_RELEVANT_CONTENT` without calling the model, ``"generate"``
calls the model with an empty context.

A generation failure is re-raised as :class:`GenerationError` carrying the
passages already retrieved, so callers can fall back to search results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import structlog

from epubrag.models.rag import AnswerResult, SearchHit
from epubrag.utils.errors import GenerationError

if TYPE_CHECKING:
    from epubrag.interfaces.llm_provider import ILLMProvider
    from epubrag.services.retrieval_service import RetrievalService
    from epubrag.store.vector_store import VectorStore

logger = structlog.get_logger(logger_name=__name__)

NO_RELEVANT_CONTENT = "No relevant content was found in the store for this question."

CONTEXT_SEPARATOR = "\n\n"

PROMPT_TEMPLATE = (
    "Based on the following context from an EPUB book, answer the question: {question}"
    "\n\nContext:\n{context}\n\nAnswer:"
)

EmptyContextPolicy = Literal["short_circuit", "generate"]


def build_context(hits: list[SearchHit], show_scores: bool = True) -> str:
    """Concatenate passage contents in ranked order.

    With *show_scores* each passage is prefixed ``(Score: 0.873)``.
    """
    if show_scores:
        blocks = [f"(Score: {hit.score:.3f}) {hit.content}" for hit in hits]
    else:
        blocks = [hit.content for hit in hits]
    return CONTEXT_SEPARATOR.join(blocks)


def build_prompt(question: str, context: str) -> str:
    return PROMPT_TEMPLATE.format(question=question, context=context)


class QAService:
    """Answers questions from retrieved passages.

    Parameters
    ----------
    llm:
        Generation provider.
    retrieval:
        Retrieval service used to find passages.
    empty_context_policy:
        ``"short_circuit"`` (default) or ``"generate"``.
    show_scores:
        Prefix each context passage with its similarity score.
    temperature, max_tokens:
        Passed through to :meth:`ILLMProvider.generate`.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        retrieval: RetrievalService,
        empty_context_policy: EmptyContextPolicy = "short_circuit",
        show_scores: bool = True,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> None:
        if empty_context_policy not in ("short_circuit", "generate"):
            raise ValueError(f"Unknown empty_context_policy: {empty_context_policy!r}")
        self._llm = llm
        self._retrieval = retrieval
        self._empty_context_policy = empty_context_policy
        self._show_scores = show_scores
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def answer(self, store: VectorStore, question: str, top_k: int) -> AnswerResult:
        """Retrieve passages for *question* and generate an answer from them.

        Raises
        ------
        EmbeddingError
            If the question cannot be embedded.
        GenerationError
            If the model call fails; ``exc.hits`` holds the retrieved passages.
        """
        hits = await self._retrieval.query(store, question, top_k)

        if not hits and self._empty_context_policy == "short_circuit":
            logger.info("answer_short_circuited", reason="no_hits")
            return AnswerResult(question=question, answer=NO_RELEVANT_CONTENT, hits=[], generated=False)

        prompt = build_prompt(question, build_context(hits, self._show_scores))
        try:
            text = await self._llm.generate(
                prompt,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except GenerationError as exc:
            logger.warning("answer_generation_failed", error=str(exc), hits=len(hits))
            raise GenerationError(
                message=exc.message,
                provider_name=exc.provider_name,
                hits=hits,
            ) from exc
        except Exception as exc:
            logger.warning("answer_generation_failed", error=str(exc), hits=len(hits))
            raise GenerationError(
                message=f"{type(exc).__name__}: {exc}",
                provider_name=self._llm.get_provider_name(),
                hits=hits,
            ) from exc

        logger.info(
            "answer_generated",
            provider=self._llm.get_provider_name(),
            hits=len(hits),
            answer_chars=len(text),
        )
        return AnswerResult(question=question, answer=text, hits=hits, generated=True)
