"""Shared pytest fixtures for the epubrag test suite."""

from __future__ import annotations

import hashlib
import struct
from pathlib import Path

import pytest

from epubrag.interfaces.embedding_provider import IEmbeddingProvider
from epubrag.interfaces.llm_provider import ILLMProvider

_EMBEDDING_DIM = 128

# ---------------------------------------------------------------------------
# Sample book content
# ---------------------------------------------------------------------------

INTRO_PARAGRAPH = (
    "The lighthouse keeper kept a careful log of every ship that passed the "
    "northern rocks during the long winter."
)
STORM_PARAGRAPH = (
    "When the storm finally broke, the lamp room shook and the keeper climbed "
    "the stairs to trim the wick by hand."
)
HARBOUR_PARAGRAPH = (
    "In spring the harbour filled with fishing boats, and the village gathered "
    "on the quay to hear news from the mainland."
)


# ---------------------------------------------------------------------------
# Deterministic embedding provider
# ---------------------------------------------------------------------------


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic fixed-length vector by hashing *text*.

    Hash bytes are unpacked as unsigned 16-bit integers and mapped onto
    ``[-1, 1]`` before normalising to unit length, so every component is
    finite.  Same text, same vector.
    """
    raw = hashlib.sha256(text.encode("utf-8")).digest()
    while len(raw) < dim * 2:
        raw += hashlib.sha256(raw).digest()
    values = [v / 32767.5 - 1.0 for v in struct.unpack(f"<{dim}H", raw[: dim * 2])]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class HashEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider.

    ``overrides`` maps a text to either a fixed vector or an exception to
    raise for that text; every other text gets its hash vector.
    """

    def __init__(
        self,
        dim: int = _EMBEDDING_DIM,
        overrides: dict[str, object] | None = None,
    ) -> None:
        self._dim = dim
        self._overrides = dict(overrides or {})
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_single(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        override = self._overrides.get(text)
        if isinstance(override, BaseException):
            raise override
        if override is not None:
            return override  # type: ignore[return-value]
        return _hash_to_vector(text, self._dim)

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class FakeLLMProvider(ILLMProvider):
    """Records prompts and replies with a fixed answer (or raises)."""

    def __init__(self, reply: str = "A generated answer.", error: BaseException | None = None) -> None:
        self._reply = reply
        self._error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str, temperature: float = 0.3, max_tokens: int = 2048) -> str:
        self.prompts.append(prompt)
        if self._error is not None:
            raise self._error
        return self._reply

    def get_provider_name(self) -> str:
        return "mock-llm"

    def is_available(self) -> bool:
        return True

    async def validate_credentials(self) -> bool:
        return True


@pytest.fixture
def embedding_provider() -> HashEmbeddingProvider:
    return HashEmbeddingProvider()


@pytest.fixture
def fake_llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest.fixture
def make_embedding_provider() -> type[HashEmbeddingProvider]:
    """The provider class itself, for tests that need overrides or another dim."""
    return HashEmbeddingProvider


@pytest.fixture
def make_llm() -> type[FakeLLMProvider]:
    return FakeLLMProvider


# ---------------------------------------------------------------------------
# Real EPUB on disk
# ---------------------------------------------------------------------------


@pytest.fixture
def book_paragraphs() -> tuple[str, str, str]:
    """The three chunk-worthy paragraphs of ``sample_epub`` in reading order."""
    return INTRO_PARAGRAPH, STORM_PARAGRAPH, HARBOUR_PARAGRAPH


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """Write a small two-chapter EPUB with ebooklib and return its path."""
    from ebooklib import epub

    book = epub.EpubBook()
    book.set_identifier("epubrag-sample-001")
    book.set_title("The Northern Light")
    book.set_language("en")
    book.add_author("A. Keeper")

    intro = epub.EpubHtml(uid="intro", title="Introduction", file_name="intro.xhtml", lang="en")
    intro.content = (
        "<html><body>"
        "<h1>Introduction</h1>"
        f"<p>{INTRO_PARAGRAPH}</p>"
        "<p>Short note.</p>"
        "</body></html>"
    )
    storm = epub.EpubHtml(uid="storm", title="The Storm", file_name="storm.xhtml", lang="en")
    storm.content = (
        "<html><body>"
        "<h1>The Storm</h1>"
        f"<p>{STORM_PARAGRAPH}</p>"
        f"<p>{HARBOUR_PARAGRAPH}</p>"
        "</body></html>"
    )

    book.add_item(intro)
    book.add_item(storm)
    book.toc = (
        epub.Link("intro.xhtml", "Introduction", "intro"),
        epub.Link("storm.xhtml", "The Storm", "storm"),
    )
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = [intro, storm]

    path = tmp_path / "northern_light.epub"
    epub.write_epub(str(path), book, {})
    return path
