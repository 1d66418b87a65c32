"""Unit tests for Settings and the YAML configuration overlay."""

from __future__ import annotations

from pathlib import Path

import pytest

from epubrag.config.loader import load_settings
from epubrag.config.settings import Settings
from epubrag.utils.errors import ConfigurationError

_ENV_VARS = (
    "EMBEDDING_PROVIDER",
    "GENERATION_PROVIDER",
    "OLLAMA_BASE_URL",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "STORE_PATH",
    "RAG_TOP_K",
    "EMBED_CONCURRENCY",
    "EMPTY_CONTEXT_POLICY",
    "STRICT_QUERY_DIMENSIONS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # No stray .env file and no inherited configuration.
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _yaml(tmp_path: Path, text: str) -> str:
    path = tmp_path / "epubrag.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.embedding_provider == "ollama"
        assert settings.generation_provider == "ollama"
        assert settings.ollama_embedding_model == "mxbai-embed-large"
        assert settings.ollama_generation_model == "llama3.1"
        assert settings.embedding_dim == 0
        assert settings.min_chunk_chars == 50
        assert settings.rag_top_k == 5
        assert settings.strict_query_dimensions is False
        assert settings.empty_context_policy == "short_circuit"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RAG_TOP_K", "8")
        monkeypatch.setenv("STRICT_QUERY_DIMENSIONS", "true")
        settings = Settings()
        assert settings.rag_top_k == 8
        assert settings.strict_query_dimensions is True


class TestLoadSettings:
    def test_without_file_uses_defaults(self) -> None:
        assert load_settings(None).rag_top_k == 5

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = _yaml(tmp_path, "rag_top_k: 9\nstore_path: /tmp/books.json\n")
        settings = load_settings(path)
        assert settings.rag_top_k == 9
        assert settings.store_path == "/tmp/books.json"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RAG_TOP_K", "3")
        path = _yaml(tmp_path, "rag_top_k: 9\nembed_concurrency: 4\n")
        settings = load_settings(path)
        assert settings.rag_top_k == 3
        assert settings.embed_concurrency == 4

    def test_empty_file_is_allowed(self, tmp_path: Path) -> None:
        assert load_settings(_yaml(tmp_path, "")).rag_top_k == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(str(tmp_path / "absent.yaml"))

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="rag_topk"):
            load_settings(_yaml(tmp_path, "rag_topk: 3\n"))

    def test_non_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(_yaml(tmp_path, "- a\n- b\n"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(_yaml(tmp_path, "rag_top_k: [1, 2\n"))

    def test_invalid_value(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(_yaml(tmp_path, "rag_top_k: 0\n"))

    def test_invalid_provider_name(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(_yaml(tmp_path, "embedding_provider: word2vec\n"))
