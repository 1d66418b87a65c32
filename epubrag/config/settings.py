"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables - e.g. OLLAMA_BASE_URL=http://gpu-box:11434
#   2. .env file             - key=value lines in the working directory
#   3. YAML config file      - only when loaded via load_settings(path)
#   4. The defaults below
#
# Field `ollama_embedding_model` maps to env var `OLLAMA_EMBEDDING_MODEL`.
# ──────────────────────────────────────────────────────────────────────
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """epubrag settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Provider selection ===
    embedding_provider: Literal["ollama", "openai"] = "ollama"
    generation_provider: Literal["ollama", "openai", "anthropic"] = "ollama"

    # === Ollama (local, no API key) ===
    ollama_base_url: str = "http://localhost:11434"
    ollama_embedding_model: str = "mxbai-embed-large"
    ollama_generation_model: str = "llama3.1"

    # === OpenAI and OpenAI-compatible APIs ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # Custom base URL for OpenAI-compatible APIs (TogetherAI, etc.)
    openai_embedding_model: str = ""  # Empty = text-embedding-3-small
    openai_text_model: str = ""  # Empty = gpt-4o-mini

    # === Anthropic ===
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    # === Store & ingestion ===
    store_path: str = "./data/vectorstore.json"
    # 0 = adopt the length of the first embedding stored.
    embedding_dim: int = Field(default=0, ge=0)
    # Paragraphs of this many characters or fewer are not worth embedding.
    min_chunk_chars: int = Field(default=50, ge=0)
    embed_concurrency: int = Field(default=1, ge=1)

    # === Retrieval & answering ===
    rag_top_k: int = Field(default=5, ge=1)
    # True = a query embedding of the wrong length is an error instead of
    # an all-zero-score result.
    strict_query_dimensions: bool = False
    # What to do when retrieval returns nothing: skip the model and answer
    # with a fixed sentinel, or call the model with an empty context.
    empty_context_policy: Literal["short_circuit", "generate"] = "short_circuit"
    show_scores_in_context: bool = True
    generation_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    generation_max_tokens: int = Field(default=2048, ge=1)

    # === External calls ===
    request_timeout: float = Field(default=60.0, gt=0.0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
