"""YAML configuration overlay for :class:`Settings`.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. Settings defaults
#   2. YAML file            - e.g. epubrag.yaml, flat keys named like the
#                             Settings fields (store_path, rag_top_k, ...)
#   3. .env file            - local developer overrides (not committed)
#   4. Environment vars     - set at deploy time
#
# A key in the YAML file that Settings does not know is an error rather
# than being silently ignored, so typos surface immediately.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from epubrag.config.settings import Settings
from epubrag.utils.errors import ConfigurationError


def load_settings(path: str | None = None) -> Settings:
    """Build :class:`Settings` from an optional YAML file plus the environment.

    Args:
        path: Path to a YAML file with flat ``field: value`` pairs.  ``None``
              skips the YAML layer entirely.

    Returns:
        Fully resolved settings.

    Raises:
        ConfigurationError: If the file is missing, is not a mapping,
            names unknown fields, or holds values that fail validation.
    """
    yaml_values = _read_yaml(path) if path else {}

    try:
        env_settings = Settings()
        # Fields set by env vars / .env take priority over the YAML layer.
        explicit = env_settings.model_dump(include=env_settings.model_fields_set)
        return Settings(**{**yaml_values, **explicit})
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid configuration: {exc}") from exc


def _read_yaml(path: str) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(message=f"Config file not found: {path}")

    with open(config_path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Config file {path} is not valid YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(message=f"Config file {path} must contain a mapping")

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ConfigurationError(
            message=f"Unknown setting(s) in {path}: {', '.join(map(str, unknown))}"
        )
    return data
