"""Sanity checks for vectors returned by an embedding provider."""

from __future__ import annotations

import math
from numbers import Real

from epubrag.utils.errors import EmbeddingError


def validate_embedding(vector: object, provider_name: str | None = None) -> list[float]:
    """Return *vector* as a list of floats.

    Raises:
        EmbeddingError: If *vector* is not a non-empty sequence of finite
            real numbers.  Booleans are not numbers here.
    """
    if not isinstance(vector, (list, tuple)) or not vector:
        raise EmbeddingError(
            message="Embedding provider returned an empty or non-sequence vector",
            provider_name=provider_name,
        )
    values: list[float] = []
    for value in vector:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise EmbeddingError(
                message=f"Embedding contains a non-numeric value: {value!r}",
                provider_name=provider_name,
            )
        try:
            number = float(value)
        except (OverflowError, TypeError, ValueError) as exc:
            raise EmbeddingError(
                message=f"Embedding value cannot be represented as a float: {exc}",
                provider_name=provider_name,
            ) from exc
        if not math.isfinite(number):
            raise EmbeddingError(
                message=f"Embedding contains a non-finite value: {value!r}",
                provider_name=provider_name,
            )
        values.append(number)
    return values
