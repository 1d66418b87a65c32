"""Cosine similarity between two embedding vectors.

Per-element products are summed in index order, so the result is
bit-for-bit identical whichever argument comes first.
"""

from __future__ import annotations

import math
from typing import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine of the angle between *a* and *b*.

    Degenerate inputs never raise and never produce NaN:

    * vectors of different length score ``0.0``;
    * if either vector has zero norm (including the empty vector) the score
      is ``0.0``, so a zero vector is maximally dissimilar to everything,
      itself included.

    The function is commutative: ``cosine_similarity(a, b) ==
    cosine_similarity(b, a)`` for every input.
    """
    if len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a_sq = 0.0
    norm_b_sq = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a_sq += x * x
        norm_b_sq += y * y

    if norm_a_sq == 0.0 or norm_b_sq == 0.0:
        return 0.0

    score = dot / (math.sqrt(norm_a_sq) * math.sqrt(norm_b_sq))
    if math.isnan(score):
        # inf / inf when the squared norms overflow
        return 0.0
    # Rounding can push parallel vectors a hair past 1.0.
    return max(-1.0, min(1.0, score))
