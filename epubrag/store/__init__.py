"""Embedding store and similarity ranking.

- **similarity** -- cosine similarity with defined zero-norm and
  length-mismatch behaviour.
- **vector_store** -- the append-only :class:`VectorStore` with linear
  search and JSON snapshot persistence.
"""

from epubrag.store.similarity import cosine_similarity
from epubrag.store.vector_store import VectorStore

__all__ = ["VectorStore", "cosine_similarity"]
