"""epubrag - semantic search and retrieval-augmented answering over e-books.

EPUB content is split into paragraph chunks, each chunk is embedded by an
external model service, and the chunks are kept in a JSON-persisted
:class:`~epubrag.store.vector_store.VectorStore` that ranks them against a
query embedding by cosine similarity.
"""

__version__ = "0.1.0"
