"""Application services: ingestion, retrieval and retrieval-augmented answering."""

from epubrag.services.qa_service import NO_RELEVANT_CONTENT, QAService
from epubrag.services.retrieval_service import RetrievalService

__all__ = ["NO_RELEVANT_CONTENT", "QAService", "RetrievalService"]
