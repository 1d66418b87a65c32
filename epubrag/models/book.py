"""Models describing an e-book as read by the EPUB processor."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BookMetadata(BaseModel):
    """Dublin Core metadata pulled from the package document.

    Any field the book does not declare is ``None``.
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    creator: str | None = None
    language: str | None = None


class BookChapter(BaseModel):
    """One spine item converted to Markdown."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="Zero-based position in the spine.")
    item_id: str = Field(description="Manifest id of the spine item.")
    title: str = Field(default="", description="Text of the first h1-h3 heading, if any.")
    markdown: str = Field(description="Chapter body converted to Markdown.")
