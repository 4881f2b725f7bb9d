"""Domain models used across the application."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from journalfeed.config import Source
from journalfeed.exceptions import FailureKind, FetchError


class Article(BaseModel):
    """One article pulled from a journal listing page.

    Identity is the generated ``id`` alone: two extractions of the same link are
    distinct articles.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    summary: str
    url: HttpUrl
    source: Source

    @field_validator("title", "summary")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Article):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class FetchResult(BaseModel):
    """Decoded listing page handed from the fetcher to the extractor."""

    source: Source
    text: str


class SourceFailure(BaseModel):
    """Why a source contributed nothing to a refresh."""

    model_config = ConfigDict(frozen=True)

    source: str
    kind: FailureKind
    message: str

    @classmethod
    def from_error(cls, source: Source, error: FetchError) -> "SourceFailure":
        return cls(source=source.identifier, kind=error.kind, message=error.message)


class FeedState(BaseModel):
    """Snapshot of the article feed published after every state change."""

    model_config = ConfigDict(frozen=True)

    articles: Tuple[Article, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None
    failures: Tuple[SourceFailure, ...] = ()
    refreshed_at: Optional[datetime] = None
