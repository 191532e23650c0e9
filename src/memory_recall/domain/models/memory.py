"""Memory domain models."""

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Memory(BaseModel):
    """A stored, user-owned record of text content.

    Instances are read-only projections of a storage row.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: str
    content: str
    category: str
    importance: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    embedding: list[float] | None = None
    created_at: datetime

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Any) -> Any:
        # uuid columns come back from asyncpg as UUID objects
        return str(v) if isinstance(v, UUID) else v

    @field_validator("metadata", "tags", mode="before")
    @classmethod
    def empty_when_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return {} if info.field_name == "metadata" else []
        if info.field_name == "metadata" and isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("embedding", mode="before")
    @classmethod
    def parse_vector_literal(cls, v: Any) -> Any:
        """Accept the pgvector text form, e.g. ``[0.1,0.2,0.3]``."""
        if isinstance(v, str):
            return json.loads(v)
        return v

    def __str__(self) -> str:
        return f"Memory(category={self.category}, importance={self.importance}, content='{self.content[:50]}')"


class ScoredMemory(Memory):
    """A memory returned by semantic search, with its cosine similarity to the query."""

    similarity: float


class SearchQuery(BaseModel):
    """What a retriever is asked to find.

    ``text`` drives lexical search, ``embedding`` drives semantic search.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    embedding: list[float] | None = None
    threshold: float = 0.7

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)
