"""Service layer interfaces and implementations."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from memory_recall.domain.models import Memory, SearchQuery


@runtime_checkable
class EmbeddingService(Protocol):
    """Protocol for embedding services.

    An empty vector means no embedding could be produced, for example because
    no model is configured.
    """

    async def embed_text(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        ...


@runtime_checkable
class MemoryRetriever(Protocol):
    """One retrieval strategy over a user's memories."""

    name: str

    def supports(self, query: SearchQuery) -> bool:
        """Whether this strategy can answer ``query``."""
        ...

    async def search(self, user_id: str, query: SearchQuery, limit: int) -> Sequence[Memory]:
        """Return at most ``limit`` of the user's memories, best first."""
        ...


__all__ = ["EmbeddingService", "MemoryRetriever"]
