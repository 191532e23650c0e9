"""Recall service: picks one retrieval strategy per request.

Semantic search runs when it is wanted, enabled and an embedding is
available. Otherwise the lexical retriever answers instead. Results of the two
strategies are never merged, and a failing semantic search is reported as a
failure rather than retried lexically.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, SerializeAsAny

from memory_recall.core.config import settings
from memory_recall.core.logging import get_logger
from memory_recall.domain.models import Memory, SearchQuery
from memory_recall.domain.validators import validate_embedding
from memory_recall.infrastructure.repositories.memory import MemoryRepository
from memory_recall.services.retrievers import LexicalRetriever, VectorRetriever

if TYPE_CHECKING:
    from memory_recall.services import EmbeddingService, MemoryRetriever

logger = get_logger(__name__)


class FallbackReason(str, Enum):
    """Why a semantic request was answered by the lexical retriever."""

    SEMANTIC_DISABLED = "semantic_disabled"
    NO_EMBEDDING = "no_embedding"
    EMBEDDING_FAILED = "embedding_failed"


class RecallResult(BaseModel):
    """Outcome of one recall. ``memories`` is empty when nothing matched."""

    query: str
    strategy: str
    fallback: bool = False
    fallback_reason: FallbackReason | None = None
    memories: list[SerializeAsAny[Memory]]

    @property
    def count(self) -> int:
        return len(self.memories)


class MemoryRecallService:
    """Entry point for the surrounding application. Holds no per-request state."""

    def __init__(
        self,
        semantic: MemoryRetriever,
        lexical: MemoryRetriever,
        embeddings: EmbeddingService | None = None,
        semantic_enabled: bool | None = None,
        embedding_dimensions: int | None = None,
    ):
        self.semantic = semantic
        self.lexical = lexical
        self.embeddings = embeddings
        self.semantic_enabled = settings.semantic_search_enabled if semantic_enabled is None else semantic_enabled
        self.embedding_dimensions = (
            settings.embedding_dimensions if embedding_dimensions is None else embedding_dimensions
        )

    @classmethod
    def from_repository(
        cls,
        repository: MemoryRepository | None = None,
        embeddings: EmbeddingService | None = None,
        **kwargs,
    ) -> MemoryRecallService:
        """Build the service with both retrievers sharing one repository."""
        repository = repository or MemoryRepository()
        return cls(
            semantic=VectorRetriever(repository),
            lexical=LexicalRetriever(repository),
            embeddings=embeddings,
            **kwargs,
        )

    async def recall(
        self,
        user_id: str,
        text: str = "",
        embedding: list[float] | None = None,
        limit: int | None = None,
        threshold: float | None = None,
        semantic: bool = True,
    ) -> RecallResult:
        """Find the user's memories most relevant to a query.

        Args:
            user_id: Owner whose memories are searched
            text: Free-text query, used by lexical search and for embedding
            embedding: Precomputed query embedding. An empty list counts as absent.
            limit: Maximum number of results
            threshold: Similarity cutoff for semantic search
            semantic: Whether the caller wants semantic search when possible

        Returns:
            RecallResult naming the strategy that produced the memories

        Raises:
            InvalidQueryError: If the query is malformed
            RetrievalError: If the chosen strategy's search fails
            ConfigurationError: If the database is not configured
        """
        limit = settings.default_limit if limit is None else limit
        threshold = settings.default_threshold if threshold is None else threshold

        reason: FallbackReason | None = None
        if semantic and not self.semantic_enabled:
            reason = FallbackReason.SEMANTIC_DISABLED
        elif semantic:
            embedding, reason = await self._resolve_embedding(text, embedding)

        query = SearchQuery(
            text=text,
            embedding=embedding if semantic and reason is None else None,
            threshold=threshold,
        )
        retriever = self._select(query)

        logger.info(
            f"Recalling memories with {retriever.name} search",
            extra={"user_id": user_id, "limit": limit, "fallback_reason": reason.value if reason else None},
        )
        memories = await retriever.search(user_id, query, limit)

        return RecallResult(
            query=text,
            strategy=retriever.name,
            fallback=reason is not None,
            fallback_reason=reason,
            memories=list(memories),
        )

    async def _resolve_embedding(
        self, text: str, embedding: list[float] | None
    ) -> tuple[list[float] | None, FallbackReason | None]:
        if embedding:
            return validate_embedding(embedding, self.embedding_dimensions), None

        if self.embeddings is None or not text:
            return None, FallbackReason.NO_EMBEDDING

        try:
            generated = await self.embeddings.embed_text(text)
        except Exception as e:
            # The embedding model is outside this service; losing it only removes the semantic path
            logger.warning(
                "Embedding generation failed, using lexical search",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return None, FallbackReason.EMBEDDING_FAILED

        if not generated:
            return None, FallbackReason.NO_EMBEDDING
        return validate_embedding(generated, self.embedding_dimensions), None

    def _select(self, query: SearchQuery) -> MemoryRetriever:
        for retriever in (self.semantic, self.lexical):
            if retriever.supports(query):
                return retriever
        raise RuntimeError("lexical retriever must accept every query")
