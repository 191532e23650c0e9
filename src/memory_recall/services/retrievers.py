"""The two retrieval strategies behind the recall service."""

from memory_recall.domain.models import Memory, ScoredMemory, SearchQuery
from memory_recall.infrastructure.repositories.memory import MemoryRepository


class VectorRetriever:
    """Semantic search by cosine similarity. Needs a query embedding."""

    name = "semantic"

    def __init__(self, repository: MemoryRepository):
        self.repository = repository

    def supports(self, query: SearchQuery) -> bool:
        return query.has_embedding

    async def search(self, user_id: str, query: SearchQuery, limit: int) -> list[ScoredMemory]:
        return await self.repository.search_by_embedding(
            user_id,
            query.embedding or [],
            limit=limit,
            threshold=query.threshold,
        )


class LexicalRetriever:
    """Substring search ranked by importance and recency. Answers any query."""

    name = "lexical"

    def __init__(self, repository: MemoryRepository):
        self.repository = repository

    def supports(self, query: SearchQuery) -> bool:
        return True

    async def search(self, user_id: str, query: SearchQuery, limit: int) -> list[Memory]:
        return await self.repository.search_by_text(user_id, query.text, limit=limit)
