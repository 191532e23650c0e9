"""API dependencies."""

from memory_recall.services import EmbeddingService
from memory_recall.services.recall_service import MemoryRecallService

# None until an embedding model is assigned here by the hosting application.
# Without one, searches that carry no embedding use lexical search.
embedding_service: EmbeddingService | None = None


def get_recall_service() -> MemoryRecallService:
    """Recall service for one request.

    Building it is cheap: the database engine behind it is shared and only
    created by the first search that runs.
    """
    return MemoryRecallService.from_repository(embeddings=embedding_service)
