"""Memory search endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from memory_recall.api.dependencies import get_recall_service
from memory_recall.core.config import settings
from memory_recall.core.logging import get_logger
from memory_recall.services.recall_service import FallbackReason, MemoryRecallService

logger = get_logger(__name__)
router = APIRouter()


class SearchRequest(BaseModel):
    """Request model for searching memories."""

    user_id: str = Field(..., min_length=1, description="Owner of the memories; authenticated upstream")
    query: str = Field(default="", description="Free-text query")
    embedding: list[float] | None = Field(default=None, description="Precomputed query embedding")
    limit: int = Field(default_factory=lambda: settings.default_limit, ge=1, le=100)
    threshold: float = Field(default_factory=lambda: settings.default_threshold, ge=-1.0, le=1.0)
    semantic: bool = Field(default=True, description="Prefer semantic search when an embedding is available")


class SearchResponse(BaseModel):
    """Response model for search results."""

    query: str
    strategy: str
    fallback: bool
    fallback_reason: FallbackReason | None = None
    count: int
    results: list[dict[str, Any]]


@router.post("/search", response_model=SearchResponse, operation_id="search_memories")
async def search_memories(
    request: SearchRequest,
    recall_service: MemoryRecallService = Depends(get_recall_service),
) -> SearchResponse:
    """Search one user's memories, semantically when possible."""
    result = await recall_service.recall(
        user_id=request.user_id,
        text=request.query,
        embedding=request.embedding,
        limit=request.limit,
        threshold=request.threshold,
        semantic=request.semantic,
    )

    return SearchResponse(
        query=result.query,
        strategy=result.strategy,
        fallback=result.fallback,
        fallback_reason=result.fallback_reason,
        count=result.count,
        results=[memory.model_dump(mode="json", exclude={"embedding"}) for memory in result.memories],
    )
