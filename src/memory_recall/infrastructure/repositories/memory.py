import re
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql import Select

from memory_recall.core.base import DatabaseErrorDetails, ErrorCode, ErrorLevel, ValidationErrorDetails
from memory_recall.core.config import settings
from memory_recall.core.decorators import with_error_handling
from memory_recall.core.errors import InvalidQueryError, RetrievalError
from memory_recall.core.logging import get_logger
from memory_recall.domain.models import Memory, ScoredMemory
from memory_recall.domain.ranking import MemoryT, owned_by, rank_by_importance, rank_by_similarity
from memory_recall.domain.validators import (
    validate_embedding,
    validate_limit,
    validate_threshold,
    validate_user_id,
)
from memory_recall.infrastructure.postgres.engine import get_engine
from memory_recall.infrastructure.postgres.queries import MemoryQueries
from memory_recall.infrastructure.postgres.tables import memories_table

logger = get_logger(__name__)

# pgvector messages when stored and query vectors differ in length: "<=>" on
# two vectors, or a cast to a fixed-size vector(n)
_DIMENSION_MISMATCH = re.compile(r"different vector dimensions|expected \d+ dimensions")


class MemoryRepository:
    """Read-only access to stored memories.

    The engine is resolved through ``engine_provider`` on every call, so the
    process-wide engine is only built when the first search actually runs.
    """

    def __init__(
        self,
        engine_provider: Callable[[], AsyncEngine] = get_engine,
        table_name: str | None = None,
        embedding_dimensions: int | None = None,
    ):
        self.engine_provider = engine_provider
        self.table = memories_table(table_name or settings.memory_table)
        self.embedding_dimensions = (
            embedding_dimensions if embedding_dimensions is not None else settings.embedding_dimensions
        )

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def search_by_embedding(
        self,
        user_id: str,
        query_embedding: list[float],
        limit: int = 10,
        threshold: float = 0.7,
    ) -> list[ScoredMemory]:
        """Rank a user's embedded memories by cosine similarity to ``query_embedding``.

        Args:
            user_id: Owner whose memories are searched
            query_embedding: Query vector with the stored dimensionality
            limit: Maximum number of results
            threshold: Results must score strictly above this similarity

        Returns:
            Memories with their similarity, closest first. Empty when nothing clears the threshold.

        Raises:
            InvalidQueryError: If any argument is malformed
            RetrievalError: If the database query fails
        """
        user_id = validate_user_id(user_id)
        vector = validate_embedding(query_embedding, self.embedding_dimensions)
        limit = validate_limit(limit)
        threshold = validate_threshold(threshold)

        statement = MemoryQueries.similarity_search(self.table, user_id, vector, threshold, limit)
        rows = await self._fetch(statement, operation="search_by_embedding")

        candidates = self._scope(user_id, [ScoredMemory.model_validate(row) for row in rows])
        results = rank_by_similarity(candidates, threshold, limit)
        logger.debug(
            f"Similarity search returned {len(results)} memories",
            extra={"user_id": user_id, "threshold": threshold, "limit": limit},
        )
        return results

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def search_by_text(self, user_id: str, query: str = "", limit: int = 10) -> list[Memory]:
        """Find a user's memories whose content contains ``query``, ignoring case.

        Ranked by importance, then most recent first.

        Raises:
            InvalidQueryError: If any argument is malformed
            RetrievalError: If the database query fails
        """
        user_id = validate_user_id(user_id)
        limit = validate_limit(limit)
        if not isinstance(query, str):
            raise InvalidQueryError(
                message="text query must be a string",
                details=ValidationErrorDetails(
                    source="memory_repository",
                    operation="search_by_text",
                    field="query",
                    actual_value=str(query)[:100],
                    expected_type="str",
                ),
            )

        statement = MemoryQueries.text_search(self.table, user_id, query, limit)
        rows = await self._fetch(statement, operation="search_by_text")

        results = rank_by_importance(self._scope(user_id, [Memory.model_validate(row) for row in rows]), limit)
        logger.debug(
            f"Text search returned {len(results)} memories", extra={"user_id": user_id, "limit": limit}
        )
        return results

    def _scope(self, user_id: str, memories: list[MemoryT]) -> list[MemoryT]:
        kept, dropped = owned_by(user_id, memories)
        if dropped:
            logger.error(
                "Dropped memories owned by another user from search results",
                extra={"user_id": user_id, "dropped": dropped, "table": self.table.name},
            )
        return kept

    async def _fetch(self, statement: Select, operation: str) -> list[dict[str, Any]]:
        """Run one statement on a pooled connection and return its rows as mappings."""
        engine = self.engine_provider()
        try:
            async with engine.connect() as conn:
                result = await conn.execute(statement)
                return [dict(row) for row in result.mappings().all()]
        except DBAPIError as e:
            if _DIMENSION_MISMATCH.search(str(e.orig)):
                raise InvalidQueryError(
                    message="query embedding dimensionality does not match stored embeddings",
                    details=ValidationErrorDetails(
                        source="memory_repository",
                        operation=operation,
                        field="query_embedding",
                        constraint="len(query_embedding) == len(stored embedding)",
                    ),
                ) from e
            raise self._retrieval_error(e, operation) from e
        except (SQLAlchemyError, OSError) as e:
            raise self._retrieval_error(e, operation) from e

    def _retrieval_error(self, error: Exception, operation: str) -> RetrievalError:
        connection_failure = isinstance(error, OSError) or (
            isinstance(error, DBAPIError) and error.connection_invalidated
        )
        return RetrievalError(
            message=f"Memory {operation} failed: {error!s}",
            details=DatabaseErrorDetails(
                source="memory_repository",
                operation=operation,
                service_name="postgres",
                query_type="select",
                table=self.table.name,
            ),
            code=ErrorCode.DB_CONNECTION if connection_failure else ErrorCode.DB_QUERY,
        )


async def search_memories_by_embedding(
    user_id: str,
    query_embedding: list[float],
    limit: int = 10,
    threshold: float = 0.7,
) -> list[ScoredMemory]:
    """Similarity search against the process-wide engine."""
    return await MemoryRepository().search_by_embedding(user_id, query_embedding, limit, threshold)


async def search_memories_by_text(user_id: str, query: str = "", limit: int = 10) -> list[Memory]:
    """Text search against the process-wide engine."""
    return await MemoryRepository().search_by_text(user_id, query, limit)
