"""Centralized query definitions for memory retrieval.

Both searches are built here as SQLAlchemy Core statements. Keeping the
threshold comparison, ordering and limit in builder functions lets them be
compiled and inspected in tests without a database.
"""

import sqlalchemy as sa
from pgvector.sqlalchemy import Vector
from sqlalchemy.sql import Select

from memory_recall.infrastructure.postgres.tables import projection_columns


def _owner_matches(table: sa.Table, user_id: str) -> sa.ColumnElement[bool]:
    """Owner filter comparing ids as text.

    Owner ids are opaque strings to callers. Comparing the uuid column's text
    form means an id that is not a uuid matches nothing instead of failing to
    bind. Postgres renders uuids in lowercase.
    """
    return sa.cast(table.c.user_id, sa.Text) == sa.func.lower(sa.bindparam("user_id", user_id, type_=sa.Text))


class MemoryQueries:
    """All memory retrieval queries in one place."""

    @staticmethod
    def similarity_search(
        table: sa.Table,
        user_id: str,
        embedding: list[float],
        threshold: float,
        limit: int,
    ) -> Select:
        """Cosine similarity search over one user's embedded memories.

        similarity = 1 - (embedding <=> query). Rows must score strictly above
        ``threshold``; closest first; at most ``limit`` rows.

        Args:
            table: Memories table
            user_id: Owner whose memories are searched
            embedding: Query vector, already validated
            threshold: Exclusive similarity cutoff
            limit: Maximum rows returned

        Returns:
            Select yielding the projection columns plus ``similarity``
        """
        # Dimensionless so a length mismatch surfaces from "<=>" rather than the cast
        vector_type = Vector()
        query_vector = sa.cast(sa.bindparam("query_embedding", embedding, type_=vector_type), vector_type)
        distance = sa.cast(table.c.embedding, vector_type).cosine_distance(query_vector)
        similarity = (1 - distance).label("similarity")

        return (
            sa.select(*projection_columns(table), similarity)
            .where(
                _owner_matches(table, user_id),
                table.c.embedding.is_not(None),
                (1 - distance) > sa.bindparam("threshold", threshold, type_=sa.Float),
            )
            .order_by(distance)
            .limit(sa.bindparam("limit", limit, type_=sa.Integer))
        )

    @staticmethod
    def text_search(table: sa.Table, user_id: str, query: str, limit: int) -> Select:
        """Case-insensitive literal substring search over one user's memories.

        LIKE wildcards in ``query`` are escaped; an empty query matches every
        row. Ordered by importance (NULL last) then newest first.
        """
        return (
            sa.select(*projection_columns(table))
            .where(
                _owner_matches(table, user_id),
                table.c.content.icontains(query, autoescape=True),
            )
            .order_by(table.c.importance.desc().nulls_last(), table.c.created_at.desc())
            .limit(sa.bindparam("limit", limit, type_=sa.Integer))
        )
