"""Read-side description of the memories table.

Migrations and writes live elsewhere; only the columns retrieval touches are
described. ``embedding`` is stored as the text form of a pgvector value and
cast to ``vector`` inside queries.
"""

from functools import lru_cache

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID


@lru_cache(maxsize=8)
def memories_table(name: str = "fawn_memories") -> sa.Table:
    """Table object for ``name``, built once per name."""
    return sa.Table(
        name,
        sa.MetaData(),
        sa.Column("id", PG_UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", PG_UUID(as_uuid=False), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("category", sa.Text, nullable=False),
        sa.Column("importance", sa.Integer),
        sa.Column("metadata", JSONB),
        sa.Column("tags", ARRAY(sa.Text)),
        sa.Column("embedding", sa.Text),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )


def projection_columns(table: sa.Table) -> list[sa.Column]:
    """Columns returned by searches. The embedding itself is never shipped back."""
    return [
        table.c.id,
        table.c.user_id,
        table.c.content,
        table.c.category,
        table.c.importance,
        table.c.metadata,
        table.c.tags,
        table.c.created_at,
    ]
