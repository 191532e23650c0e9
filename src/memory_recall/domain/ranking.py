"""Ranking rules for retrieval results.

The storage engine applies these rules in SQL. The same rules are kept here
as plain functions so rows coming back from any backend can be checked and
the rules tested without a database.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

from memory_recall.domain.models import Memory, ScoredMemory

MemoryT = TypeVar("MemoryT", bound=Memory)


def rank_by_similarity(candidates: Iterable[ScoredMemory], threshold: float, limit: int) -> list[ScoredMemory]:
    """Keep candidates scoring strictly above ``threshold``, best first, at most ``limit``.

    The sort is stable, so exact ties keep the order they arrived in.
    """
    surviving = [memory for memory in candidates if memory.similarity > threshold]
    surviving.sort(key=lambda memory: memory.similarity, reverse=True)
    return surviving[:limit]


def _importance_key(memory: Memory) -> tuple[bool, int, datetime]:
    # NULL importance ranks after every numbered importance
    return (
        memory.importance is not None,
        memory.importance if memory.importance is not None else 0,
        memory.created_at,
    )


def rank_by_importance(memories: Iterable[Memory], limit: int) -> list[Memory]:
    """Order by importance descending, then newest first, at most ``limit``."""
    return sorted(memories, key=_importance_key, reverse=True)[:limit]


def owned_by(user_id: str, memories: Iterable[MemoryT]) -> tuple[list[MemoryT], int]:
    """Split off memories belonging to anyone but ``user_id``.

    Returns:
        The memories owned by ``user_id`` and how many others were dropped
    """
    # Owner ids are uuids, whose text form is case-insensitive
    owner = user_id.lower()
    kept: list[MemoryT] = []
    dropped = 0
    for memory in memories:
        if memory.user_id.lower() == owner:
            kept.append(memory)
        else:
            dropped += 1
    return kept, dropped
