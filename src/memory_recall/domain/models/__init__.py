"""Domain models for memory retrieval."""

from .memory import Memory, ScoredMemory, SearchQuery

__all__ = [
    "Memory",
    "ScoredMemory",
    "SearchQuery",
]
