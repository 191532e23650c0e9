"""PostgreSQL + pgvector storage access."""

from .engine import EngineProvider, get_engine, get_engine_provider
from .queries import MemoryQueries
from .tables import memories_table

__all__ = [
    "EngineProvider",
    "MemoryQueries",
    "get_engine",
    "get_engine_provider",
    "memories_table",
]
