"""Shared fixtures: memories, a fake engine and settings without a database."""

from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import pytest

from memory_recall.core.config import Settings

USER_ID = "7f6c2b1e-3a44-4c8e-9d0b-1f2e3d4c5b6a"
OTHER_USER_ID = "0b1c2d3e-4f50-4a6b-8c7d-9e0f1a2b3c4d"
BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


def memory_row(
    content: str = "a memory",
    user_id: str = USER_ID,
    importance: int | None = 5,
    age_minutes: int = 0,
    similarity: float | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """A row shaped like the search projection."""
    row: dict[str, Any] = {
        "id": uuid4(),
        "user_id": user_id,
        "content": content,
        "category": "fact",
        "importance": importance,
        "metadata": {"source": "test"},
        "tags": ["test"],
        "created_at": BASE_TIME - timedelta(minutes=age_minutes),
    }
    if similarity is not None:
        row["similarity"] = similarity
    row.update(overrides)
    return row


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows

    def mappings(self) -> "FakeResult":
        return self

    def all(self) -> list[dict[str, Any]]:
        return list(self._rows)


class FakeConnection:
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine

    async def execute(self, statement: Any) -> FakeResult:
        self.engine.statements.append(statement)
        if self.engine.error is not None:
            raise self.engine.error
        return FakeResult(self.engine.rows)


class FakeEngine:
    """Stands in for AsyncEngine: records statements and returns canned rows."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, error: BaseException | None = None):
        self.rows = rows or []
        self.error = error
        self.statements: list[Any] = []
        self.connections = 0

    @asynccontextmanager
    async def connect(self):
        self.connections += 1
        yield FakeConnection(self)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def settings_factory() -> Callable[..., Callable[[], Settings]]:
    """Build settings factories that ignore the process environment's .env file."""

    def build(**values: Any) -> Callable[[], Settings]:
        return lambda: Settings(_env_file=None, **values)

    return build


@pytest.fixture
def make_row() -> Callable[..., dict[str, Any]]:
    return memory_row


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def other_user_id() -> str:
    return OTHER_USER_ID
