"""PostgreSQL engine and connection management.

One pooled AsyncEngine is shared by the whole process. It is built on the
first acquire() so DATABASE_URL only has to be present by the time the first
retrieval runs, not when the process starts.
"""

import threading
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from memory_recall.core.base import ConfigurationErrorDetails, ErrorCode
from memory_recall.core.config import Settings
from memory_recall.core.errors import ConfigurationError
from memory_recall.core.logging import get_logger

logger = get_logger(__name__)

ASYNC_DRIVER = "postgresql+asyncpg"

EngineFactory = Callable[..., AsyncEngine]


def resolve_database_url(raw_url: str) -> URL:
    """Parse a connection string and point it at the asyncpg driver.

    ``postgres://`` and ``postgresql://`` URLs, as handed out by most hosting
    providers, are rewritten to ``postgresql+asyncpg://``.

    Raises:
        ConfigurationError: If the string is not a usable database URL
    """
    try:
        url = make_url(raw_url)
    except ArgumentError as e:
        raise ConfigurationError(
            message="DATABASE_URL is not a valid database URL",
            details=ConfigurationErrorDetails(
                source="postgres_engine",
                operation="resolve_database_url",
                setting="database_url",
                env_var="DATABASE_URL",
            ),
            code=ErrorCode.CONFIG_INVALID,
        ) from e

    if url.drivername in ("postgres", "postgresql"):
        url = url.set(drivername=ASYNC_DRIVER)
    return url


class EngineProvider:
    """Lazily builds and then hands out a single shared AsyncEngine.

    Construction is guarded by double-checked locking. Building the engine
    does no I/O, so holding a threading lock around it never blocks the event
    loop for longer than the constructor call, and racing callers in threads
    or tasks all get the same instance.
    """

    def __init__(
        self,
        settings_factory: Callable[[], Settings] = Settings,
        engine_factory: EngineFactory = create_async_engine,
    ) -> None:
        self._settings_factory = settings_factory
        self._engine_factory = engine_factory
        self._engine: AsyncEngine | None = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def acquire(self) -> AsyncEngine:
        """Return the shared engine, building it on first use.

        Raises:
            ConfigurationError: If DATABASE_URL is missing or invalid. No engine is kept.
        """
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is None:
                self._engine = self._build()
            return self._engine

    def _build(self) -> AsyncEngine:
        try:
            settings = self._settings_factory()
        except ValidationError as e:
            raise ConfigurationError(
                message=f"Invalid database configuration: {e.error_count()} setting(s) rejected",
                details=ConfigurationErrorDetails(
                    source="postgres_engine",
                    operation="load_settings",
                    setting=", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"]),
                ),
                code=ErrorCode.CONFIG_INVALID,
            ) from e

        if settings.database_url is None or not settings.database_url.get_secret_value().strip():
            raise ConfigurationError(
                message="DATABASE_URL environment variable is not set",
                details=ConfigurationErrorDetails(
                    source="postgres_engine",
                    operation="acquire",
                    setting="database_url",
                    env_var="DATABASE_URL",
                ),
            )

        url = resolve_database_url(settings.database_url.get_secret_value())
        options: dict[str, Any] = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
            "echo": settings.db_echo,
        }

        logger.info(
            "Creating PostgreSQL engine",
            extra={
                "host": url.host,
                "database": url.database,
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
            },
        )
        return self._engine_factory(url, **options)

    def reset(self) -> None:
        """Forget the cached engine without disposing it. Intended for tests."""
        with self._lock:
            self._engine = None


_provider = EngineProvider()


def get_engine_provider() -> EngineProvider:
    return _provider


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it on first call."""
    return _provider.acquire()
