"""Memory Recall FastAPI application.

The database engine is not created here: the first search builds it, so the
app starts even before DATABASE_URL is available.
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import logfire
import uvicorn
from fastapi import FastAPI

from memory_recall.api import router as api_router
from memory_recall.core.base import ApplicationError
from memory_recall.core.config import settings
from memory_recall.core.handlers import GlobalErrorHandler
from memory_recall.core.logging import get_logger, setup_logging

logfire.configure(
    service_name="memory-recall",
    token=os.getenv("LOGFIRE_TOKEN"),
    send_to_logfire="if-token-present",
)
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info("Starting Memory Recall", extra={"semantic_search_enabled": settings.semantic_search_enabled})
    yield
    logger.info("Memory Recall shutdown complete")


app = FastAPI(
    title="Memory Recall API",
    description="Semantic and lexical retrieval over stored user memories",
    version="0.1.0",
    lifespan=lifespan,
)

logfire.instrument_fastapi(app)

error_handler = GlobalErrorHandler()
app.add_exception_handler(ApplicationError, error_handler.handle_application_error)  # type: ignore[arg-type]

app.include_router(api_router, prefix="/api/v1")


@app.get("/health", tags=["core"])
async def health() -> dict[str, str]:
    """Liveness probe. Does not touch the database."""
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("memory_recall.main:app", host="0.0.0.0", port=8000, reload=settings.debug, log_level="info")
