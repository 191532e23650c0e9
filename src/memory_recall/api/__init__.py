"""API module."""

from fastapi import APIRouter

from .endpoints import memory

router = APIRouter()

router.include_router(memory.router, prefix="/memory", tags=["memory"])
