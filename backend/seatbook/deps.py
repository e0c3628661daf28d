from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import async_session
from .usecases.selection import SelectionRegistry


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


@lru_cache
def get_selection_registry() -> SelectionRegistry:
    """Open selections live in process memory and are lost on restart."""
    settings = get_settings()
    return SelectionRegistry(
        idle_ttl=settings.selection_idle_ttl_seconds,
        max_open=settings.max_open_selections,
    )
