"""
Game Catalog API — Repository Dependency
==========================================

What:  Selects the storage backend configured by STORAGE_BACKEND.
How:   ``repository_scope()`` yields a GameRepository: a per-request
       SqlGameRepository bound to a fresh transactional session, or the
       process-wide MemoryGameRepository.
Who:   Route handlers (via ``Depends(get_game_repository)``), the lifespan
       seeding step and the seed command.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from gamecatalog.config import settings
from gamecatalog.services.memory_repository import MemoryGameRepository
from gamecatalog.services.repository import GameRepository

# Shared by every request when STORAGE_BACKEND=memory
memory_repository = MemoryGameRepository()


@asynccontextmanager
async def repository_scope() -> AsyncGenerator[GameRepository, None]:
    if not settings.uses_database:
        yield memory_repository
        return

    from gamecatalog.database import session_scope
    from gamecatalog.services.sql_repository import SqlGameRepository

    async with session_scope() as session:
        yield SqlGameRepository(session)


async def get_game_repository() -> AsyncGenerator[GameRepository, None]:
    """FastAPI dependency: one repository (and transaction) per request."""
    async with repository_scope() as repository:
        yield repository
