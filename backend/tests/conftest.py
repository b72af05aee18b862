"""
Game Catalog API — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The suite runs against the in-memory backend; no database is needed.
       SQL generation is covered separately by compiling statements against
       the PostgreSQL dialect.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── memory_repo:       empty MemoryGameRepository
    ├── mock_db_session:   AsyncMock standing in for AsyncSession
    ├── sample_game_data:  a valid Game payload (camelCase keys)
    ├── make_game:         factory for variations of sample_game_data
    └── test_client:       HTTPX AsyncClient bound to the app, with the
                           repository dependency pointed at memory_repo
"""

import copy
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Must be set before anything imports gamecatalog.config
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from gamecatalog.services.memory_repository import MemoryGameRepository  # noqa: E402


SAMPLE_GAME = {
    "title": "The Legend of Zelda: Tears of the Kingdom",
    "platforms": ["Nintendo"],
    "genre": ["Action-Adventure", "Open World"],
    "developer": "Nintendo EPD",
    "publisher": "Nintendo",
    "releaseDate": "2023-05-12",
    "description": "A sequel to Breath of the Wild set in the skies above Hyrule.",
    "coverImage": "https://images.example.com/covers/totk",
    "screenshots": [
        "https://images.example.com/shots/totk-1.png",
        "https://images.example.com/shots/totk-2.png",
    ],
    "systemRequirements": {
        "minimum": {"os": "Switch OS", "storage": "16 GB"},
    },
    "price": {"amount": 69.99, "currency": "USD"},
    "rating": 9.6,
    "dlc": [
        {
            "title": "Expansion Pass",
            "description": "Additional shrines and story content",
            "releaseDate": "2024-02-01",
        }
    ],
}


@pytest.fixture
def memory_repo():
    """A fresh, empty in-memory repository."""
    return MemoryGameRepository()


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_find(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
            repo = SqlGameRepository(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_game_data():
    return copy.deepcopy(SAMPLE_GAME)


@pytest.fixture
def make_game():
    """
    Factory: ``make_game(title="X", rating=5)`` returns a valid payload with
    the given top-level keys overridden. Passing ``None`` drops a key.
    """

    def _make(**overrides):
        game = copy.deepcopy(SAMPLE_GAME)
        for key, value in overrides.items():
            if value is None:
                game.pop(key, None)
            else:
                game[key] = value
        return game

    return _make


@pytest_asyncio.fixture
async def test_client(memory_repo):
    """
    Async HTTP client for endpoint tests.

    Every request is served from ``memory_repo`` so tests can seed it
    directly and stay isolated from each other.
    """
    from gamecatalog.dependencies import get_game_repository
    from gamecatalog.main import app

    app.dependency_overrides[get_game_repository] = lambda: memory_repo
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
