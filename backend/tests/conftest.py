"""
Blog Posts API: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── sample_post: an unsaved BlogPost with every field filled in
    ├── test_settings: Settings pointing at a throwaway SQLite file
    ├── database: Database on that file with tables created
    └── test_client: HTTPX AsyncClient talking to create_app(database=...)
"""

import os

# Must run before blog_api.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from blog_api.config import Settings
from blog_api.database import Database
from blog_api.main import create_app
from blog_api.models.blog_post import BlogPost


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
            result = await service.get_post(mock_db_session, str(post.id))
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
def sample_post():
    return BlogPost(
        id=uuid4(),
        title="Avengers: Infinity War",
        author_first_name="Frank",
        author_last_name="Pallotta",
        content="The Avengers battled their way to global box office domination this weekend",
        created=datetime.now(timezone.utc),
    )


@pytest.fixture
def new_post_payload():
    return {
        "title": "Avengers: Infinity War",
        "author": {"firstName": "Frank", "lastName": "Pallotta"},
        "content": "The Avengers battled their way to global box office domination this weekend",
    }


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'blog_test.db'}",
        log_level="WARNING",
        host="127.0.0.1",
        port=0,
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database.from_settings(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def test_client(test_settings, database):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server needed).

    ASGITransport does not run the lifespan, so the Database is handed to
    create_app() directly.
    """
    app = create_app(test_settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def created_post(test_client, new_post_payload):
    """A post that already exists in the store; returns the response body."""
    response = await test_client.post("/blog-posts", json=new_post_payload)
    assert response.status_code == 201
    return response.json()
