"""
Postboard Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Fake persistence (no database):
    ├── fake_executor: AsyncMock with the QueryExecutor.execute signature
    └── fake_registry: users/posts models bound to the fake executor

    Real SQLite (one file per test under tmp_path):
    ├── engine:    async engine with the users/posts tables created
    ├── executor:  QueryExecutor over that engine
    ├── registry:  users/posts models bound to the executor
    └── test_client: HTTPX AsyncClient over a fresh app wired to the engine
"""

import os
import tempfile

# Settings are read once on import; set the test environment first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="postboard_test_"), "unused.db"
)
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import QueryExecutor, QueryResult, create_engine  # noqa: E402
from app.models import build_registry  # noqa: E402

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255) NOT NULL UNIQUE,
    password VARCHAR(255) NOT NULL,
    status VARCHAR(50) NOT NULL DEFAULT 'active',
    email_verified_at DATETIME,
    created_at DATETIME,
    updated_at DATETIME
)
"""

POSTS_DDL = """
CREATE TABLE posts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title VARCHAR(255) NOT NULL,
    content TEXT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE ON UPDATE CASCADE,
    status VARCHAR(50) NOT NULL DEFAULT 'draft',
    created_at DATETIME,
    updated_at DATETIME
)
"""


# ══════════════════════════════════════════════════════════════════════════
# Fake persistence
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_executor():
    """
    Stand-in for QueryExecutor that records every statement.

    Usage:
        fake_executor.execute.return_value = QueryResult(rows=[{...}])
        fake_executor.execute.side_effect = [QueryResult(...), QueryResult(...)]
    """
    executor = AsyncMock(spec=QueryExecutor)
    executor.execute = AsyncMock(return_value=QueryResult())
    return executor


@pytest.fixture
def fake_registry(fake_executor):
    return build_registry(fake_executor)


@pytest.fixture
def sample_post_row() -> Dict[str, Any]:
    return {
        "id": 7,
        "title": "Hello",
        "content": "First post on the board",
        "user_id": 1,
        "status": "draft",
        "created_at": "2024-01-15 12:00:00",
        "updated_at": "2024-01-15 12:00:00",
    }


# ══════════════════════════════════════════════════════════════════════════
# Real SQLite
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.exec_driver_sql(USERS_DDL)
        await conn.exec_driver_sql(POSTS_DDL)
    yield engine
    await engine.dispose()


@pytest.fixture
def executor(engine):
    return QueryExecutor(engine)


@pytest.fixture
def registry(executor):
    return build_registry(executor)


@pytest_asyncio.fixture
async def test_app(engine):
    """A fresh application wired to the per-test SQLite engine (no lifespan)."""
    from app.main import create_app, init_state

    app = create_app()
    init_state(app, engine)
    return app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app in-process through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_headers(test_client):
    """Registers a user and returns its Authorization header."""
    response = await test_client.post(
        "/api/auth/register",
        json={
            "name": "Ann Author",
            "email": "ann@example.com",
            "password": "Secret123",
            "password_confirmation": "Secret123",
        },
    )
    assert response.status_code == 201, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
