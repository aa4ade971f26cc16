"""Integration test fixtures using Docker.

Provides a containerized PostgreSQL loaded with the benchmark fixture
(10,000 players, 1,000 matches, 100,000 player_stats rows).
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tests.integration.docker_utils import PostgresContainer, get_docker_client, run_postgres
from workmem.api.app import create_app
from workmem.config import Settings, load_settings
from workmem.persistence.db import Database
from workmem.persistence.executor import QueryExecutor
from workmem.persistence.seed import seed

POSTGRES_IMAGE = "postgres:17-alpine"


@pytest.fixture(scope="session")
def docker_client():
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        client = get_docker_client()
        client.ping()
    except Exception as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def postgres_container(docker_client) -> Iterator[PostgresContainer]:
    """PostgreSQL for the whole session."""
    with run_postgres(docker_client, POSTGRES_IMAGE) as postgres:
        postgres.wait_ready()
        yield postgres


@pytest.fixture(scope="session")
def database_url(postgres_container: PostgresContainer) -> str:
    """Connection string of the seeded container, without pool hints."""
    url = postgres_container.url()
    asyncio.run(_seed(url))
    return url


@pytest.fixture
def make_settings(database_url: str) -> Callable[..., Settings]:
    """Settings for the container with the given pool hints."""

    def factory(pool_max: int = 10, pool_min: int = 1, **overrides: str) -> Settings:
        url = f"{database_url}?pool_max_conns={pool_max}&pool_min_conns={pool_min}"
        return load_settings(POSTGRES_URL=url, _env_file=None, **overrides)

    return factory


@pytest_asyncio.fixture
async def database(make_settings) -> AsyncIterator[Database]:
    """Isolated pool for one test."""
    database = Database.from_settings(make_settings())
    yield database
    await database.close()


@pytest_asyncio.fixture
async def executor(database: Database) -> QueryExecutor:
    return QueryExecutor(database)


@pytest_asyncio.fixture
async def test_client(make_settings) -> AsyncIterator[AsyncClient]:
    """Client for the full app, lifespan included."""
    app = create_app(make_settings(pool_max=10, pool_min=2))
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            timeout=60.0,
        ) as client:
            yield client


async def _seed(url: str) -> None:
    database = Database.from_settings(load_settings(POSTGRES_URL=url, _env_file=None))
    try:
        await seed(database, reset=True)
    finally:
        await database.close()
