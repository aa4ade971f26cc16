"""Tests for the benchmark HTTP routes."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tests.unit.fakes import FakeEngine
from workmem.api.app import create_app
from workmem.api.deps import get_database, get_executor
from workmem.config import load_settings
from workmem.observability.metrics import QueryMetrics
from workmem.persistence.db import Database
from workmem.persistence.executor import QueryExecutor


def build_app(engine: FakeEngine, metrics: QueryMetrics | None = None) -> FastAPI:
    """App wired to a fake engine; the lifespan (real pool) never runs."""
    app = create_app(load_settings(DEGRADED_WORK_MEM="64kB", _env_file=None))
    database = Database(engine)
    executor = QueryExecutor(database, metrics=metrics)
    app.dependency_overrides[get_executor] = lambda: executor
    app.dependency_overrides[get_database] = lambda: database
    app.state.metrics = metrics
    return app


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine(work_mem="4MB")


@pytest_asyncio.fixture
async def client(engine: FakeEngine) -> AsyncIterator[AsyncClient]:
    app = build_app(engine, metrics=QueryMetrics())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestBenchmarkRoutes:
    """Tests for /default-work-mem and /low-work-mem."""

    @pytest.mark.asyncio
    async def test_default_work_mem(self, client: AsyncClient, engine: FakeEngine) -> None:
        """200 with empty body; no override statement."""
        response = await client.get("/default-work-mem")

        assert response.status_code == 200
        assert response.content == b""
        statements = [sql for sql, _ in engine.connections[0].statements]
        assert not any("set_config" in sql for sql in statements)

    @pytest.mark.asyncio
    async def test_legacy_route_name(self, client: AsyncClient, engine: FakeEngine) -> None:
        """/optimized-work-mem still runs the default regime."""
        response = await client.get("/optimized-work-mem")

        assert response.status_code == 200
        assert len(engine.connections[0].statements) == 1

    @pytest.mark.asyncio
    async def test_low_work_mem(self, client: AsyncClient, engine: FakeEngine) -> None:
        """200 with empty body; override uses the configured value."""
        response = await client.get("/low-work-mem")

        assert response.status_code == 200
        assert response.content == b""
        _, params = engine.connections[0].statements[0]
        assert params == {"work_mem": "64kB"}

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        """x-request-id is generated or passed through."""
        response = await client.get("/low-work-mem", headers={"x-request-id": "req-42"})
        assert response.headers["x-request-id"] == "req-42"

        response = await client.get("/low-work-mem")
        assert response.headers["x-request-id"]

    @pytest.mark.parametrize("path", ["/default-work-mem", "/low-work-mem"])
    @pytest.mark.asyncio
    async def test_query_error_is_500(self, path: str) -> None:
        """Store rejections answer 500 with the error text."""
        app = build_app(FakeEngine(fail_on="player_stats"))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get(path)

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == 'Query error: relation "player_stats" does not exist'

    @pytest.mark.parametrize("path", ["/default-work-mem", "/low-work-mem"])
    @pytest.mark.asyncio
    async def test_connection_error_is_500(self, path: str) -> None:
        """Unreachable store answers 500, not a hang."""
        app = build_app(FakeEngine(start_error=ConnectionRefusedError(111, "Connection refused")))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get(path)

        assert response.status_code == 500
        assert response.text.startswith("Query error: Unable to acquire connection")


class TestInspectionRoutes:
    """Tests for /work-mem and /plans."""

    @pytest.mark.asyncio
    async def test_work_mem_after_low_route(self, client: AsyncClient) -> None:
        """The override never shows up on a fresh connection."""
        await client.get("/low-work-mem")
        response = await client.get("/work-mem")

        assert response.status_code == 200
        assert response.json() == {"work_mem": "4MB"}

    @pytest.mark.asyncio
    async def test_plan_default(self, client: AsyncClient) -> None:
        response = await client.get("/plans/default")

        assert response.status_code == 200
        assert "quicksort" in response.text

    @pytest.mark.asyncio
    async def test_plan_low(self, client: AsyncClient) -> None:
        response = await client.get("/plans/low")

        assert response.status_code == 200
        assert "external merge" in response.text

    @pytest.mark.asyncio
    async def test_plan_unknown_mode(self, client: AsyncClient) -> None:
        response = await client.get("/plans/medium")
        assert response.status_code == 422


class TestOperationalRoutes:
    """Tests for health and metrics."""

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient) -> None:
        response = await client.get("/health/live")
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_readiness(self, client: AsyncClient) -> None:
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_readiness_store_down(self) -> None:
        app = build_app(FakeEngine(start_error=ConnectionRefusedError(111, "Connection refused")))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["database"]["message"] == "Database check failed"

    @pytest.mark.asyncio
    async def test_metrics_exposition(self, client: AsyncClient) -> None:
        await client.get("/default-work-mem")
        await client.get("/low-work-mem")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert 'workmem_query_duration_seconds_count{mode="baseline"} 1.0' in response.text
        assert 'workmem_query_duration_seconds_count{mode="degraded"} 1.0' in response.text

    @pytest.mark.asyncio
    async def test_metrics_disabled(self) -> None:
        app = build_app(FakeEngine(), metrics=None)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get("/metrics")

        assert response.status_code == 404
