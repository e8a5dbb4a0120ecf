import pytest
from fastapi.testclient import TestClient

from api import health
from app import app
from configs import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def healthy_checks(monkeypatch):
    async def ok():
        return True

    monkeypatch.setattr(health, "_check_database", ok)
    monkeypatch.setattr(health, "_check_redis", ok)
    monkeypatch.setattr(health, "_check_supabase", ok)


def test_health_endpoint_returns_status_ok(monkeypatch, healthy_checks):
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("VERSION", "9.9.9")

    response = TestClient(app).get("/api/health/")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "app": "TestApp",
        "environment": "test",
        "version": "9.9.9",
        "database": "ok",
        "redis": "ok",
        "supabase": "ok",
    }


def test_health_endpoint_reports_failed_dependency(monkeypatch, healthy_checks):
    async def redis_down():
        raise RuntimeError("Redis client is not initialized")

    monkeypatch.setattr(health, "_check_redis", redis_down)

    response = TestClient(app).get("/api/health/")

    assert response.status_code == 503
    body = response.json()
    assert body["redis"] == "error"
    assert body["database"] == "ok"


@pytest.mark.asyncio
async def test_check_database_runs_select_one(monkeypatch):
    class DummyResult:
        @staticmethod
        def scalar():
            return 1

    class DummySession:
        async def execute(self, _):
            return DummyResult()

    class DummyCtx:
        async def __aenter__(self):
            return DummySession()

        async def __aexit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr(health, "use_db_session", lambda: DummyCtx())

    assert await health._check_database() is True


@pytest.mark.asyncio
async def test_check_redis_pings(monkeypatch):
    class DummyRedis:
        async def ping(self):
            return True

    async def get_client():
        return DummyRedis()

    monkeypatch.setattr(health, "get_redis_client", get_client)

    assert await health._check_redis() is True
