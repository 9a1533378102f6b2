from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from orgdesk.config import Settings
from orgdesk.database import get_session
from orgdesk.logging_config import JSONFormatter
from orgdesk.main import app
from orgdesk.utils.time import advance_timestamp, to_naive_utc


def test_cors_origins_accepts_json_and_csv():
    assert Settings(CORS_ORIGINS='["http://a.test", " http://b.test "]').cors_origins_list == [
        "http://a.test",
        "http://b.test",
    ]
    assert Settings(CORS_ORIGINS="http://a.test, http://b.test").cors_origins_list == [
        "http://a.test",
        "http://b.test",
    ]
    assert Settings(CORS_ORIGINS="").cors_origins_list == []


def test_production_flag():
    assert Settings(APP_ENV="prod").is_production
    assert not Settings(APP_ENV="development").is_production


def test_to_naive_utc():
    aware = datetime(2026, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert to_naive_utc(aware) == datetime(2026, 1, 1, 17, 0)
    assert to_naive_utc(datetime(2026, 1, 1)) == datetime(2026, 1, 1)


def test_advance_timestamp_moves_past_future_previous():
    future = datetime(2999, 1, 1)
    assert advance_timestamp(future) == future + timedelta(microseconds=1)
    assert advance_timestamp(datetime(2000, 1, 1)) > datetime(2000, 1, 1)


def test_formatter_appends_context():
    record = logging.LogRecord("orgdesk.rpc", logging.WARNING, __file__, 1, "operation failed", None, None)
    record.operation = "createLesson"
    record.error_code = "not_found"

    line = JSONFormatter().format(record)

    assert "operation failed" in line
    assert "operation=createLesson" in line
    assert "error_code=not_found" in line


@pytest.mark.asyncio
async def test_liveness_and_headers():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/api/health/live", headers={"X-Request-ID": "req-1"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "alive"
    assert resp.headers["X-Request-ID"] == "req-1"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_metrics_endpoint_shape():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        await client.get("/")
        resp = await client.get("/api/metrics")

    snapshot = resp.json()["metrics"]
    assert snapshot["requests_total"] >= 1
    assert "operation_counts" in snapshot


@pytest.mark.asyncio
async def test_domain_errors_rendered_by_rpc_router(db_session):
    async def _override_session():
        yield db_session

    app.dependency_overrides[get_session] = _override_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.post(
                "/api/rpc/createLesson",
                json={"module_id": 404, "title": "x", "slug": "x", "content": None},
            )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 404
    assert resp.json() == {
        "error": {
            "code": "not_found",
            "message": "Module with id 404 not found",
            "details": {"entity": "Module", "id": 404},
        }
    }
