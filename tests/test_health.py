import pytest


@pytest.mark.anyio("asyncio")
async def test_healthcheck(client):
    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] in {"ok", "degraded"}
    assert payload.get("db_status") in {"ok", "error"}
    assert payload.get("migrations_status") in {"up_to_date", "out_of_date", "unknown"}
    assert isinstance(payload.get("db_ok"), bool)
    assert isinstance(payload.get("migrations_ok"), bool)
    assert payload["caisse"] == {"currency": "FCFA", "period_budget_enforced": False}


@pytest.mark.anyio("asyncio")
async def test_healthcheck_reports_migrated_schema(client):
    payload = (await client.get("/health")).json()
    assert payload["status"] == "ok"
    assert payload["migrations_status"] == "up_to_date"


@pytest.mark.anyio("asyncio")
async def test_health_degrades_on_db_failure(monkeypatch, client):
    class BrokenEngine:
        def connect(self):  # pragma: no cover - simple stub
            raise RuntimeError("DB down")

    monkeypatch.setattr("app.routers.health.get_engine", lambda: BrokenEngine())

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["db_status"] == "error"
    assert payload["migrations_status"] == "unknown"
    assert payload["db_ok"] is False
    assert payload["migrations_ok"] is False


@pytest.mark.anyio("asyncio")
async def test_health_status_degraded_when_migrations_out_of_date(monkeypatch, client):
    from app.routers import health as health_module

    monkeypatch.setattr(health_module, "_alembic_head", lambda: "unknown_revision")

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["migrations_status"] == "out_of_date"
