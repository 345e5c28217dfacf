"""Health check endpoint."""
from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.config import get_settings
from app.db import get_engine

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


def _alembic_head() -> str | None:
    """Latest revision shipped with the code, or None if the scripts cannot be read."""

    try:
        config = Config(str(ALEMBIC_INI))
        return ScriptDirectory.from_config(config).get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Cannot read Alembic scripts")
        return None


def _probe_database(engine: Engine) -> tuple[str, str | None]:
    """Return ('ok'|'error', applied revision)."""

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            try:
                revision = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
            except Exception:  # noqa: BLE001
                logger.exception("alembic_version table unreadable")
                revision = None
        return "ok", revision
    except Exception:  # noqa: BLE001
        logger.exception("Database unreachable")
        return "error", None


def _migration_status(db_status: str, applied: str | None) -> str:
    if db_status != "ok":
        return "unknown"
    expected = _alembic_head()
    if expected is None or applied is None:
        return "unknown"
    return "up_to_date" if applied == expected else "out_of_date"


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    """Report database reachability, migration state and caisse settings."""

    settings = get_settings()
    db_status, applied = _probe_database(get_engine())
    migrations_status = _migration_status(db_status, applied)
    db_ok = db_status == "ok"
    migrations_ok = migrations_status == "up_to_date"
    return {
        "status": "ok" if db_ok and migrations_ok else "degraded",
        "env": settings.app_env,
        "db_ok": db_ok,
        "db_status": db_status,
        "migrations_ok": migrations_ok,
        "migrations_status": migrations_status,
        "caisse": {
            "currency": settings.CURRENCY_LABEL,
            "period_budget_enforced": bool(settings.ENFORCE_PERIOD_BUDGET),
        },
    }
