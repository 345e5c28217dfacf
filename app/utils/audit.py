"""Audit logging helper utilities."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy.orm import Session

from app.models.audit import AuditLog
from app.utils.time import utcnow


def _json_safe(data: Any) -> Any:
    """Return a copy of ``data`` where Decimals and enums are JSON-serialisable."""

    if isinstance(data, Mapping):
        return {key: _json_safe(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_json_safe(item) for item in data]
    if isinstance(data, Decimal):
        return str(data)
    value = getattr(data, "value", None)
    if isinstance(value, str):
        return value
    return data


def log_audit(
    db: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: int | None,
    data: dict | None = None,
) -> None:
    """Stage an audit entry in the shared AuditLog table (committed with the caller's unit of work)."""

    db.add(
        AuditLog(
            actor=actor,
            action=action,
            entity=entity,
            entity_id=entity_id,
            data_json=_json_safe(data or {}),
            at=utcnow(),
        )
    )


__all__ = ["log_audit"]
