"""Operational alerts raised by caisse checks."""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.alert import Alert

logger = logging.getLogger(__name__)

ALERT_CAISSE_DRIFT = "CAISSE_DRIFT_DETECTED"


def create_alert(db: Session, *, alert_type: str, message: str, payload: dict[str, Any]) -> Alert:
    """Persist an alert and commit it on its own, independently of any caisse write."""

    alert = Alert(type=alert_type, message=message[:255], payload_json=payload)
    db.add(alert)
    db.commit()
    db.refresh(alert)
    logger.warning("Caisse alert raised", extra={"alert_id": alert.id, "type": alert_type, "payload": payload})
    return alert


def list_alerts(db: Session, alert_type: str | None = None, *, limit: int = 100) -> list[Alert]:
    """Most recent first."""

    stmt = select(Alert)
    if alert_type:
        stmt = stmt.where(Alert.type == alert_type)
    stmt = stmt.order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def latest_alert(db: Session, alert_type: str) -> Alert | None:
    return db.scalars(
        select(Alert).where(Alert.type == alert_type).order_by(Alert.created_at.desc(), Alert.id.desc()).limit(1)
    ).first()
