"""Alerts endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.alert import Alert
from app.schemas.alert import AlertRead
from app.services import alerts as alert_service

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=list[AlertRead])
def list_alerts(
    alert_type: str | None = Query(default=None, alias="type", max_length=100),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[Alert]:
    return alert_service.list_alerts(db, alert_type, limit=limit)
