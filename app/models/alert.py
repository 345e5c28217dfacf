"""Alert model."""
from sqlalchemy import Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Alert(Base):
    """Operational alert raised by a caisse check (e.g. balance drift)."""

    __tablename__ = "alerts"
    __table_args__ = (Index("ix_alerts_created_at", "created_at"),)

    type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    message: Mapped[str] = mapped_column(String(255), nullable=False)
    payload_json: Mapped[dict] = mapped_column(JSON, nullable=False)
