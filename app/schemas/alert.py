"""Alert schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AlertRead(BaseModel):
    """Persisted alert; ``payload`` carries the figures that triggered it (amounts as strings)."""

    id: int
    type: str
    message: str
    payload: dict[str, Any] = Field(validation_alias="payload_json")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
