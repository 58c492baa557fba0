"""Delivery outcome records: consumed by logging, never by callers."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"


class DeliveryResult(BaseModel):
    """Outcome of one delivery attempt to one target."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    target_name: str
    status: DeliveryStatus
    elapsed_ms: float = 0.0
    error: str = ""
    response: dict[str, Any] | None = None
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED
