"""Inbound work-order events and the acknowledgment returned to callers.

An event is an opaque JSON object submitted to ``/workrequest/{id}``.
The relay never inspects its business fields beyond what a shaping rule
needs; the path identifier is carried for logging only and is neither
validated nor used for de-duplication.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ACK_MESSAGE = "WO received."


class MalformedEventError(ValueError):
    """Raised when an inbound payload cannot be accepted as an event.

    This is the only failure a caller can observe: it is raised before
    the acknowledgment is produced.
    """


class WorkOrderEvent(BaseModel):
    """One accepted work-order payload.

    Frozen once constructed.  Dispatch code reads ``payload`` but never
    mutates it; shaping rules build new mappings.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    path_id: str = ""
    payload: dict[str, Any]
    received_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def from_payload(cls, path_id: str, body: Any) -> WorkOrderEvent:
        """Build an event from a decoded JSON body.

        Raises
        ------
        MalformedEventError
            If *body* is not a JSON object.
        """
        if not isinstance(body, dict):
            raise MalformedEventError(
                f"work order body must be a JSON object, got {type(body).__name__}"
            )
        if not all(isinstance(key, str) for key in body):
            raise MalformedEventError("work order keys must be strings")
        return cls(path_id=path_id, payload=body)


class Acknowledgment(BaseModel):
    """The immediate response confirming receipt.

    Only ``workrequest`` is serialized; ``event_id`` and ``delay_ms`` are
    kept for the server's own logging.
    """

    model_config = ConfigDict(frozen=True)

    workrequest: str = ACK_MESSAGE
    event_id: str | None = Field(default=None, exclude=True)
    delay_ms: int | None = Field(default=None, exclude=True)
