"""Routing configuration models: dispatch targets and the delay policy."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class TargetKind(str, Enum):
    """Supported downstream target implementations."""

    LAMBDA = "lambda"
    LOCAL_FILE = "local_file"


class TargetSpec(BaseModel):
    """A single downstream target and its payload-shaping rule.

    ``address`` is interpreted by the target kind: a Lambda function name
    for ``lambda``, a base directory for ``local_file``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: TargetKind = TargetKind.LAMBDA
    address: str
    shaping: str = "raw"
    enabled: bool = True
    options: dict[str, Any] = {}


class DelayPolicy(BaseModel):
    """Bounds of the adaptive delay sawtooth, in milliseconds.

    Each accepted event moves the counter up by ``step_ms`` while it is
    at or below ``ceiling_ms``; past the ceiling it drops back to
    ``floor_ms``.
    """

    model_config = ConfigDict(frozen=True)

    floor_ms: int = 1000
    step_ms: int = 500
    ceiling_ms: int = 5000

    @model_validator(mode="after")
    def _check_band(self) -> DelayPolicy:
        if self.floor_ms < 0:
            raise ValueError("floor_ms must be >= 0")
        if self.step_ms <= 0:
            raise ValueError("step_ms must be > 0")
        if self.ceiling_ms < self.floor_ms:
            raise ValueError("ceiling_ms must be >= floor_ms")
        return self
