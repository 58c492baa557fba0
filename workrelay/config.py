"""Process configuration: env-driven, read once at start.

Centralized config using pydantic-settings.  Reads from a .env file and
WORKRELAY_* environment variables; list-valued settings accept JSON.

Examples
--------
Override via environment::

    export WORKRELAY_PORT=9000
    export WORKRELAY_LOG_LEVEL=DEBUG
    export WORKRELAY_ALLOWLIST='["https://tse.collins-cs.com"]'
    export WORKRELAY_TARGETS='[{"name": "dev", "kind": "local_file", "address": "/tmp/outbox"}]'
"""

from __future__ import annotations

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from workrelay.models.routing import DelayPolicy, TargetKind, TargetSpec

DEFAULT_ALLOWLIST: list[str] = [
    "http://localhost:8080",
    "http://127.0.0.1:8080",
    "api.target.com/work_orders/v1",
    "https://stage-api.target.com/visitors/v1/visits",
    "https://api.target.com/visitors/v1/visits",
    "https://ec2-3-144-25-50.us-east-2.compute.amazonaws.com",
    "https://ec2-3-23-194-47.us-east-2.compute.amazonaws.com",
    "http://ec2-3-144-25-50.us-east-2.compute.amazonaws.com",
    "http://ec2-3-23-194-47.us-east-2.compute.amazonaws.com",
    "http://ec2-3-23-194-47.us-east-2.compute.amazonaws.com:8080",
    "https://tse.collins-cs.com",
]

DEFAULT_TARGETS: list[TargetSpec] = [
    TargetSpec(
        name="netsuite",
        kind=TargetKind.LAMBDA,
        address="collinsAPI_sendtoNS",
        shaping="flatten_location",
    ),
    TargetSpec(
        name="acumatica",
        kind=TargetKind.LAMBDA,
        address="collinsAPI_sendtoACU",
        shaping="raw",
    ),
]


class RelayConfig(BaseSettings):
    """Relay configuration with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WORKRELAY_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP
    host: str = "0.0.0.0"
    port: int = 8080
    welcome_message: str = "Welcome to the work order relay server"

    # Access gate
    allowlist: list[str] = list(DEFAULT_ALLOWLIST)

    # Delivery
    aws_region: str = "us-east-2"
    delivery_connect_timeout: float = 5.0
    delivery_read_timeout: float = 30.0
    max_delivery_workers: int = 8
    targets: list[TargetSpec] = list(DEFAULT_TARGETS)

    # Adaptive delay (milliseconds)
    delay_floor_ms: int = 1000
    delay_step_ms: int = 500
    delay_ceiling_ms: int = 5000

    # Event recorder
    recorder_enabled: bool = True
    recorder_db_path: Path = Path(".workrelay/events.db")

    @model_validator(mode="after")
    def _check_ranges(self) -> RelayConfig:
        if self.delay_floor_ms < 0:
            raise ValueError("delay_floor_ms must be >= 0")
        if self.delay_step_ms <= 0:
            raise ValueError("delay_step_ms must be > 0")
        if self.delay_ceiling_ms < self.delay_floor_ms:
            raise ValueError("delay_ceiling_ms must be >= delay_floor_ms")
        if self.max_delivery_workers < 1:
            raise ValueError("max_delivery_workers must be >= 1")
        return self

    @property
    def delay_policy(self) -> DelayPolicy:
        return DelayPolicy(
            floor_ms=self.delay_floor_ms,
            step_ms=self.delay_step_ms,
            ceiling_ms=self.delay_ceiling_ms,
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"
