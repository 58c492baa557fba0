"""Tests for relay config: env-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from workrelay.config import DEFAULT_ALLOWLIST, RelayConfig
from workrelay.models.routing import TargetKind


class TestRelayConfig:
    def test_defaults(self):
        config = RelayConfig()
        assert config.port == 8080
        assert config.aws_region == "us-east-2"
        assert config.recorder_db_path == Path(".workrelay/events.db")
        assert config.allowlist == DEFAULT_ALLOWLIST

    def test_default_targets(self):
        config = RelayConfig()
        by_name = {t.name: t for t in config.targets}
        assert by_name["netsuite"].address == "collinsAPI_sendtoNS"
        assert by_name["netsuite"].shaping == "flatten_location"
        assert by_name["acumatica"].address == "collinsAPI_sendtoACU"
        assert by_name["acumatica"].shaping == "raw"

    def test_delay_policy(self):
        policy = RelayConfig().delay_policy
        assert (policy.floor_ms, policy.step_ms, policy.ceiling_ms) == (1000, 500, 5000)

    def test_is_production(self):
        assert RelayConfig().is_production is False
        assert RelayConfig(environment="production").is_production is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("WORKRELAY_PORT", "9000")
        monkeypatch.setenv("WORKRELAY_ALLOWLIST", '["https://a.example", "10.0.0.0/8"]')
        monkeypatch.setenv(
            "WORKRELAY_TARGETS",
            '[{"name": "dev", "kind": "local_file", "address": "/tmp/out"}]',
        )
        config = RelayConfig()

        assert config.port == 9000
        assert config.allowlist == ["https://a.example", "10.0.0.0/8"]
        assert config.targets[0].kind is TargetKind.LOCAL_FILE
        assert config.targets[0].shaping == "raw"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"delay_floor_ms": -1},
            {"delay_step_ms": 0},
            {"delay_floor_ms": 600, "delay_ceiling_ms": 500},
            {"max_delivery_workers": 0},
        ],
    )
    def test_invalid_ranges_rejected(self, overrides):
        with pytest.raises(ValidationError):
            RelayConfig(**overrides)
