"""Unit tests for LocalFileTarget and the route factory."""

from __future__ import annotations

from pathlib import Path

import boto3
import pytest

from workrelay.models.routing import TargetKind, TargetSpec
from workrelay.routing.shaping import FlattenRule, RawRule, UnknownShapingRuleError
from workrelay.routing.targets import BaseTarget, DeliveryError
from workrelay.routing.targets.factory import build_routes
from workrelay.routing.targets.lambda_target import LambdaTarget
from workrelay.routing.targets.local_file import LocalFileTarget


class TestLocalFileTarget:
    def test_writes_payload_file(self, tmp_path: Path):
        target = LocalFileTarget("dev", tmp_path / "outbox")
        response = target.deliver("evt-1", {"qty": 3})

        expected = tmp_path / "outbox" / "dev" / "evt-1.json"
        assert response == {"path": str(expected)}
        assert target.list_payloads() == [expected]
        assert target.read_payload(expected) == {"qty": 3}

    def test_list_empty(self, tmp_path: Path):
        assert LocalFileTarget("dev", tmp_path).list_payloads() == []

    def test_unwritable_directory_raises(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        target = LocalFileTarget("dev", blocker)
        with pytest.raises(DeliveryError):
            target.deliver("evt-1", {"qty": 3})

    def test_protocol_compliance(self, tmp_path: Path):
        target = LocalFileTarget("dev", tmp_path)
        assert isinstance(target, BaseTarget)
        assert target.target_name == "dev"


class TestBuildRoutes:
    def _client(self):
        return boto3.client(
            "lambda",
            region_name="us-east-2",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )

    def test_reference_layout(self):
        specs = [
            TargetSpec(name="netsuite", address="collinsAPI_sendtoNS", shaping="flatten_location"),
            TargetSpec(name="acumatica", address="collinsAPI_sendtoACU", shaping="raw"),
        ]
        client = self._client()
        routes = build_routes(specs, lambda_client=client)

        assert [r.target.target_name for r in routes] == ["netsuite", "acumatica"]
        assert all(isinstance(r.target, LambdaTarget) for r in routes)
        assert isinstance(routes[0].rule, FlattenRule)
        assert isinstance(routes[1].rule, RawRule)
        assert routes[0].target.function_name == "collinsAPI_sendtoNS"

    def test_local_file_kind(self, tmp_path: Path):
        specs = [TargetSpec(name="dev", kind=TargetKind.LOCAL_FILE, address=str(tmp_path))]
        routes = build_routes(specs)
        assert isinstance(routes[0].target, LocalFileTarget)

    def test_disabled_skipped(self, tmp_path: Path):
        specs = [
            TargetSpec(name="on", kind=TargetKind.LOCAL_FILE, address=str(tmp_path)),
            TargetSpec(name="off", kind=TargetKind.LOCAL_FILE, address=str(tmp_path), enabled=False),
        ]
        assert [r.target.target_name for r in build_routes(specs)] == ["on"]

    def test_duplicate_names_rejected(self, tmp_path: Path):
        specs = [
            TargetSpec(name="dup", kind=TargetKind.LOCAL_FILE, address=str(tmp_path)),
            TargetSpec(name="dup", kind=TargetKind.LOCAL_FILE, address=str(tmp_path)),
        ]
        with pytest.raises(ValueError, match="duplicate"):
            build_routes(specs)

    def test_unknown_shaping_rejected(self, tmp_path: Path):
        specs = [
            TargetSpec(name="x", kind=TargetKind.LOCAL_FILE, address=str(tmp_path), shaping="nope"),
        ]
        with pytest.raises(UnknownShapingRuleError):
            build_routes(specs)
