"""Unit tests for LambdaTarget using botocore's Stubber."""

from __future__ import annotations

import io
import json

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from workrelay.routing.targets import BaseTarget, DeliveryError
from workrelay.routing.targets.lambda_target import LambdaTarget, make_lambda_client


def _client():
    return boto3.client(
        "lambda",
        region_name="us-east-2",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def _body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


class TestLambdaTarget:
    def test_invokes_with_body_wrapper(self):
        client = _client()
        target = LambdaTarget("netsuite", "collinsAPI_sendtoNS", client)
        payload = {"qty": 3, "city": "X"}

        with Stubber(client) as stubber:
            stubber.add_response(
                "invoke",
                {
                    "StatusCode": 200,
                    "ExecutedVersion": "$LATEST",
                    "Payload": _body(b'{"statusCode": 200}'),
                },
                {
                    "FunctionName": "collinsAPI_sendtoNS",
                    "InvocationType": "RequestResponse",
                    "Payload": json.dumps({"body": payload}),
                },
            )
            response = target.deliver("evt-1", payload)
            stubber.assert_no_pending_responses()

        assert response["status_code"] == 200
        assert response["executed_version"] == "$LATEST"
        assert response["payload"] == '{"statusCode": 200}'

    def test_function_error_raises(self):
        client = _client()
        target = LambdaTarget("acumatica", "collinsAPI_sendtoACU", client)

        with Stubber(client) as stubber:
            stubber.add_response(
                "invoke",
                {
                    "StatusCode": 200,
                    "FunctionError": "Unhandled",
                    "Payload": _body(b'{"errorMessage": "boom"}'),
                },
            )
            with pytest.raises(DeliveryError, match="Unhandled"):
                target.deliver("evt-1", {"wo": 42})

    def test_client_error_raises(self):
        client = _client()
        target = LambdaTarget("acumatica", "missing-fn", client)

        with Stubber(client) as stubber:
            stubber.add_client_error(
                "invoke",
                service_error_code="ResourceNotFoundException",
                http_status_code=404,
            )
            with pytest.raises(DeliveryError, match="missing-fn"):
                target.deliver("evt-1", {"wo": 42})

    def test_async_invocation_type(self):
        client = _client()
        target = LambdaTarget("netsuite", "fn", client, invocation_type="Event")

        with Stubber(client) as stubber:
            stubber.add_response(
                "invoke",
                {"StatusCode": 202},
                {
                    "FunctionName": "fn",
                    "InvocationType": "Event",
                    "Payload": json.dumps({"body": {}}),
                },
            )
            response = target.deliver("evt-1", {})

        assert response["status_code"] == 202
        assert response["payload"] == ""

    def test_protocol_compliance(self):
        target = LambdaTarget("netsuite", "fn", _client())
        assert isinstance(target, BaseTarget)
        assert target.target_name == "netsuite"
        assert target.function_name == "fn"


class TestMakeLambdaClient:
    def test_single_attempt_with_timeouts(self):
        client = make_lambda_client("us-east-2", connect_timeout=2, read_timeout=7)
        assert client.meta.region_name == "us-east-2"
        assert client.meta.config.connect_timeout == 2
        assert client.meta.config.read_timeout == 7
        assert client.meta.config.retries["total_max_attempts"] == 1
