"""AWS Lambda target: invokes a function with the shaped payload.

The function receives ``{"body": <payload>}`` as its event, matching how
API Gateway proxies hand a request body to a handler.  One attempt per
call: botocore retries are disabled and connect/read timeouts bound the
wait, so an unreachable endpoint surfaces as a ``DeliveryError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from workrelay.routing.targets import DeliveryError

logger = logging.getLogger(__name__)


def make_lambda_client(
    region_name: str,
    *,
    connect_timeout: float = 5.0,
    read_timeout: float = 30.0,
) -> Any:
    """Create a boto3 Lambda client with single-attempt delivery."""
    return boto3.client(
        "lambda",
        region_name=region_name,
        config=Config(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            retries={"total_max_attempts": 1, "mode": "standard"},
        ),
    )


class LambdaTarget:
    """Delivers payloads by invoking an AWS Lambda function.

    Parameters
    ----------
    name:
        Target name used in logs and delivery results.
    function_name:
        Lambda function name or ARN.
    client:
        A boto3 ``lambda`` client.  Shared between targets is fine;
        boto3 clients are thread-safe.
    invocation_type:
        ``"RequestResponse"`` (wait for the function's result) or
        ``"Event"`` (asynchronous invoke, returns 202).
    """

    def __init__(
        self,
        name: str,
        function_name: str,
        client: Any,
        invocation_type: str = "RequestResponse",
    ) -> None:
        self._name = name
        self._function_name = function_name
        self._client = client
        self._invocation_type = invocation_type

    @property
    def target_name(self) -> str:
        return self._name

    @property
    def function_name(self) -> str:
        return self._function_name

    def deliver(self, event_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug(
            "Invoking Lambda %s for event %s", self._function_name, event_id
        )
        try:
            response = self._client.invoke(
                FunctionName=self._function_name,
                InvocationType=self._invocation_type,
                Payload=json.dumps({"body": payload}),
            )
        except (BotoCoreError, ClientError) as exc:
            raise DeliveryError(
                f"invoke {self._function_name} failed: {exc}"
            ) from exc

        body = _read_payload(response.get("Payload"))
        if response.get("FunctionError"):
            raise DeliveryError(
                f"{self._function_name} reported {response['FunctionError']}: {body}"
            )

        return {
            "status_code": response.get("StatusCode"),
            "executed_version": response.get("ExecutedVersion"),
            "payload": body,
        }


def _read_payload(stream: Any) -> str:
    if stream is None:
        return ""
    raw = stream.read() if hasattr(stream, "read") else stream
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)
