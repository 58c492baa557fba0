"""Build dispatcher routes from target configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from workrelay.models.routing import TargetKind, TargetSpec
from workrelay.routing.dispatcher import Route
from workrelay.routing.shaping import get_rule
from workrelay.routing.targets import BaseTarget
from workrelay.routing.targets.lambda_target import LambdaTarget, make_lambda_client
from workrelay.routing.targets.local_file import LocalFileTarget

logger = logging.getLogger(__name__)


class UnknownTargetKindError(ValueError):
    """Raised when a target spec names a kind with no implementation."""


def build_routes(
    specs: Iterable[TargetSpec],
    *,
    region_name: str = "us-east-2",
    connect_timeout: float = 5.0,
    read_timeout: float = 30.0,
    lambda_client: Any | None = None,
) -> list[Route]:
    """Instantiate a target and shaping rule for each enabled spec.

    All Lambda targets share one client, created on first use unless
    *lambda_client* is supplied.

    Raises
    ------
    UnknownShapingRuleError
        If a spec names an unknown shaping rule.
    UnknownTargetKindError
        If a spec's kind has no implementation.
    ValueError
        If two enabled specs share a name.
    """
    routes: list[Route] = []
    seen: set[str] = set()

    for spec in specs:
        if not spec.enabled:
            logger.info("Target %s is disabled; skipping", spec.name)
            continue
        if spec.name in seen:
            raise ValueError(f"duplicate target name: {spec.name!r}")
        seen.add(spec.name)

        rule = get_rule(spec.shaping)
        target: BaseTarget
        if spec.kind is TargetKind.LAMBDA:
            if lambda_client is None:
                lambda_client = make_lambda_client(
                    region_name,
                    connect_timeout=connect_timeout,
                    read_timeout=read_timeout,
                )
            target = LambdaTarget(
                spec.name,
                spec.address,
                lambda_client,
                invocation_type=spec.options.get("invocation_type", "RequestResponse"),
            )
        elif spec.kind is TargetKind.LOCAL_FILE:
            target = LocalFileTarget(spec.name, Path(spec.address))
        else:
            raise UnknownTargetKindError(spec.kind)

        logger.info(
            "Configured target %s (%s -> %s, shaping=%s)",
            spec.name,
            spec.kind.value,
            spec.address,
            rule.name,
        )
        routes.append(Route(target=target, rule=rule))

    return routes
