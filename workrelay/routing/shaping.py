"""Payload shaping rules: map an event to the payload a target receives.

Every rule is a pure transform: it builds a new mapping and never mutates
the event.  Rules also expose ``check`` so the ingress path can reject a
payload the rule could not shape *before* the caller is acknowledged.

Registered rules
----------------
``raw``
    A deep copy of the event.
``flatten_location``
    The event with the fields of its nested ``location`` object merged
    into the top level.  Nested keys win on collision.
``flatten:<field>``
    The same merge for any other nested object field.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol

from workrelay.models.events import MalformedEventError

FLATTEN_PREFIX = "flatten:"


class UnknownShapingRuleError(KeyError):
    """Raised when a target names a shaping rule that does not exist."""


class ShapingRule(Protocol):
    @property
    def name(self) -> str:
        ...

    def check(self, payload: dict[str, Any]) -> None:
        ...

    def apply(self, payload: dict[str, Any]) -> dict[str, Any]:
        ...


class RawRule:
    """Forward the event unchanged."""

    @property
    def name(self) -> str:
        return "raw"

    def check(self, payload: dict[str, Any]) -> None:
        return None

    def apply(self, payload: dict[str, Any]) -> dict[str, Any]:
        return copy.deepcopy(payload)


class FlattenRule:
    """Merge the fields of ``payload[field]`` into the top level.

    A missing or ``null`` field leaves the payload as-is.  Any other
    non-object value is malformed.
    """

    def __init__(self, field: str) -> None:
        if not field:
            raise ValueError("flatten field name must not be empty")
        self._field = field

    @property
    def field(self) -> str:
        return self._field

    @property
    def name(self) -> str:
        if self._field == "location":
            return "flatten_location"
        return f"{FLATTEN_PREFIX}{self._field}"

    def check(self, payload: dict[str, Any]) -> None:
        nested = payload.get(self._field)
        if nested is None or isinstance(nested, dict):
            return
        raise MalformedEventError(
            f"field {self._field!r} must be a JSON object, got {type(nested).__name__}"
        )

    def apply(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.check(payload)
        shaped = copy.deepcopy(payload)
        nested = shaped.get(self._field)
        if nested:
            shaped.update(copy.deepcopy(nested))
        return shaped


def get_rule(name: str) -> ShapingRule:
    """Resolve a rule by name.

    Raises
    ------
    UnknownShapingRuleError
        If *name* is not a registered rule.
    """
    if name == "raw":
        return RawRule()
    if name == "flatten_location":
        return FlattenRule("location")
    if name.startswith(FLATTEN_PREFIX) and len(name) > len(FLATTEN_PREFIX):
        return FlattenRule(name[len(FLATTEN_PREFIX):])
    raise UnknownShapingRuleError(name)
