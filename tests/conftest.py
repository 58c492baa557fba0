"""Shared test fixtures for Workrelay."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from workrelay.core.delay import AdaptiveDelay
from workrelay.core.recorder import SqliteEventRecorder
from workrelay.models.events import WorkOrderEvent
from workrelay.models.routing import DelayPolicy
from workrelay.routing.dispatcher import FanOutDispatcher, Route
from workrelay.routing.shaping import FlattenRule, RawRule


# ---------------------------------------------------------------------------
# Fake targets, shared across test modules
# ---------------------------------------------------------------------------


class RecordingTarget:
    """A target that always succeeds and keeps what it received."""

    def __init__(self, name: str = "recording") -> None:
        self._name = name
        self._lock = threading.Lock()
        self.received: list[tuple[str, dict[str, Any]]] = []
        self.delivered = threading.Event()

    @property
    def target_name(self) -> str:
        return self._name

    def deliver(self, event_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self.received.append((event_id, payload))
        self.delivered.set()
        return {"ok": True}

    @property
    def payloads(self) -> list[dict[str, Any]]:
        with self._lock:
            return [payload for _, payload in self.received]


class FailingTarget:
    """A target that always raises."""

    def __init__(self, name: str = "failing") -> None:
        self._name = name
        self.attempts = 0

    @property
    def target_name(self) -> str:
        return self._name

    def deliver(self, event_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.attempts += 1
        raise RuntimeError("downstream unreachable")


class BlockingTarget(RecordingTarget):
    """A target that waits until released before succeeding."""

    def __init__(self, name: str = "blocking") -> None:
        super().__init__(name)
        self.release = threading.Event()

    def deliver(self, event_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.release.wait(timeout=10)
        return super().deliver(event_id, payload)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fast_policy() -> DelayPolicy:
    """A delay band in single milliseconds so tests finish quickly."""
    return DelayPolicy(floor_ms=0, step_ms=1, ceiling_ms=5)


@pytest.fixture
def recorder(tmp_path: Path) -> SqliteEventRecorder:
    """Provide a fresh SqliteEventRecorder backed by a temp database."""
    return SqliteEventRecorder(tmp_path / "events.db")


@pytest.fixture
def make_event() -> Callable[..., WorkOrderEvent]:
    """Factory fixture: build a WorkOrderEvent with sensible defaults."""

    def _factory(payload: dict[str, Any] | None = None, path_id: str = "77") -> WorkOrderEvent:
        if payload is None:
            payload = {"wo": 42}
        return WorkOrderEvent.from_payload(path_id, payload)

    return _factory


@pytest.fixture
def make_dispatcher(
    fast_policy: DelayPolicy,
) -> Iterator[Callable[..., FanOutDispatcher]]:
    """Factory fixture: build dispatchers that are shut down after the test."""
    created: list[FanOutDispatcher] = []

    def _factory(routes: list[Route], **kwargs: Any) -> FanOutDispatcher:
        kwargs.setdefault("delay", AdaptiveDelay(fast_policy))
        dispatcher = FanOutDispatcher(routes, **kwargs)
        created.append(dispatcher)
        return dispatcher

    yield _factory

    for dispatcher in created:
        dispatcher.shutdown(timeout=5)


@pytest.fixture
def flatten_target() -> RecordingTarget:
    return RecordingTarget("netsuite")


@pytest.fixture
def raw_target() -> RecordingTarget:
    return RecordingTarget("acumatica")


@pytest.fixture
def reference_routes(
    flatten_target: RecordingTarget, raw_target: RecordingTarget
) -> list[Route]:
    """The two-target layout of the reference deployment, with fakes."""
    return [
        Route(target=flatten_target, rule=FlattenRule("location")),
        Route(target=raw_target, rule=RawRule()),
    ]
