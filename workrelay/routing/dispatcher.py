"""FanOutDispatcher: acknowledges now, delivers to every target later.

``accept`` is the only synchronous step: it checks the event against each
target's shaping rule, advances the shared adaptive delay, schedules a
one-shot timer, and returns the acknowledgment.  It never waits on the
timer, the recorder, or any target.

When the timer fires, each target gets its own worker task that shapes
the payload and makes one delivery attempt.  Failures are logged and
reported through ``on_result``; they are never retried, never affect
other targets, and never reach the original caller.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import NamedTuple

from workrelay.core.delay import AdaptiveDelay
from workrelay.core.recorder import EventRecorder
from workrelay.models.delivery import DeliveryResult, DeliveryStatus
from workrelay.models.events import Acknowledgment, WorkOrderEvent
from workrelay.routing.shaping import ShapingRule
from workrelay.routing.targets import BaseTarget

logger = logging.getLogger(__name__)


class Route(NamedTuple):
    """A target paired with the rule that shapes its payload."""

    target: BaseTarget
    rule: ShapingRule


class DispatcherClosedError(RuntimeError):
    """Raised when ``accept`` is called after ``shutdown``."""


class FanOutDispatcher:
    """Schedules deferred, isolated delivery of events to all routes.

    Parameters
    ----------
    routes:
        Targets and their shaping rules.  Fixed for the dispatcher's
        lifetime.
    delay:
        The shared adaptive delay counter.  Defaults to a fresh counter
        with the default policy.
    recorder:
        Optional best-effort event recorder, run on a worker thread.
    max_workers:
        Worker threads per target.  Every target has its own pool, so a
        slow or hanging target only queues its own deliveries.  Recorder
        calls run on a separate single-thread pool.
    on_result:
        Called with every ``DeliveryResult``.  Exceptions it raises are
        logged and ignored.

    Usage
    -----
    >>> dispatcher = FanOutDispatcher([Route(target, RawRule())])
    >>> ack = dispatcher.accept(WorkOrderEvent.from_payload("77", {"wo": 42}))
    >>> ack.workrequest
    'WO received.'
    """

    def __init__(
        self,
        routes: Sequence[Route],
        *,
        delay: AdaptiveDelay | None = None,
        recorder: EventRecorder | None = None,
        max_workers: int = 8,
        on_result: Callable[[DeliveryResult], None] | None = None,
    ) -> None:
        self._routes: tuple[Route, ...] = tuple(routes)
        self._delay = delay or AdaptiveDelay()
        self._recorder = recorder
        self._on_result = on_result
        self._executors: tuple[ThreadPoolExecutor, ...] = tuple(
            ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix=f"workrelay-{route.target.target_name}",
            )
            for route in self._routes
        )
        self._record_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="workrelay-recorder"
        )
        self._idle = threading.Condition()
        self._pending_events = 0
        self._pending_records = 0
        self._closed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def delay(self) -> AdaptiveDelay:
        return self._delay

    @property
    def pending(self) -> int:
        """Events accepted but not yet delivered to every target."""
        with self._idle:
            return self._pending_events

    # ------------------------------------------------------------------
    # Accept (synchronous path)
    # ------------------------------------------------------------------

    def accept(self, event: WorkOrderEvent) -> Acknowledgment:
        """Acknowledge *event* and schedule its delivery.

        Raises
        ------
        MalformedEventError
            If any route's shaping rule cannot handle the payload.  Nothing
            is scheduled and the delay counter is not advanced.
        DispatcherClosedError
            If the dispatcher has been shut down.
        """
        if self._closed:
            raise DispatcherClosedError("dispatcher is shut down")

        for route in self._routes:
            route.rule.check(event.payload)

        delay_ms = self._delay.advance()

        with self._idle:
            self._pending_events += 1

        if self._recorder is not None:
            self._submit_record(event)

        timer = threading.Timer(delay_ms / 1000.0, self._fire, args=(event,))
        timer.name = f"workrelay-timer-{event.event_id[:8]}"
        timer.daemon = False
        timer.start()

        logger.info(
            "Event %s (path id %s) scheduled for dispatch in %d ms to %d targets",
            event.event_id,
            event.path_id,
            delay_ms,
            len(self._routes),
        )
        return Acknowledgment(event_id=event.event_id, delay_ms=delay_ms)

    # ------------------------------------------------------------------
    # Recorder side channel
    # ------------------------------------------------------------------

    def _submit_record(self, event: WorkOrderEvent) -> None:
        with self._idle:
            self._pending_records += 1
        try:
            future = self._record_executor.submit(self._record, event)
        except RuntimeError as exc:
            logger.error("Could not schedule recording of event %s: %s", event.event_id, exc)
            self._record_done()
            return
        future.add_done_callback(lambda _f: self._record_done())

    def _record(self, event: WorkOrderEvent) -> bool:
        try:
            ok = self._recorder.record(event)
        except Exception as exc:  # noqa: BLE001
            logger.error("Recorder raised for event %s: %s", event.event_id, exc)
            return False
        if not ok:
            logger.warning("Event %s was not recorded; dispatch continues", event.event_id)
        return ok

    def _record_done(self) -> None:
        with self._idle:
            self._pending_records -= 1
            self._idle.notify_all()

    # ------------------------------------------------------------------
    # Deferred fan-out
    # ------------------------------------------------------------------

    def _fire(self, event: WorkOrderEvent) -> None:
        if not self._routes:
            logger.warning("No targets configured; event %s dropped", event.event_id)
            self._event_done()
            return

        remaining = [len(self._routes)]
        lock = threading.Lock()

        def _target_done(_future: Future) -> None:
            with lock:
                remaining[0] -= 1
                finished = remaining[0] == 0
            if finished:
                self._event_done()

        for route, executor in zip(self._routes, self._executors):
            try:
                future = executor.submit(self._deliver_one, route, event)
            except RuntimeError as exc:
                logger.error(
                    "Could not schedule delivery of event %s to %s: %s",
                    event.event_id,
                    route.target.target_name,
                    exc,
                )
                _target_done(None)
                continue
            future.add_done_callback(_target_done)

    def _deliver_one(self, route: Route, event: WorkOrderEvent) -> DeliveryResult:
        name = route.target.target_name
        started = time.perf_counter()
        try:
            payload = route.rule.apply(event.payload)
            response = route.target.deliver(event.event_id, payload)
        except Exception as exc:  # noqa: BLE001
            result = DeliveryResult(
                event_id=event.event_id,
                target_name=name,
                status=DeliveryStatus.FAILED,
                elapsed_ms=(time.perf_counter() - started) * 1000.0,
                error=f"{type(exc).__name__}: {exc}",
            )
            logger.error(
                "Delivery of event %s to %s failed after %.1f ms: %s",
                event.event_id,
                name,
                result.elapsed_ms,
                result.error,
            )
        else:
            result = DeliveryResult(
                event_id=event.event_id,
                target_name=name,
                status=DeliveryStatus.DELIVERED,
                elapsed_ms=(time.perf_counter() - started) * 1000.0,
                response=response,
            )
            logger.info(
                "Delivered event %s to %s in %.1f ms",
                event.event_id,
                name,
                result.elapsed_ms,
            )
            logger.debug("Response from %s: %s", name, response)

        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:  # noqa: BLE001
                logger.exception("on_result callback failed for %s", name)
        return result

    def _event_done(self) -> None:
        with self._idle:
            self._pending_events -= 1
            self._idle.notify_all()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every accepted event and recorder call has finished.

        Returns ``False`` if *timeout* elapsed first.
        """
        with self._idle:
            return self._idle.wait_for(
                lambda: self._pending_events == 0 and self._pending_records == 0,
                timeout=timeout,
            )

    def shutdown(self, timeout: float | None = None) -> bool:
        """Stop accepting, drain pending work, then stop the worker pools.

        Returns ``False`` if pending work did not finish within *timeout*;
        the pools are still shut down without waiting in that case.
        """
        self._closed = True
        drained = self.wait_idle(timeout)
        if not drained:
            logger.warning(
                "Shutting down with %d events still pending", self.pending
            )
        for executor in self._executors:
            executor.shutdown(wait=drained)
        self._record_executor.shutdown(wait=drained)
        return drained
