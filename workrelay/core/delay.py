"""Adaptive delay counter: the shared sawtooth applied before dispatch.

One counter is shared by every in-flight event.  Each accepted event
adjusts it exactly once::

    value' = value + step   if value <= ceiling
    value' = floor          otherwise

and the event is scheduled with the post-adjustment value.  The counter
starts at ``floor``; its reachable states are ``[floor, ceiling + step]``.
"""

from __future__ import annotations

import logging
import threading

from workrelay.models.routing import DelayPolicy

logger = logging.getLogger(__name__)


class AdaptiveDelay:
    """Thread-safe sawtooth counter in milliseconds.

    The read-modify-write in :meth:`advance` runs under a lock, so
    concurrent acceptances never observe the same pre-increment value.
    """

    def __init__(self, policy: DelayPolicy | None = None) -> None:
        self._policy = policy or DelayPolicy()
        self._value = self._policy.floor_ms
        self._lock = threading.Lock()

    @property
    def policy(self) -> DelayPolicy:
        return self._policy

    @property
    def current_ms(self) -> int:
        with self._lock:
            return self._value

    def advance(self) -> int:
        """Apply one transition and return the delay this event should use."""
        with self._lock:
            if self._value <= self._policy.ceiling_ms:
                self._value += self._policy.step_ms
            else:
                self._value = self._policy.floor_ms
                logger.debug("Adaptive delay reset to floor %d ms", self._value)
            return self._value

    def reset(self) -> None:
        """Return the counter to its floor."""
        with self._lock:
            self._value = self._policy.floor_ms
