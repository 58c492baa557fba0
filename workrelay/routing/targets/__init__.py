"""Target protocol for Workrelay delivery.

All targets implement the ``BaseTarget`` protocol: a ``target_name``
property and a ``deliver(event_id, payload)`` method.  The dispatcher
calls ``deliver`` once per target per event, on a worker thread, and
treats any exception as a failed attempt.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class DeliveryError(RuntimeError):
    """Raised by a target when a delivery attempt fails."""


@runtime_checkable
class BaseTarget(Protocol):
    """Protocol that every Workrelay target must implement.

    Attributes
    ----------
    target_name : str
        Unique identifier for this target (e.g. ``"netsuite"``).
    """

    @property
    def target_name(self) -> str:
        """Return the unique name of this target."""
        ...

    def deliver(self, event_id: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        """Make exactly one delivery attempt.

        Implementations must bound their own wait time and raise
        ``DeliveryError`` (or any exception) rather than hang.  The return
        value, if any, is logged.

        Parameters
        ----------
        event_id:
            Identifier of the event being delivered.
        payload:
            The already-shaped payload for this target.
        """
        ...
