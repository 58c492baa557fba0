"""Pydantic models for events, routing configuration, and delivery results."""

from workrelay.models.delivery import DeliveryResult, DeliveryStatus
from workrelay.models.events import (
    ACK_MESSAGE,
    Acknowledgment,
    MalformedEventError,
    WorkOrderEvent,
)
from workrelay.models.routing import DelayPolicy, TargetKind, TargetSpec

__all__ = [
    "ACK_MESSAGE",
    "Acknowledgment",
    "DelayPolicy",
    "DeliveryResult",
    "DeliveryStatus",
    "MalformedEventError",
    "TargetKind",
    "TargetSpec",
    "WorkOrderEvent",
]
