"""Workrelay: ingress relay for work-order events.

Accepts work orders over HTTP, acknowledges the caller immediately, and
forwards each event to every configured downstream target after an
adaptive delay:
  - Origin allow-list gate (exact-match, missing origin allowed)
  - Shared sawtooth delay counter, serialized under a lock
  - Per-target payload shaping (raw / flattened projections)
  - Isolated, fire-and-forget delivery (one attempt per target)
  - Best-effort SQLite event log
"""

__version__ = "0.1.0"
__description__ = "Work-order ingress relay with deferred fan-out delivery"

from workrelay.core.access_gate import AccessDecision, AccessGate
from workrelay.routing.dispatcher import FanOutDispatcher

__all__ = ["AccessDecision", "AccessGate", "FanOutDispatcher", "__version__"]
