"""Origin access gate: exact-match allow-list for cross-origin callers.

The gate decides whether a caller's declared ``Origin`` may be granted
cross-origin access.  It does not authorize the request itself: a denied
caller's request is still processed, only the CORS response headers are
withheld.

Rules
-----
- No origin (server-to-server or same-origin callers) -> allow.  An empty
  ``Origin`` header counts as no origin.
- Origin present -> allow iff it equals an allow-list entry byte for byte.
  No case folding, no trailing-slash or scheme normalization.
- Entries that look like network ranges (``"151.101.0.0/16"``) are plain
  tokens; they match only an ``Origin`` header carrying that literal text.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

logger = logging.getLogger(__name__)


class AccessDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is AccessDecision.ALLOW


def decide(origin: str | None, allowlist: Iterable[str]) -> AccessDecision:
    """Pure decision function; see module docstring for the rules."""
    if not origin:
        return AccessDecision.ALLOW
    for entry in allowlist:
        if entry == origin:
            return AccessDecision.ALLOW
    return AccessDecision.DENY


class AccessGate:
    """Holds the process-wide allow-list and logs every evaluation.

    Parameters
    ----------
    allowlist:
        Ordered origin strings.  Copied into a tuple at construction and
        never modified afterwards.  Duplicates are dropped, first
        occurrence wins.
    """

    def __init__(self, allowlist: Iterable[str]) -> None:
        self._allowlist: tuple[str, ...] = tuple(dict.fromkeys(allowlist))
        self._members = frozenset(self._allowlist)

    @property
    def allowlist(self) -> tuple[str, ...]:
        return self._allowlist

    def decide(self, origin: str | None) -> AccessDecision:
        """Return the decision for *origin* and log it."""
        if not origin:
            decision = AccessDecision.ALLOW
            logger.info("Access request without Origin header: %s", decision.value)
        else:
            decision = AccessDecision.ALLOW if origin in self._members else AccessDecision.DENY
            logger.info("Access request from origin %r: %s", origin, decision.value)
        return decision
