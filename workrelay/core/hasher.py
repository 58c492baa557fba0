"""Canonical JSON helpers for event fingerprints and file output."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def payload_fingerprint(payload: dict[str, Any]) -> str:
    """Fingerprint a JSON payload as ``"sha256:<hex>"``.

    Two payloads with the same keys and values hash identically
    regardless of key order.
    """
    return f"sha256:{sha256_hex(canonical_json_bytes(payload))}"
