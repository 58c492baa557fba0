"""Local file target: writes shaped payloads to JSON files.

Layout: {base_path}/{target_name}/{event_id}.json

Meant for development and staging, where the real downstream functions
are unavailable but the relay should still be exercised end to end.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from workrelay.core.hasher import canonical_json_bytes
from workrelay.routing.targets import DeliveryError

logger = logging.getLogger(__name__)


class LocalFileTarget:
    """Writes payloads to local JSON files.

    Parameters
    ----------
    name:
        Target name; also the subdirectory under *base_path*.
    base_path:
        Root directory for payload files.  Defaults to ``.workrelay/outbox``.
    """

    def __init__(self, name: str, base_path: Path | str | None = None) -> None:
        self._name = name
        self._base = Path(base_path) if base_path else Path(".workrelay/outbox")

    @property
    def target_name(self) -> str:
        return self._name

    @property
    def directory(self) -> Path:
        return self._base / self._name

    def deliver(self, event_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        target_file = self.directory / f"{event_id}.json"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target_file.write_bytes(canonical_json_bytes(payload))
        except (OSError, TypeError, ValueError) as exc:
            raise DeliveryError(f"write {target_file} failed: {exc}") from exc

        logger.debug("LocalFileTarget %s: wrote %s", self._name, target_file)
        return {"path": str(target_file)}

    def list_payloads(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob("*.json"))

    def read_payload(self, path: Path) -> dict[str, Any]:
        return json.loads(path.read_bytes())
