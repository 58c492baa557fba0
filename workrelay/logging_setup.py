"""Logging configuration for the relay process.

Every line carries an ISO-8601 UTC timestamp.  Called once by the CLI;
library code only ever uses ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import time

_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


class _UtcIsoFormatter(logging.Formatter):
    converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = time.strftime("%Y-%m-%dT%H:%M:%S", self.converter(record.created))
        return f"{base}.{int(record.msecs):03d}Z"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single timestamped stream handler on the ``workrelay`` logger."""
    logger = logging.getLogger("workrelay")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(_UtcIsoFormatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level if isinstance(level, int) else level.upper())
    logger.propagate = False
