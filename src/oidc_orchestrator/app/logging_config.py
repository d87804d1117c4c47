from __future__ import annotations

import logging
import sys
from typing import Any


EXTRA_FIELDS = ("request_id", "method", "path", "grant_type", "status_code")


def configure_logging(as_json: bool, log_level: str) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Avoid duplicating handlers on reload
        return

    handler = logging.StreamHandler(sys.stdout)

    if as_json:
        import json

        class JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                payload: dict[str, Any] = {
                    "level": record.levelname.lower(),
                    "logger": record.name,
                    "message": record.getMessage(),
                    "time": self.formatTime(record, self.datefmt),
                }
                for key in EXTRA_FIELDS:
                    if hasattr(record, key):
                        payload[key] = getattr(record, key)
                if record.exc_info:
                    payload["exception"] = self.formatException(record.exc_info)
                return json.dumps(payload, default=str)

        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
