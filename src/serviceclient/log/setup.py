"""
Logging substrate setup: rich console output plus optional JSON lines.
"""

import json
import logging
import socket
from datetime import UTC
from datetime import datetime
from logging import basicConfig
from typing import Any

from rich.logging import RichHandler

from ..config import LoggingSettings

CONSOLE_FORMAT = "[%(name)s] %(message)s"


def _timestamp(record: logging.LogRecord) -> str:
    """Creation time of the structured event, or of the record for plain records."""
    created = getattr(record, "event_timestamp", None) or datetime.fromtimestamp(record.created, UTC)
    return created.isoformat(timespec="milliseconds")


class JsonFormatter(logging.Formatter):
    """
    Formats records as one JSON object per line.

    Format:
        {"timestamp": ..., "level": ..., "logger": ..., "message": ...,
         "message_template": ..., "event_kind": ..., "properties": {...},
         "exception": ..., "application": ..., "environment": ..., "machine_name": ...}

    ``properties`` is the structured context bag attached by ``StructuredLogger``
    (empty for plain records).
    """

    def __init__(self, application: str = "serviceclient", environment: str = "production"):
        super().__init__()
        self.application = application
        self.environment = environment
        self.machine_name = socket.gethostname()

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "message_template": getattr(record, "message_template", record.msg),
            "event_kind": getattr(record, "event_kind", None),
            "properties": getattr(record, "context", {}),
            "application": self.application,
            "environment": self.environment,
            "machine_name": self.machine_name,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """
    Configure the root logger.

    Installs a ``RichHandler`` for the console and, when
    ``settings.json_log_file`` is set, a JSON lines file handler. Noisy
    library loggers are raised to the levels in ``settings.level_overrides``.
    """
    settings = settings or LoggingSettings()
    handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True)]

    if settings.json_log_file is not None:
        settings.json_log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.json_log_file, encoding="utf-8")
        file_handler.setFormatter(JsonFormatter(settings.application, settings.environment))
        handlers.append(file_handler)

    basicConfig(
        level=settings.level,
        format=CONSOLE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name, level in settings.level_overrides.items():
        logging.getLogger(name).setLevel(level)
