"""
Log event types.

A log event is a fixed message template plus an open-ended structured
context bag. The bag is handed to the logging substrate separately, never
concatenated into the rendered message.
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime
from enum import Enum
from typing import Any

# Message templates. Stable across calls; parameterized only by positional args.
INCOMING_REQUEST_TEMPLATE = "Request Logging for %s"
OUTGOING_RESPONSE_TEMPLATE = "Response Logging for %s"
ERROR_TEMPLATE = "Exception Occurred %s : %s"
HTTP_REQUEST_TEMPLATE = "HTTP %s Success %s"
HTTP_ERROR_TEMPLATE = "HTTP %s Error %s %s - %s"
PROXY_REQUEST_TEMPLATE = "Custom Proxy Request %s %s"
PROXY_RESPONSE_TEMPLATE = "Custom Proxy Response %s %s %s"
HANDLER_ERROR_TEMPLATE = "Request handler %s Error : %s"
HANDLER_MESSAGE_TEMPLATE = "Request handler %s Information : %s"


class LogEventKind(Enum):
    """Categories of structured diagnostic records."""

    # Inbound boundary
    INCOMING_REQUEST = "incoming_request"
    OUTGOING_RESPONSE = "outgoing_response"

    # Outbound HTTP calls
    HTTP_SUCCESS = "http_success"
    HTTP_ERROR = "http_error"

    # Reverse-proxy traffic
    PROXY_REQUEST = "proxy_request"
    PROXY_RESPONSE = "proxy_response"

    # Failures and internal operations
    EXCEPTION = "exception"
    HANDLER_INFO = "handler_info"
    HANDLER_ERROR = "handler_error"


@dataclass
class LogEvent:
    """
    One structured log record under construction.

    Fields are accumulated with ``add``/``add_optional`` and the event is
    submitted exactly once by the logger.

    Attributes:
        kind: Category of the record
        template: %-style message template
        args: Positional values for the template
        level: stdlib logging level
        context: Structured context bag, in insertion order
        exc_info: Exception attached to the record, if any
        timestamp: Creation time (UTC)
    """

    kind: LogEventKind
    template: str
    args: tuple[Any, ...] = ()
    level: int = logging.INFO
    context: dict[str, Any] = field(default_factory=dict)
    exc_info: BaseException | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    submitted: bool = False

    def add(self, key: str, value: Any) -> "LogEvent":
        """Record a context field."""
        self.context[key] = value
        return self

    def add_optional(self, key: str, value: Any) -> "LogEvent":
        """Record a context field only when a value is present."""
        if value is not None:
            self.context[key] = value
        return self

    @property
    def message(self) -> str:
        """The rendered message (template with args, without the context bag)."""
        return self.template % self.args if self.args else self.template
