"""Structured log event types."""

from .types import ERROR_TEMPLATE
from .types import HANDLER_ERROR_TEMPLATE
from .types import HANDLER_MESSAGE_TEMPLATE
from .types import HTTP_ERROR_TEMPLATE
from .types import HTTP_REQUEST_TEMPLATE
from .types import INCOMING_REQUEST_TEMPLATE
from .types import OUTGOING_RESPONSE_TEMPLATE
from .types import PROXY_REQUEST_TEMPLATE
from .types import PROXY_RESPONSE_TEMPLATE
from .types import LogEvent
from .types import LogEventKind

__all__ = [
    "ERROR_TEMPLATE",
    "HANDLER_ERROR_TEMPLATE",
    "HANDLER_MESSAGE_TEMPLATE",
    "HTTP_ERROR_TEMPLATE",
    "HTTP_REQUEST_TEMPLATE",
    "INCOMING_REQUEST_TEMPLATE",
    "OUTGOING_RESPONSE_TEMPLATE",
    "PROXY_REQUEST_TEMPLATE",
    "PROXY_RESPONSE_TEMPLATE",
    "LogEvent",
    "LogEventKind",
]
