"""Structured logging submodule."""

from .logger import DEFAULT_LOGGER_NAME
from .logger import StructuredLogger
from .logger import StructuredLoggerProtocol
from .masking import mask_payload
from .masking import sanitize_headers
from .masking import to_loggable
from .setup import JsonFormatter
from .setup import configure_logging

__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JsonFormatter",
    "StructuredLogger",
    "StructuredLoggerProtocol",
    "configure_logging",
    "mask_payload",
    "sanitize_headers",
    "to_loggable",
]
