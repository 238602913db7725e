"""
Masking of sensitive headers and payload properties before they are logged.

Masking always works on copies; the caller's objects are never mutated.
"""

import dataclasses
from collections.abc import Iterable
from collections.abc import Mapping
from datetime import date
from datetime import datetime
from enum import Enum
from typing import Any

from ..config import DEFAULT_MASKED_PROPERTIES
from ..config import DEFAULT_SENSITIVE_HEADERS

MASK = "***"


def mask_value(value: str) -> str:
    """Keep the first 10 and last 4 characters of long values, mask short ones entirely."""
    if len(value) > 14:
        return value[:10] + "..." + value[-4:]
    return MASK


def sanitize_headers(
    headers: Mapping[str, str] | None,
    sensitive: Iterable[str] = DEFAULT_SENSITIVE_HEADERS,
) -> dict[str, str]:
    """Copy headers, masking the values of sensitive ones."""
    sensitive_keys = {key.lower() for key in sensitive}
    sanitized = {}
    for key, value in (headers or {}).items():
        if key.lower() in sensitive_keys:
            sanitized[key] = mask_value(value)
        else:
            sanitized[key] = value
    return sanitized


def to_loggable(payload: Any) -> Any:
    """
    Convert a payload into plain JSON-compatible structures.

    Dataclasses become dicts, datetimes ISO strings, enums their values and
    bytes are decoded as UTF-8. Anything else unknown is rendered with str().
    """
    if payload is None or isinstance(payload, str | int | float | bool):
        return payload
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return to_loggable(dataclasses.asdict(payload))
    if isinstance(payload, Mapping):
        return {str(key): to_loggable(value) for key, value in payload.items()}
    if isinstance(payload, list | tuple | set | frozenset):
        return [to_loggable(item) for item in payload]
    if isinstance(payload, datetime | date):
        return payload.isoformat()
    if isinstance(payload, Enum):
        return to_loggable(payload.value)
    if isinstance(payload, bytes | bytearray):
        return bytes(payload).decode("utf-8", errors="replace")
    return str(payload)


def mask_payload(payload: Any, properties: Iterable[str] = DEFAULT_MASKED_PROPERTIES) -> Any:
    """Return a loggable copy of ``payload`` with sensitive properties replaced by "***"."""
    names = {name.lower() for name in properties}
    return _mask(to_loggable(payload), names)


def _mask(value: Any, names: set[str]) -> Any:
    if isinstance(value, dict):
        return {key: MASK if key.lower() in names else _mask(item, names) for key, item in value.items()}
    if isinstance(value, list):
        return [_mask(item, names) for item in value]
    return value
