"""
Flattening of query objects into URL query strings.

Every public field of a query object becomes one or more ``key=value``
pairs, in declaration order. Sequence fields repeat the key once per
element, ``None`` fields are left out, and datetimes use a fixed UTC
format with seven fractional digits (``yyyy-MM-ddTHH:mm:ss.fffffffZ``).
"""

import dataclasses
import inspect
import re
from collections.abc import Iterator
from collections.abc import Mapping
from datetime import UTC
from datetime import date
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import quote_plus

# Dataclass fields can rename their query key with field(metadata={QUERY_NAME: "..."})
QUERY_NAME = "query_name"

_DATETIME_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})\.(\d{7})Z$")


def format_query_datetime(value: datetime) -> str:
    """
    Render a datetime as ``yyyy-MM-ddTHH:mm:ss.fffffffZ`` in UTC.

    Aware values are converted to UTC; naive values are taken to be UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    # Seven fractional digits are 100ns ticks; Python resolves microseconds.
    return f"{value:%Y-%m-%dT%H:%M:%S}.{value.microsecond:06d}0Z"


def parse_query_datetime(text: str) -> datetime:
    """
    Parse a value produced by ``format_query_datetime`` into an aware UTC datetime.

    Raises:
        ValueError: If ``text`` is not in the fixed format.
    """
    match = _DATETIME_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Not a yyyy-MM-ddTHH:mm:ss.fffffffZ timestamp: {text!r}")
    base = datetime.strptime(match.group(1), "%Y-%m-%dT%H:%M:%S")
    ticks = int(match.group(2))
    return base.replace(microsecond=ticks // 10, tzinfo=UTC)


def _fields(obj: Any) -> Iterator[tuple[str, Any]]:
    """Public fields of a query object, in declaration order."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        for f in dataclasses.fields(obj):
            yield f.metadata.get(QUERY_NAME, f.name), getattr(obj, f.name)
    elif isinstance(obj, Mapping):
        for key, value in obj.items():
            yield str(key), value
    else:
        yield from _attributes(obj)


def _attributes(obj: Any) -> Iterator[tuple[str, Any]]:
    """Instance attributes, then slots, then properties of a plain object."""
    seen: set[str] = set()
    for name, value in getattr(obj, "__dict__", {}).items():
        seen.add(name)
        yield name, value
    for klass in type(obj).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name in seen or name in ("__dict__", "__weakref__") or not hasattr(obj, name):
                continue
            seen.add(name)
            yield name, getattr(obj, name)
    for name, _ in inspect.getmembers(type(obj), lambda member: isinstance(member, property)):
        if name not in seen and not name.startswith("_"):
            seen.add(name)
            yield name, getattr(obj, name)


def _render(value: Any) -> str:
    if isinstance(value, datetime):
        return format_query_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _values(value: Any) -> list[str]:
    """Rendered values for one field; empty when nothing should be emitted."""
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return [_render(item) for item in value if item is not None]
    if isinstance(value, set | frozenset):
        return sorted(_render(item) for item in value if item is not None)
    return [_render(value)]


def query_pairs(obj: Any) -> list[tuple[str, str]]:
    """Flatten a query object into ordered ``(key, value)`` pairs (not encoded)."""
    pairs: list[tuple[str, str]] = []
    for key, value in _fields(obj):
        if not key.strip() or key.startswith("_"):
            continue
        for rendered in _values(value):
            pairs.append((key, rendered))
    return pairs


def to_query_string(obj: Any) -> str:
    """
    Build ``?k=v&k2=v2`` from a query object.

    Returns an empty string when no parameter is emitted. Keys and values
    are percent-encoded (spaces as ``+``).

    Example:
        @dataclass
        class Search:
            tags: list[str]
            since: datetime

        to_query_string(Search(["a", "b"], datetime(2024, 1, 1, tzinfo=UTC)))
        # '?tags=a&tags=b&since=2024-01-01T00%3A00%3A00.0000000Z'
    """
    pairs = query_pairs(obj)
    if not pairs:
        return ""
    return "?" + "&".join(f"{quote_plus(key)}={quote_plus(value)}" for key, value in pairs)


def append_query(path: str, obj: Any) -> str:
    """Append the flattened query object to ``path``."""
    query = to_query_string(obj) if obj is not None else ""
    if not query:
        return path
    if "?" in path:
        return f"{path}&{query[1:]}"
    return path + query
