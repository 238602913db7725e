"""
Request body serialization and typed response deserialization.

Responses are parsed as JSON and converted into the caller's declared type.
Field names are matched case-insensitively and without underscores, so a
``userName`` or ``UserName`` key fills a ``user_name`` dataclass field.
"""

import dataclasses
import json
from collections.abc import Mapping
from collections.abc import Sequence
from datetime import date
from datetime import datetime
from enum import Enum
from types import NoneType
from types import UnionType
from typing import Any
from typing import Union
from typing import get_args
from typing import get_origin
from typing import get_type_hints
from urllib.parse import urlencode

from ..exceptions import DeserializationError


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, set | frozenset):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_body(body: Any) -> bytes | None:
    """Serialize a request payload as UTF-8 JSON. ``None`` means no body."""
    if body is None:
        return None
    return json.dumps(body, default=_json_default, ensure_ascii=False).encode("utf-8")


def encode_form(fields: Mapping[str, Any]) -> bytes:
    """Encode fields as ``application/x-www-form-urlencoded``."""
    return urlencode([(key, "" if value is None else str(value)) for key, value in fields.items()]).encode("ascii")


def _normalize(name: str) -> str:
    return name.replace("_", "").lower()


def _accepts_none(tp: Any) -> bool:
    if tp is None or tp is NoneType or tp is Any or tp is object:
        return True
    return get_origin(tp) in (Union, UnionType) and NoneType in get_args(tp)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


def convert(value: Any, tp: Any, path: str = "$") -> Any:
    """
    Convert parsed JSON into ``tp``.

    Raises:
        TypeError: If the value does not fit the declared type.
        ValueError: If a value cannot be parsed (enum members, datetimes).
    """
    if tp is Any or tp is object:
        return value

    if tp is None or tp is NoneType:
        if value is not None:
            raise TypeError(f"{path}: expected null, got {type(value).__name__}")
        return None

    origin = get_origin(tp)
    args = get_args(tp)

    # Handle Optional[X] / X | Y
    if origin in (Union, UnionType):
        if value is None:
            if NoneType in args:
                return None
            raise TypeError(f"{path}: null is not a valid {tp}")
        for candidate in (a for a in args if a is not NoneType):
            try:
                return convert(value, candidate, path)
            except (TypeError, ValueError):
                continue
        raise TypeError(f"{path}: value does not match any of {tp}")

    if value is None:
        raise TypeError(f"{path}: null is not a valid {_type_name(tp)}")

    if origin in (list, Sequence) or tp in (list, Sequence):
        if not isinstance(value, list):
            raise TypeError(f"{path}: expected array, got {type(value).__name__}")
        item_type = args[0] if args else Any
        return [convert(item, item_type, f"{path}[{i}]") for i, item in enumerate(value)]

    if origin is tuple or tp is tuple:
        if not isinstance(value, list):
            raise TypeError(f"{path}: expected array, got {type(value).__name__}")
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item_type = args[0] if args else Any
            return tuple(convert(item, item_type, f"{path}[{i}]") for i, item in enumerate(value))
        if len(args) != len(value):
            raise TypeError(f"{path}: expected {len(args)} items, got {len(value)}")
        return tuple(convert(item, t, f"{path}[{i}]") for i, (t, item) in enumerate(zip(args, value, strict=True)))

    if origin in (dict, Mapping) or tp in (dict, Mapping):
        if not isinstance(value, dict):
            raise TypeError(f"{path}: expected object, got {type(value).__name__}")
        value_type = args[1] if len(args) == 2 else Any
        return {key: convert(item, value_type, f"{path}.{key}") for key, item in value.items()}

    if dataclasses.is_dataclass(tp) and isinstance(tp, type):
        return _convert_dataclass(value, tp, path)

    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)

    if tp is bool:
        if not isinstance(value, bool):
            raise TypeError(f"{path}: expected boolean, got {type(value).__name__}")
        return value

    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{path}: expected integer, got {type(value).__name__}")
        return value

    if tp is float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise TypeError(f"{path}: expected number, got {type(value).__name__}")
        return float(value)

    if tp is str:
        if not isinstance(value, str):
            raise TypeError(f"{path}: expected string, got {type(value).__name__}")
        return value

    if tp is datetime:
        if not isinstance(value, str):
            raise TypeError(f"{path}: expected ISO datetime string, got {type(value).__name__}")
        return datetime.fromisoformat(value)

    if tp is date:
        if not isinstance(value, str):
            raise TypeError(f"{path}: expected ISO date string, got {type(value).__name__}")
        return date.fromisoformat(value)

    raise TypeError(f"{path}: unsupported target type {_type_name(tp)}")


def _convert_dataclass(value: Any, tp: type, path: str) -> Any:
    if not isinstance(value, dict):
        raise TypeError(f"{path}: expected object for {tp.__name__}, got {type(value).__name__}")

    try:
        hints = get_type_hints(tp)
    except Exception:
        hints = {}
    lookup = {_normalize(key): item for key, item in value.items()}
    kwargs: dict[str, Any] = {}

    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        key = _normalize(f.name)
        if key in lookup:
            kwargs[f.name] = convert(lookup[key], hints.get(f.name, f.type), f"{path}.{f.name}")
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise TypeError(f"{path}: missing required field '{f.name}' for {tp.__name__}")

    try:
        return tp(**kwargs)
    except Exception as e:
        raise TypeError(f"{path}: could not construct {tp.__name__}: {e!r}") from e


def deserialize(raw: bytes | str, response_type: Any) -> Any:
    """
    Parse a response body into ``response_type``.

    ``str`` targets accept non-JSON text as-is and ``bytes`` targets get the
    raw body. Unknown keys are ignored; missing fields fall back to their
    defaults.

    Raises:
        DeserializationError: If the body is empty (for non-optional
            targets), is not valid JSON, or does not fit the declared type
            (including failures raised by the target type while it is built).
    """
    if response_type is bytes:
        return raw if isinstance(raw, bytes) else raw.encode("utf-8")

    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as e:
        raise DeserializationError(e) from e

    if not text.strip():
        if _accepts_none(response_type):
            return None
        raise DeserializationError("empty response body", text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        if response_type is str:
            return text
        raise DeserializationError(e, text) from e

    try:
        return convert(data, response_type)
    except Exception as e:
        raise DeserializationError(e, text) from e
