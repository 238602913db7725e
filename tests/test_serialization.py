"""Tests for request body serialization and typed deserialization."""

import json
from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime
from enum import Enum
from typing import Any

import pytest

from serviceclient import DeserializationError
from serviceclient.http import deserialize
from serviceclient.http import encode_form
from serviceclient.http import serialize_body


class Role(Enum):
    ADMIN = "admin"
    MEMBER = "member"


@dataclass
class Address:
    city: str
    post_code: str | None = None


@dataclass
class Account:
    user_id: int
    user_name: str
    role: Role
    balance: float
    created_at: datetime
    address: Address | None = None
    tags: list[str] = field(default_factory=list)


class TestDeserialize:
    """Conversion of JSON bodies into declared types."""

    def test_case_insensitive_fields(self) -> None:
        """PascalCase and camelCase keys fill snake_case fields."""
        body = json.dumps(
            {
                "UserId": 1,
                "userName": "ann",
                "ROLE": "admin",
                "balance": 10,
                "createdAt": "2024-01-01T00:00:00+00:00",
                "Address": {"City": "Oslo", "PostCode": "0150"},
                "Tags": ["a"],
                "unknown": "ignored",
            }
        ).encode()

        account = deserialize(body, Account)

        assert account == Account(
            user_id=1,
            user_name="ann",
            role=Role.ADMIN,
            balance=10.0,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
            address=Address(city="Oslo", post_code="0150"),
            tags=["a"],
        )

    def test_defaults_for_missing_optional_fields(self) -> None:
        body = b'{"userId": 1, "userName": "ann", "role": "member", "balance": 0.5, "createdAt": "2024-01-01"}'

        account = deserialize(body, Account)

        assert account.address is None
        assert account.tags == []

    def test_collections(self) -> None:
        assert deserialize(b'[{"city": "Rome"}]', list[Address]) == [Address(city="Rome")]
        assert deserialize(b'{"a": 1, "b": 2}', dict[str, int]) == {"a": 1, "b": 2}
        assert deserialize(b"[1, 2]", tuple[int, ...]) == (1, 2)

    def test_untyped_targets(self) -> None:
        assert deserialize(b'{"a": [1]}', dict) == {"a": [1]}
        assert deserialize(b'{"a": [1]}', Any) == {"a": [1]}

    def test_text_and_bytes_targets(self) -> None:
        assert deserialize(b"plain text", str) == "plain text"
        assert deserialize(b'"quoted"', str) == "quoted"
        assert deserialize(b"\x00\x01", bytes) == b"\x00\x01"

    def test_empty_body(self) -> None:
        """Empty bodies are fine for optional targets only."""
        assert deserialize(b"", Address | None) is None
        assert deserialize(b"  ", type(None)) is None
        with pytest.raises(DeserializationError):
            deserialize(b"", Address)

    def test_missing_required_field(self) -> None:
        with pytest.raises(DeserializationError) as exc_info:
            deserialize(b'{"postCode": "0150"}', Address)
        assert "city" in str(exc_info.value)

    def test_type_mismatch(self) -> None:
        """No lenient coercion: a string is not an int."""
        with pytest.raises(DeserializationError):
            deserialize(b'{"city": 5}', Address)
        with pytest.raises(DeserializationError):
            deserialize(b"true", int)

    def test_malformed_json(self) -> None:
        with pytest.raises(DeserializationError) as exc_info:
            deserialize(b"{oops", Address)
        assert exc_info.value.body == "{oops"
        assert isinstance(exc_info.value.cause, json.JSONDecodeError)

    def test_unknown_enum_value(self) -> None:
        with pytest.raises(DeserializationError):
            deserialize(b'"owner"', Role)

    def test_target_validation_failure(self) -> None:
        """Exceptions from the target type become DeserializationError."""

        @dataclass
        class Positive:
            value: int

            def __post_init__(self) -> None:
                if self.value <= 0:
                    raise LookupError(self.value)

        with pytest.raises(DeserializationError) as exc_info:
            deserialize(b'{"value": 0}', Positive)
        assert exc_info.value.body == '{"value": 0}'
        assert deserialize(b'{"value": 3}', Positive) == Positive(value=3)


class TestSerializeBody:
    def test_dataclass_with_nested_values(self) -> None:
        """Dataclasses, enums and datetimes become JSON."""
        account = Account(
            user_id=1,
            user_name="ann",
            role=Role.MEMBER,
            balance=1.5,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )

        payload = json.loads(serialize_body(account))

        assert payload["role"] == "member"
        assert payload["created_at"] == "2024-01-01T00:00:00+00:00"
        assert payload["address"] is None

    def test_none_means_no_body(self) -> None:
        assert serialize_body(None) is None

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            serialize_body({"value": object()})

    def test_form(self) -> None:
        assert encode_form({"a": "1 2", "b": None}) == b"a=1+2&b="
