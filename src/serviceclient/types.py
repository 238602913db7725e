"""
Core types for the instrumented HTTP client layer.
"""

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Generic
from typing import TypeVar

# =============================================================================
# JSON and Header Type Definitions
# =============================================================================

# Type alias for JSON-compatible values (used for request and response payloads)
JsonValue = str | int | float | bool | None | list[Any] | dict[str, Any]

# Header name -> value. Multi-valued headers are joined with ";".
Headers = dict[str, str]

T = TypeVar("T")


@dataclass
class RequestDescriptor:
    """One outbound call, as it is handed to the transport."""

    method: str
    uri: str  # Relative to the client's base address, query string included
    url: str  # Absolute URL actually requested
    headers: Headers = field(default_factory=dict)
    body: Any = None  # The caller's payload, before serialization
    content: bytes | None = None  # Serialized payload sent on the wire


@dataclass
class ResponseOutcome:
    """
    Result of a call as seen by the client.

    ``value`` is only populated when the status indicates success and the
    body deserialized cleanly.
    """

    status: int
    reason: str
    raw_body: bytes = b""
    headers: Headers = field(default_factory=dict)
    value: Any = None

    @property
    def ok(self) -> bool:
        """Check if the status code indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        """Response body as text."""
        return self.raw_body.decode("utf-8", errors="replace")


@dataclass
class HttpResult(Generic[T]):
    """
    Tagged result of one call: either a value or the error that ended it.

    Example:
        result = await client.request("GET", "/users/42", User)
        if result.ok:
            print(result.value.name)
        else:
            print(result.error)
    """

    value: T | None = None
    error: Exception | None = None
    outcome: ResponseOutcome | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the error that ended the call."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
