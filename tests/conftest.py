"""Shared fixtures: a scripted transport and captured structured log records."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import pytest

from serviceclient import InstrumentedHTTPClient
from serviceclient import LogEventKind
from serviceclient import MappingConfiguration
from serviceclient import StructuredLogger
from serviceclient import TransportResponse

BASE_ADDRESS = "https://users.example.com"
ENDPOINT_KEY = "Endpoints:UserService"


@dataclass
class SentRequest:
    """A request as seen by the stub transport."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None


class StubTransport:
    """Transport returning scripted responses (or raising scripted errors) in order."""

    def __init__(self) -> None:
        self.responses: list[TransportResponse | BaseException] = []
        self.calls: list[SentRequest] = []
        self.closed = False

    def respond(
        self,
        status: int,
        body: Any = b"",
        reason: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> "StubTransport":
        if isinstance(body, dict | list):
            body = json.dumps(body).encode("utf-8")
        elif isinstance(body, str):
            body = body.encode("utf-8")
        self.responses.append(
            TransportResponse(
                status=status,
                reason=reason if reason is not None else HTTPStatus(status).phrase,
                headers=headers or {},
                body=body,
            )
        )
        return self

    def fail(self, error: BaseException) -> "StubTransport":
        self.responses.append(error)
        return self

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None = None,
    ) -> TransportResponse:
        self.calls.append(SentRequest(method, url, headers, body))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def structured_logger() -> StructuredLogger:
    return StructuredLogger(logging.getLogger("serviceclient.tests"))


@pytest.fixture
def client(transport: StubTransport, structured_logger: StructuredLogger) -> InstrumentedHTTPClient:
    configuration = MappingConfiguration({ENDPOINT_KEY: BASE_ADDRESS})
    return InstrumentedHTTPClient(configuration, structured_logger, ENDPOINT_KEY, transport=transport)


@pytest.fixture
def log_events(caplog: pytest.LogCaptureFixture) -> Callable[..., list[logging.LogRecord]]:
    """Return a collector for structured records, optionally filtered by kind."""
    caplog.set_level(logging.DEBUG)

    def collect(kind: LogEventKind | None = None) -> list[logging.LogRecord]:
        records = [r for r in caplog.records if hasattr(r, "event_kind")]
        if kind is not None:
            records = [r for r in records if r.event_kind == kind.value]
        return records

    return collect
