"""Tests against a real aiohttp server: transport, client and inbound middleware."""

import asyncio
from dataclasses import dataclass

import pytest
from aiohttp import test_utils
from aiohttp import web

from serviceclient import AiohttpTransport
from serviceclient import HttpClientError
from serviceclient import InstrumentedHTTPClient
from serviceclient import LogEventKind
from serviceclient import MappingConfiguration
from serviceclient import StructuredLogger
from serviceclient import TransportError
from serviceclient import current_request_context
from serviceclient import request_context_middleware


@dataclass
class User:
    id: int
    name: str


async def get_user(request: web.Request) -> web.Response:
    if request.match_info["user_id"] != "42":
        raise web.HTTPNotFound()
    return web.json_response(
        {"Id": 42, "Name": "Ann", "language": request.headers.get("Accept-Language")},
        headers={"X-Request-Id": "r-1"},
    )


async def create_user(request: web.Request) -> web.Response:
    payload = await request.json()
    return web.json_response({"id": 7, "name": payload["name"]}, status=201)


def build_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/users/{user_id}", get_user)
    app.router.add_post("/users", create_user)
    return app


class TestAiohttpTransport:
    """The default transport against a live server."""

    def test_get_and_post(self, log_events) -> None:
        """Typed responses, default headers and one success event per call."""

        async def scenario() -> tuple[User, User]:
            async with test_utils.TestServer(build_app()) as server:
                configuration = MappingConfiguration({"Endpoints:Users": str(server.make_url("/"))})
                async with InstrumentedHTTPClient(configuration, StructuredLogger(), "Endpoints:Users") as client:
                    fetched = await client.get("/users/42", User)
                    created = await client.post("/users", {"name": "Bo"}, User)
                    return fetched, created

        fetched, created = asyncio.run(scenario())

        assert fetched == User(id=42, name="Ann")
        assert created == User(id=7, name="Bo")
        events = log_events(LogEventKind.HTTP_SUCCESS)
        assert len(events) == 2
        assert events[0].context["response_headers"]["X-Request-Id"] == "r-1"
        assert events[1].context["request_content"] == {"name": "Bo"}

    def test_not_found(self, log_events) -> None:
        async def scenario() -> None:
            async with test_utils.TestServer(build_app()) as server:
                configuration = MappingConfiguration({"Endpoints:Users": str(server.make_url("/"))})
                async with InstrumentedHTTPClient(configuration, StructuredLogger(), "Endpoints:Users") as client:
                    await client.get("/users/7", User)

        with pytest.raises(HttpClientError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.status_code == 404
        assert len(log_events(LogEventKind.HTTP_ERROR)) == 1

    def test_connection_refused(self) -> None:
        """Connection failures surface as TransportError."""

        async def scenario() -> None:
            async with AiohttpTransport(timeout=5.0) as transport:
                await transport.send("GET", "http://127.0.0.1:1/", {})

        with pytest.raises(TransportError):
            asyncio.run(scenario())

    def test_timeout(self) -> None:
        """A timed out request surfaces as TransportError carrying the timeout."""

        class TimingOutSession:
            closed = False

            def request(self, *args: object, **kwargs: object) -> "TimingOutSession":
                return self

            async def __aenter__(self) -> None:
                raise asyncio.TimeoutError()

            async def __aexit__(self, *args: object) -> None:
                return None

            async def close(self) -> None:
                self.closed = True

        async def scenario() -> None:
            transport = AiohttpTransport(timeout=0.01)
            transport._session = TimingOutSession()
            await transport.send("GET", "http://users.example.com/slow", {})

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(scenario())

        assert str(exc_info.value) == "GET http://users.example.com/slow timed out"
        assert exc_info.value.method == "GET"
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)


class TestRequestContextMiddleware:
    """The inbound boundary binds the ambient request context."""

    def test_handler_sees_inbound_headers(self) -> None:
        async def whoami(request: web.Request) -> web.Response:
            context = current_request_context()
            return web.json_response(
                {
                    "method": context.method,
                    "correlation": context.headers.get("X-Correlation-Id"),
                }
            )

        async def scenario() -> dict:
            app = web.Application(middlewares=[request_context_middleware])
            app.router.add_get("/whoami", whoami)
            async with test_utils.TestClient(test_utils.TestServer(app)) as client:
                resp = await client.get("/whoami", headers={"X-Correlation-Id": "abc"})
                return await resp.json()

        assert asyncio.run(scenario()) == {"method": "GET", "correlation": "abc"}
        assert current_request_context() is None
