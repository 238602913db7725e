"""
Transport layer: performs one HTTP exchange and returns the full response.

The transport is the only suspension point of a call. It reads the whole
body before returning, so classification and logging run without awaiting.
"""

import asyncio
from dataclasses import dataclass
from dataclasses import field
from typing import Protocol

import aiohttp

from ..exceptions import TransportError
from ..types import Headers


@dataclass
class TransportResponse:
    """Raw response as returned by a transport."""

    status: int
    reason: str
    headers: Headers = field(default_factory=dict)
    body: bytes = b""


class Transport(Protocol):
    """Protocol for HTTP transports."""

    async def send(
        self,
        method: str,
        url: str,
        headers: Headers,
        body: bytes | None = None,
    ) -> TransportResponse:
        """
        Perform one HTTP exchange.

        Raises:
            TransportError: On connection failures and timeouts.
        """
        ...

    async def close(self) -> None:
        """Release any pooled connections."""
        ...


class AiohttpTransport:
    """Transport backed by a lazily created ``aiohttp.ClientSession``."""

    def __init__(self, timeout: float = 120.0):
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        headers: Headers,
        body: bytes | None = None,
    ) -> TransportResponse:
        session = await self._get_session()
        try:
            async with session.request(method, url, headers=headers, data=body) as resp:
                content = await resp.read()
                response_headers: Headers = {}
                for key in resp.headers.keys():
                    if key not in response_headers:
                        response_headers[key] = ";".join(resp.headers.getall(key))
                return TransportResponse(
                    status=resp.status,
                    reason=resp.reason or "",
                    headers=response_headers,
                    body=content,
                )
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}", method=method, url=url) from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {url} timed out", method=method, url=url) from e

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
