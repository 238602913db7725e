"""
Ambient inbound request context.

The service boundary binds the request it is serving with ``request_scope``
(or ``request_context_middleware`` for aiohttp.web applications). Loggers
only read it, through ``current_request_context``.
"""

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterator
from collections.abc import Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType

from aiohttp import web

from .types import Headers


@dataclass(frozen=True)
class RequestContext:
    """The inbound request currently being served."""

    method: str = ""
    url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    content_type: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def header_dict(self) -> Headers:
        """A fresh, mutable copy of the inbound headers."""
        return dict(self.headers)


ContextProvider = Callable[[], RequestContext | None]

_current_request: ContextVar[RequestContext | None] = ContextVar("serviceclient_request", default=None)


def current_request_context() -> RequestContext | None:
    """Return the inbound request being served, or None outside of one."""
    return _current_request.get()


@contextmanager
def request_scope(context: RequestContext) -> Iterator[RequestContext]:
    """Bind ``context`` as the current inbound request for the enclosed block."""
    token = _current_request.set(context)
    try:
        yield context
    finally:
        _current_request.reset(token)


@web.middleware
async def request_context_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """aiohttp.web middleware binding each inbound request as the ambient context."""
    context = RequestContext(
        method=request.method,
        url=str(request.url),
        headers={key: value for key, value in request.headers.items()},
        content_type=request.headers.get("Content-Type"),
    )
    with request_scope(context):
        return await handler(request)
