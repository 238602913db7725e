"""
serviceclient - Instrumented HTTP clients for calling downstream services.

Every outbound call is logged and classified the same way:

- One http-success or http-error log event per call, never both
- Typed responses: JSON bodies are converted into dataclasses, lists,
  dicts and primitives, matching field names case-insensitively
- Query objects flattened into deterministic query strings
- Structured context (headers, payloads, status codes) attached to log
  records separately from the rendered message
- Sensitive headers and payload properties masked before logging
- Headers of the inbound request being served added to every record

Example:
    from dataclasses import dataclass
    from serviceclient import InstrumentedHTTPClient, MappingConfiguration, StructuredLogger

    @dataclass
    class User:
        id: int
        name: str

    class UserServiceClient(InstrumentedHTTPClient):
        def __init__(self, configuration, logger):
            super().__init__(configuration, logger, "Endpoints:UserService")

        async def get_user(self, user_id: int) -> User:
            return await self.get(f"/users/{user_id}", User)

    configuration = MappingConfiguration({"Endpoints:UserService": "https://users.internal"})
    async with UserServiceClient(configuration, StructuredLogger()) as client:
        user = await client.get_user(42)
"""

from .config import ConfigurationSource
from .config import EnvConfiguration
from .config import LoggingSettings
from .config import MappingConfiguration
from .context import RequestContext
from .context import current_request_context
from .context import request_context_middleware
from .context import request_scope
from .error_codes import ErrorCode
from .events import LogEvent
from .events import LogEventKind
from .exceptions import ConfigurationError
from .exceptions import DeserializationError
from .exceptions import HandledError
from .exceptions import HttpClientError
from .exceptions import ServiceClientError
from .exceptions import TransportError
from .exceptions import ValidationError
from .http import AiohttpTransport
from .http import InstrumentedHTTPClient
from .http import Transport
from .http import TransportResponse
from .http import format_query_datetime
from .http import parse_query_datetime
from .http import to_query_string
from .log import JsonFormatter
from .log import StructuredLogger
from .log import StructuredLoggerProtocol
from .log import configure_logging
from .types import Headers
from .types import HttpResult
from .types import JsonValue
from .types import RequestDescriptor
from .types import ResponseOutcome

__all__ = [
    # Client
    "InstrumentedHTTPClient",
    "HttpResult",
    "RequestDescriptor",
    "ResponseOutcome",
    "Headers",
    "JsonValue",
    # Transport
    "AiohttpTransport",
    "Transport",
    "TransportResponse",
    # Query strings
    "format_query_datetime",
    "parse_query_datetime",
    "to_query_string",
    # Logging
    "JsonFormatter",
    "LogEvent",
    "LogEventKind",
    "StructuredLogger",
    "StructuredLoggerProtocol",
    "configure_logging",
    # Request context
    "RequestContext",
    "current_request_context",
    "request_context_middleware",
    "request_scope",
    # Configuration
    "ConfigurationSource",
    "EnvConfiguration",
    "LoggingSettings",
    "MappingConfiguration",
    # Errors
    "ConfigurationError",
    "DeserializationError",
    "ErrorCode",
    "HandledError",
    "HttpClientError",
    "ServiceClientError",
    "TransportError",
    "ValidationError",
]
