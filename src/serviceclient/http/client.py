"""
Instrumented async HTTP client for calling downstream services.

Every call is classified from its status code and produces exactly one
http-success or http-error log event before a value is returned or an
error raised. Transport failures produce an exception event instead.
"""

import json
import logging
from typing import Any
from typing import TypeVar
from urllib.parse import urljoin

from ..config import ConfigurationSource
from ..exceptions import DeserializationError
from ..exceptions import HttpClientError
from ..exceptions import TransportError
from ..log import StructuredLoggerProtocol
from ..types import Headers
from ..types import HttpResult
from ..types import RequestDescriptor
from ..types import ResponseOutcome
from .query import append_query
from .serialization import deserialize
from .serialization import encode_form
from .serialization import serialize_body
from .transport import AiohttpTransport
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACCEPT_LANGUAGE = "en"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class InstrumentedHTTPClient:
    """
    Base client for one downstream service.

    The base address is read once from configuration; an ``Accept-Language``
    header is attached to every request. Subclasses may add default headers
    in their constructor, before the first call.

    Example:
        class UserServiceClient(InstrumentedHTTPClient):
            def __init__(self, configuration, logger):
                super().__init__(configuration, logger, "Endpoints:UserService")

            async def get_user(self, user_id: int) -> User:
                return await self.get(f"/users/{user_id}", User)
    """

    def __init__(
        self,
        configuration: ConfigurationSource,
        logger: StructuredLoggerProtocol,
        endpoint_config_key: str,
        transport: Transport | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize the client.

        Args:
            configuration: Source the base address is resolved from
            logger: Structured logger receiving one event per call
            endpoint_config_key: Configuration key holding the base address
            transport: Transport to use. Defaults to ``AiohttpTransport``.
            timeout: Total request timeout in seconds for the default transport

        Raises:
            ConfigurationError: If the endpoint key is missing or empty.
        """
        self._logger = logger
        self.base_address = configuration.get_string(endpoint_config_key)
        self._transport: Transport = transport or AiohttpTransport(timeout=timeout)
        self._default_headers: Headers = {"Accept-Language": ACCEPT_LANGUAGE}
        self._dispatched = False

    @property
    def default_headers(self) -> Headers:
        """Copy of the headers attached to every request."""
        return dict(self._default_headers)

    def add_default_header(self, name: str, value: str) -> None:
        """
        Attach a header to every request.

        Raises:
            RuntimeError: If a request has already been dispatched.
        """
        if self._dispatched:
            raise RuntimeError("Default headers cannot change once requests have been dispatched")
        self._default_headers[name] = value

    def resolve_url(self, uri: str) -> str:
        """Resolve a relative URI against the base address."""
        return urljoin(self.base_address, uri)

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def get(self, path: str, response_type: type[T], query: Any = None) -> T:
        """
        GET ``path`` and deserialize the response.

        Args:
            path: Path relative to the base address
            response_type: Type the JSON body is converted into
            query: Optional query object flattened into the query string

        Raises:
            TransportError: If the request could not be performed
            HttpClientError: If the status is not 2xx
            DeserializationError: If the body does not fit ``response_type``
        """
        result = await self.request("GET", path, response_type, query=query)
        return result.unwrap()

    async def post(self, path: str, body: Any, response_type: type[T]) -> T:
        """POST ``body`` as JSON and deserialize the response."""
        result = await self.request("POST", path, response_type, body=body)
        return result.unwrap()

    async def post_form(self, path: str, fields: dict[str, Any], response_type: type[T]) -> T:
        """POST ``fields`` form-urlencoded and deserialize the response."""
        result = await self.request("POST", path, response_type, form=fields)
        return result.unwrap()

    async def put(self, path: str, body: Any, response_type: type[T]) -> T:
        """PUT ``body`` as JSON and deserialize the response."""
        result = await self.request("PUT", path, response_type, body=body)
        return result.unwrap()

    async def delete(self, path: str, response_type: type[T]) -> T:
        """DELETE ``path`` and deserialize the response."""
        result = await self.request("DELETE", path, response_type)
        return result.unwrap()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _build_request(
        self,
        method: str,
        uri: str,
        body: Any = None,
        form: dict[str, Any] | None = None,
    ) -> RequestDescriptor:
        headers = dict(self._default_headers)
        content: bytes | None = None
        payload: Any = None

        if form is not None:
            payload = form
            content = encode_form(form)
            headers["Content-Type"] = FORM_CONTENT_TYPE
        elif body is not None:
            payload = body
            content = serialize_body(body)
            headers["Content-Type"] = JSON_CONTENT_TYPE

        return RequestDescriptor(
            method=method,
            uri=uri,
            url=self.resolve_url(uri),
            headers=headers,
            body=payload,
            content=content,
        )

    async def request(
        self,
        method: str,
        path: str,
        response_type: type[T],
        *,
        query: Any = None,
        body: Any = None,
        form: dict[str, Any] | None = None,
    ) -> HttpResult[T]:
        """
        Perform one call and return a tagged result.

        Dispatch failures (transport, status, deserialization) are returned
        in ``HttpResult.error`` rather than raised; each one has been logged.

        Raises:
            TypeError: If ``body`` cannot be serialized as JSON. This is a
                caller error raised before anything is sent, so no call
                event is logged.
        """
        descriptor = self._build_request(method.upper(), append_query(path, query), body, form)
        self._dispatched = True

        try:
            response = await self._transport.send(
                descriptor.method,
                descriptor.url,
                dict(descriptor.headers),
                descriptor.content,
            )
        except TransportError as e:
            return self.on_transport_error(descriptor, e)
        except OSError as e:
            message = f"{descriptor.method} {descriptor.url} failed: {e}"
            error = TransportError(message, descriptor.method, descriptor.url)
            error.__cause__ = e
            return self.on_transport_error(descriptor, error)

        # No awaits past this point: the call is always classified and logged.
        outcome = ResponseOutcome(
            status=response.status,
            reason=response.reason,
            raw_body=response.body,
            headers=dict(response.headers),
        )
        if not outcome.ok:
            return self.on_error(descriptor, outcome)
        return self.on_success(descriptor, outcome, response_type)

    # ------------------------------------------------------------------
    # Outcome handling (overridable)
    # ------------------------------------------------------------------

    def on_success(
        self,
        descriptor: RequestDescriptor,
        outcome: ResponseOutcome,
        response_type: Any,
    ) -> HttpResult[Any]:
        """Deserialize a 2xx response and log it as an http-success event."""
        error: DeserializationError | None = None
        try:
            outcome.value = deserialize(outcome.raw_body, response_type)
            logged_response: Any = outcome.value
        except DeserializationError as e:
            error = e
            logged_response = _logged_body(outcome)

        self._logger.log_http_request(
            descriptor.headers,
            descriptor.method,
            descriptor.uri,
            logged_response,
            request=descriptor.body,
            response_headers=outcome.headers or None,
        )

        if error is not None:
            logger.debug(f"{descriptor.method} {descriptor.uri} returned {outcome.status} with an unparsable body")
            return HttpResult(error=error, outcome=outcome)
        return HttpResult(value=outcome.value, outcome=outcome)

    def on_error(self, descriptor: RequestDescriptor, outcome: ResponseOutcome) -> HttpResult[Any]:
        """Log a non-2xx response as an http-error event and build the error."""
        self._logger.log_http_error(
            descriptor.headers,
            descriptor.method,
            descriptor.uri,
            outcome.status,
            outcome.reason,
            response=_logged_body(outcome),
            request_body=descriptor.body,
            response_headers=outcome.headers or None,
        )
        error = HttpClientError(outcome.status, outcome.reason, outcome.text or None, descriptor.uri)
        return HttpResult(error=error, outcome=outcome)

    def on_transport_error(self, descriptor: RequestDescriptor, error: TransportError) -> HttpResult[Any]:
        """Log a transport failure as an exception event."""
        self._logger.log_exception(
            error,
            f"{descriptor.method} {descriptor.uri} failed",
            method_name=f"{type(self).__name__}.{descriptor.method.lower()}",
        )
        return HttpResult(error=error)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def __aenter__(self) -> "InstrumentedHTTPClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def _logged_body(outcome: ResponseOutcome) -> Any:
    """Body for logging: parsed JSON when possible so masking applies, else the raw text."""
    if not outcome.raw_body:
        return None
    try:
        return json.loads(outcome.raw_body)
    except ValueError:
        return outcome.text
