"""
Structured logger for service traffic.

Every operation renders one fixed message template and attaches an
open-ended context bag (headers, payloads, status codes) as structured
``extra`` data on a stdlib logging record. Headers of the inbound request
being served are added to every record from the ambient request context.
"""

import inspect
import json
import logging
import traceback
from collections.abc import Mapping
from typing import Any
from typing import Protocol

from ..config import LoggingSettings
from ..context import ContextProvider
from ..context import RequestContext
from ..context import current_request_context
from ..events import ERROR_TEMPLATE
from ..events import HANDLER_ERROR_TEMPLATE
from ..events import HANDLER_MESSAGE_TEMPLATE
from ..events import HTTP_ERROR_TEMPLATE
from ..events import HTTP_REQUEST_TEMPLATE
from ..events import INCOMING_REQUEST_TEMPLATE
from ..events import OUTGOING_RESPONSE_TEMPLATE
from ..events import PROXY_REQUEST_TEMPLATE
from ..events import PROXY_RESPONSE_TEMPLATE
from ..events import LogEvent
from ..events import LogEventKind
from .masking import mask_payload
from .masking import sanitize_headers

DEFAULT_LOGGER_NAME = "serviceclient"


def _caller_name() -> str:
    """Name of the function that called the log operation calling this helper."""
    frame = inspect.currentframe()
    try:
        caller = frame.f_back.f_back if frame is not None and frame.f_back is not None else None
        return caller.f_code.co_name if caller is not None else ""
    finally:
        del frame


class StructuredLoggerProtocol(Protocol):
    """Logging surface the HTTP client depends on."""

    def log_http_request(
        self,
        headers: Mapping[str, str],
        method: str,
        request_uri: str,
        response: Any,
        request: Any = None,
        response_headers: Mapping[str, str] | None = None,
    ) -> None:
        """Log a successful outbound HTTP call."""
        ...

    def log_http_error(
        self,
        headers: Mapping[str, str],
        method: str,
        request_uri: str,
        status_code: int,
        error_message: str,
        response: Any = None,
        request_body: Any = None,
        response_headers: Mapping[str, str] | None = None,
    ) -> None:
        """Log a failed (non-2xx) outbound HTTP call."""
        ...

    def log_exception(self, error: Any, message: str, method_name: str | None = None) -> None:
        """Log an exception or a freeform error payload."""
        ...


class StructuredLogger:
    """
    Renders semantic log events onto a stdlib logger.

    Example:
        structured = StructuredLogger(settings=LoggingSettings.from_env())
        structured.log_handler_information("CreateUser", "user created", {"id": 7})

    Records carry ``event_kind``, ``message_template`` and ``context`` attributes,
    so handlers and formatters can index the structure independently of the
    rendered text.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        settings: LoggingSettings | None = None,
        context_provider: ContextProvider = current_request_context,
    ):
        """
        Initialize the structured logger.

        Args:
            logger: The stdlib logger records are emitted on. Defaults to
                    the "serviceclient" logger.
            settings: Masking settings. Defaults to ``LoggingSettings()``.
            context_provider: Read-only accessor for the inbound request
                              currently being served.
        """
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.settings = settings or LoggingSettings()
        self._context_provider = context_provider

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def submit(self, event: LogEvent) -> None:
        """
        Emit ``event`` as exactly one log record.

        Raises:
            RuntimeError: If the event was already submitted.
        """
        if event.submitted:
            raise RuntimeError(f"Log event {event.kind.value} was already submitted")
        event.submitted = True

        exc_info = None
        if event.exc_info is not None:
            exc_info = (type(event.exc_info), event.exc_info, event.exc_info.__traceback__)

        self.logger.log(
            event.level,
            event.template,
            *event.args,
            exc_info=exc_info,
            extra={
                "event_kind": event.kind.value,
                "message_template": event.template,
                "context": dict(event.context),
                "event_timestamp": event.timestamp,
            },
        )

    def _headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        return sanitize_headers(headers, self.settings.sensitive_headers)

    def _payload(self, payload: Any) -> Any:
        return mask_payload(payload, self.settings.masked_properties)

    def _request_headers(self) -> dict[str, str]:
        """Headers of the inbound request being served, or empty."""
        context = self._context_provider()
        if context is None:
            return {}
        return self._headers(context.headers)

    # ------------------------------------------------------------------
    # Inbound boundary
    # ------------------------------------------------------------------

    def log_incoming_request(self, request_content: Any = None, method_name: str | None = None) -> None:
        """Log a request received by the service."""
        method_name = method_name or _caller_name()
        event = LogEvent(LogEventKind.INCOMING_REQUEST, INCOMING_REQUEST_TEMPLATE, (method_name,))
        if request_content is not None:
            event.add("request_content", self._payload(request_content))
        event.add("request_headers", self._request_headers())
        self.submit(event)

    def log_outgoing_response(self, response_content: Any, method_name: str | None = None) -> None:
        """Log a response the service is about to return."""
        method_name = method_name or _caller_name()
        event = LogEvent(LogEventKind.OUTGOING_RESPONSE, OUTGOING_RESPONSE_TEMPLATE, (method_name,))
        event.add("response_content", self._payload(response_content))
        event.add("request_headers", self._request_headers())
        self.submit(event)

    def log_exception(self, error: Any, message: str, method_name: str | None = None) -> None:
        """
        Log a failure.

        Args:
            error: An exception (attached with its traceback) or a freeform
                   error payload (attached to the context bag).
            message: Human-readable description.
            method_name: Operation name; defaults to the caller's name.
        """
        method_name = method_name or _caller_name()
        event = LogEvent(LogEventKind.EXCEPTION, ERROR_TEMPLATE, (method_name, message), level=logging.ERROR)
        if isinstance(error, BaseException):
            event.exc_info = error
        else:
            event.add("error_response", self._payload(error))
        event.add("request_headers", self._request_headers())
        self.submit(event)

    # ------------------------------------------------------------------
    # Outbound HTTP calls
    # ------------------------------------------------------------------

    def log_http_request(
        self,
        headers: Mapping[str, str],
        method: str,
        request_uri: str,
        response: Any,
        request: Any = None,
        response_headers: Mapping[str, str] | None = None,
    ) -> None:
        """Log a successful outbound HTTP call."""
        event = LogEvent(LogEventKind.HTTP_SUCCESS, HTTP_REQUEST_TEMPLATE, (method, request_uri))
        event.add("outgoing_headers", self._headers(headers))
        event.add("response_content", self._payload(response))
        event.add_optional("request_content", self._payload(request) if request is not None else None)
        event.add_optional("response_headers", self._headers(response_headers) if response_headers else None)
        event.add("request_headers", self._request_headers())
        self.submit(event)

    def log_http_error(
        self,
        headers: Mapping[str, str],
        method: str,
        request_uri: str,
        status_code: int,
        error_message: str,
        response: Any = None,
        request_body: Any = None,
        response_headers: Mapping[str, str] | None = None,
    ) -> None:
        """Log a failed (non-2xx) outbound HTTP call."""
        event = LogEvent(
            LogEventKind.HTTP_ERROR,
            HTTP_ERROR_TEMPLATE,
            (method, status_code, request_uri, error_message),
        )
        event.add("outgoing_headers", self._headers(headers))
        event.add("status_code", status_code)
        event.add_optional("error_content", self._payload(response) if response is not None else None)
        event.add_optional("request_content", self._payload(request_body) if request_body is not None else None)
        event.add_optional("response_headers", self._headers(response_headers) if response_headers else None)
        event.add("request_headers", self._request_headers())
        self.submit(event)

    # ------------------------------------------------------------------
    # Reverse-proxy traffic (best effort, never raises)
    # ------------------------------------------------------------------

    def log_proxy_request(self, request: RequestContext, request_content: str) -> None:
        """Log a request relayed by a proxy; JSON bodies are logged as structure."""
        try:
            content: Any = request_content
            if request.content_type and "application/json" in request.content_type:
                content = json.loads(request_content)
            event = LogEvent(LogEventKind.PROXY_REQUEST, PROXY_REQUEST_TEMPLATE, (request.method, request.url))
            event.add("incoming_headers", self._headers(request.headers))
            event.add("request_content", self._payload(content))
            self.submit(event)
        except Exception as e:
            self._log_proxy_failure("log_proxy_request", e, request_content)

    def log_proxy_response(self, request: RequestContext, status_code: int, response: str) -> None:
        """Log a response relayed by a proxy; the body is expected to be JSON."""
        try:
            content = json.loads(response)
            event = LogEvent(
                LogEventKind.PROXY_RESPONSE,
                PROXY_RESPONSE_TEMPLATE,
                (request.method, request.url, status_code),
            )
            event.add("incoming_headers", self._headers(request.headers))
            event.add("response_content", self._payload(content))
            event.add("response_status_code", status_code)
            self.submit(event)
        except Exception as e:
            self._log_proxy_failure("log_proxy_response", e, response)

    def _log_proxy_failure(self, operation: str, error: Exception, raw_content: str) -> None:
        event = LogEvent(LogEventKind.EXCEPTION, ERROR_TEMPLATE, (operation, str(error)), level=logging.ERROR)
        event.add("request_headers", self._request_headers())
        event.add("exception", "".join(traceback.format_exception(error)))
        event.add("exception_request_content", raw_content)
        self.submit(event)

    # ------------------------------------------------------------------
    # Internal operations
    # ------------------------------------------------------------------

    def log_handler_information(self, handler_name: str, message: str, content: Any = None) -> None:
        """Log progress of a non-HTTP internal operation."""
        event = LogEvent(LogEventKind.HANDLER_INFO, HANDLER_MESSAGE_TEMPLATE, (handler_name, message))
        event.add("request_headers", self._request_headers())
        event.add("handler_name", handler_name)
        event.add_optional("handler_log_content", self._payload(content) if content is not None else None)
        self.submit(event)

    def log_handler_exception(self, handler_name: str, error: BaseException) -> None:
        """Log a failure of a non-HTTP internal operation."""
        event = LogEvent(
            LogEventKind.HANDLER_ERROR,
            HANDLER_ERROR_TEMPLATE,
            (handler_name, str(error)),
            level=logging.ERROR,
        )
        event.add("request_headers", self._request_headers())
        event.add("handler_name", handler_name)
        event.add("exception", "".join(traceback.format_exception(error)))
        self.submit(event)
