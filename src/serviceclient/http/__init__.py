"""HTTP client submodule."""

from .client import InstrumentedHTTPClient
from .query import append_query
from .query import format_query_datetime
from .query import parse_query_datetime
from .query import query_pairs
from .query import to_query_string
from .serialization import deserialize
from .serialization import encode_form
from .serialization import serialize_body
from .transport import AiohttpTransport
from .transport import Transport
from .transport import TransportResponse

__all__ = [
    "AiohttpTransport",
    "InstrumentedHTTPClient",
    "Transport",
    "TransportResponse",
    "append_query",
    "deserialize",
    "encode_form",
    "format_query_datetime",
    "parse_query_datetime",
    "query_pairs",
    "serialize_body",
    "to_query_string",
]
