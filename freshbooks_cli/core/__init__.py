"""
Core layer - Raw types, query builders and HTTP client.

This layer provides:
- Typed dataclasses with explicit field tables for FreshBooks entities
- Composable query builders for filters, pagination, includes and sorting
- Response envelope parsing and error classification
- Low-level HTTP client with auth headers and a pluggable transport
"""

from freshbooks_cli.core.builders import (
    FilterBuilder,
    IncludesBuilder,
    PaginateBuilder,
    QueryBuilder,
    SortBuilder,
    build_query_string,
)
from freshbooks_cli.core.client import APIClient
from freshbooks_cli.core.config import ClientConfig
from freshbooks_cli.core.envelope import ParsedEnvelope, attach_pagination, parse_envelope
from freshbooks_cli.core.errors import (
    APIError,
    ConfigurationError,
    FreshBooksError,
    MalformedResponseError,
    TransportError,
    UnexpectedResponseShapeError,
    UnknownAPIError,
    ValidationError,
)
from freshbooks_cli.core.transport import RawResponse, Transport, UrllibTransport
from freshbooks_cli.core.types import (
    Client,
    Identity,
    Invoice,
    ListResult,
    Money,
    PaginationMeta,
    Payment,
    Tax,
    TeamMember,
    VisState,
)

__all__ = [
    "APIClient",
    "APIError",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "FilterBuilder",
    "FreshBooksError",
    "Identity",
    "IncludesBuilder",
    "Invoice",
    "ListResult",
    "MalformedResponseError",
    "Money",
    "PaginateBuilder",
    "PaginationMeta",
    "ParsedEnvelope",
    "Payment",
    "QueryBuilder",
    "RawResponse",
    "SortBuilder",
    "Tax",
    "TeamMember",
    "Transport",
    "TransportError",
    "UnexpectedResponseShapeError",
    "UnknownAPIError",
    "UrllibTransport",
    "ValidationError",
    "VisState",
    "attach_pagination",
    "build_query_string",
    "parse_envelope",
]
