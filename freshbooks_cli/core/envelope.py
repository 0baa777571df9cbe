"""
Response envelope parsing and error classification.

Every FreshBooks response wraps its data as::

    {"response": {"result": ...} | {"errors": ...}, "meta": {...}}

parse_envelope unwraps it and returns the payload together with any top-level
``meta``. The meta travels in the return value so nothing from one call can
leak into the next.
"""

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, NoReturn, TypeVar

from freshbooks_cli.core.errors import (
    APIError,
    MalformedResponseError,
    UnexpectedResponseShapeError,
    UnknownAPIError,
)
from freshbooks_cli.core.types import compute_pages

T = TypeVar("T")

DEFAULT_ERROR_MESSAGE = "Unknown error"
UNEXPECTED_RESPONSE_MESSAGE = "Returned an unexpected response"


@dataclass(frozen=True)
class ParsedEnvelope:
    """Payload of a response plus the pagination meta that came with it."""

    payload: Any
    meta: dict[str, Any] | None = None
    status_code: int = 0
    raw_body: str = ""

    def parse(self, parser: Callable[[Any], T]) -> T:
        """
        Run a payload parser, reporting shape mismatches against this response.

        Raises:
            UnexpectedResponseShapeError: The payload does not fit the parser

        """
        try:
            return parser(self.payload)
        except UnexpectedResponseShapeError as e:
            raise UnexpectedResponseShapeError(
                e.message, status=self.status_code, raw_response=self.raw_body, details=e.details
            ) from e

    def with_pagination(self) -> "ParsedEnvelope":
        """Copy of this envelope with the top-level meta merged into the payload."""
        return replace(self, payload=attach_pagination(self.payload, self.meta))


def parse_envelope(status_code: int, body_text: str) -> ParsedEnvelope:
    """
    Unwrap a FreshBooks response body.

    Args:
        status_code: HTTP status code of the response
        body_text: Raw response body

    Returns:
        ParsedEnvelope with the ``result`` value (or the whole inner
        ``response`` object when there is no ``result``) and the top-level meta

    Raises:
        MalformedResponseError: Body is not JSON
        UnexpectedResponseShapeError: Body has no ``response`` key
        APIError: Status code is 400 or above

    """
    try:
        data = json.loads(body_text)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedResponseError(
            "Failed to parse response", status=status_code, raw_response=body_text
        ) from e

    if not isinstance(data, Mapping) or "response" not in data:
        raise UnexpectedResponseShapeError(
            UNEXPECTED_RESPONSE_MESSAGE, status=status_code, raw_response=body_text
        )

    meta = data.get("meta")
    if not isinstance(meta, Mapping):
        meta = None
    response = data["response"]

    if status_code >= 400:
        raise_response_error(status_code, response, body_text)

    if isinstance(response, Mapping) and "result" in response:
        payload = response["result"]
    else:
        payload = response
    return ParsedEnvelope(payload=payload, meta=meta, status_code=status_code, raw_body=body_text)


def raise_response_error(status_code: int, response: Any, raw_body: str) -> NoReturn:
    """
    Raise the APIError described by an error response.

    A list of errors reports only its first entry.
    """
    if not isinstance(response, Mapping) or "errors" not in response:
        raise UnknownAPIError(DEFAULT_ERROR_MESSAGE, status=status_code, raw_response=raw_body)

    errors = response["errors"]
    if isinstance(errors, Sequence) and not isinstance(errors, str):
        error = errors[0] if errors else {}
    else:
        error = errors

    if error is None:
        error = {}
    elif not isinstance(error, Mapping):
        error = {"message": str(error)}

    message = error.get("message")
    raise APIError(
        DEFAULT_ERROR_MESSAGE if message is None else str(message),
        status=status_code,
        raw_response=raw_body,
        error_code=error.get("errno"),
        details=dict(error),
    )


def attach_pagination(payload: Any, meta: dict[str, Any] | None) -> Any:
    """
    Pair a bare list result with the meta that arrived beside it.

    Business endpoints return the items as ``result`` and the pagination in a
    top-level ``meta``. List parsers expect both together, so the payload
    becomes ``{"result": payload, "meta": meta}``. Payloads that already carry
    their own ``meta``, or calls without one, pass through unchanged.
    """
    if meta is None:
        return payload
    if isinstance(payload, Mapping) and "meta" in payload:
        return payload

    meta = dict(meta)
    if meta.get("pages") is None:
        meta["pages"] = compute_pages(meta.get("total"), meta.get("per_page"))
    return {"result": payload, "meta": meta}
