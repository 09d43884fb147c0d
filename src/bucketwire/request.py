"""Immutable request values and the generic request builder.

A ``Request[T]`` describes one API call completely: method, path, body,
accumulated headers and query parameters, and the decoders that turn the
eventual response into a ``T`` or a ``ServiceError``. Building or
extending a request performs no I/O; a request can be sent any number of
times.

Duplicate keys: ``add_headers``/``add_query`` keep every pair in order,
and ``header_map``/``query_params`` collapse them so the last-applied
value wins.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from bucketwire.errors import ServiceError
from bucketwire.query import Query, encode_query
from bucketwire.result import Result, Success
from bucketwire.xml_utils import decode_service_error

T = TypeVar("T")

HTML_MIMETYPE = "text/html;charset=utf-8"
JSON_MIMETYPE = "application/json"


@dataclass(frozen=True)
class ResponseMeta:
    """Status line and headers of a response.

    Attributes:
        status: The HTTP status code.
        headers: Response headers with lower-cased names.
        reason: The HTTP reason phrase, if the transport reports one.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    reason: str = ""


@dataclass(frozen=True)
class EmptyBody:
    """A request without a body."""


@dataclass(frozen=True)
class Payload:
    """A request body with its mimetype."""

    mimetype: str
    content: str

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


Body = EmptyBody | Payload

EMPTY_BODY = EmptyBody()


def html_body(text: str) -> Payload:
    return Payload(HTML_MIMETYPE, text)


def json_body(value: Any, mimetype: str = JSON_MIMETYPE) -> Payload:
    """Serialize ``value`` to JSON text.

    Raises:
        TypeError: If ``value`` is not JSON-serializable.
    """
    return Payload(mimetype, json.dumps(value))


def string_body(mimetype: str, text: str) -> Payload:
    return Payload(mimetype, text)


Decoder = Callable[[ResponseMeta, str], Result[T, str]]
ErrorDecoder = Callable[[ResponseMeta, str], ServiceError]


def _collapse(pairs: tuple[tuple[str, str], ...], fold_case: bool) -> dict[str, str]:
    collapsed: dict[str, str] = {}
    names: dict[str, str] = {}
    for key, value in pairs:
        lookup = key.lower() if fold_case else key
        name = names.setdefault(lookup, key)
        collapsed[name] = value
    return collapsed


@dataclass(frozen=True)
class Request(Generic[T]):
    """A fully specified, not yet sent, API call.

    Attributes:
        name: Operation name, used for logging and metrics only.
        method: HTTP method.
        path: Request path including the leading slash.
        body: ``EMPTY_BODY`` or a ``Payload``.
        decoder: Turns a 2xx response into a ``T``.
        error_decoder: Turns a non-2xx response into a ``ServiceError``.
        headers: Accumulated header pairs, in the order they were added.
        query: Accumulated query-string pairs, in the order they were added.
    """

    name: str
    method: str
    path: str
    body: Body
    decoder: Decoder[T]
    error_decoder: ErrorDecoder = decode_service_error
    headers: tuple[tuple[str, str], ...] = ()
    query: tuple[tuple[str, str], ...] = ()

    def add_headers(self, query: Query) -> Request[T]:
        """Return a copy with ``query`` appended to the headers."""
        return replace(self, headers=self.headers + tuple(encode_query(query)))

    def add_query(self, query: Query) -> Request[T]:
        """Return a copy with ``query`` appended to the query string."""
        return replace(self, query=self.query + tuple(encode_query(query)))

    def header_map(self) -> dict[str, str]:
        """Headers as sent: case-insensitive keys, last value wins."""
        return _collapse(self.headers, fold_case=True)

    def query_params(self) -> dict[str, str]:
        """Query parameters as sent: last value wins."""
        return _collapse(self.query, fold_case=False)


def add_headers(query: Query, request: Request[T]) -> Request[T]:
    return request.add_headers(query)


def add_query(query: Query, request: Request[T]) -> Request[T]:
    return request.add_query(query)


def build_request(
    name: str,
    method: str,
    path: str,
    body: Body,
    decoder: Decoder[T],
    error_decoder: ErrorDecoder = decode_service_error,
) -> Request[T]:
    """Assemble a request. The path is used as given, without validation."""
    return Request(
        name=name,
        method=method,
        path=path,
        body=body,
        decoder=decoder,
        error_decoder=error_decoder,
    )


def _identity(meta: ResponseMeta, raw: str) -> Result[str, str]:
    return Success(raw)


def string_request(name: str, method: str, path: str, body: Body) -> Request[str]:
    """A request whose result is the raw response body."""
    return build_request(name, method, path, body, _identity)


def parser_request(
    name: str,
    method: str,
    path: str,
    body: Body,
    parse: Callable[[str], Result[T, str]],
) -> Request[T]:
    """A request whose result is ``parse`` applied to the response body."""

    def decoder(meta: ResponseMeta, raw: str) -> Result[T, str]:
        return parse(raw)

    return build_request(name, method, path, body, decoder)
