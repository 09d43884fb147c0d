"""Catalog of object-storage operations.

Each function builds a ``Request`` for one S3 call. Bucket and key are
concatenated into the path verbatim; callers that need reserved
characters must escape them before calling.
"""

from collections.abc import Callable
from typing import TypeVar

from bucketwire.query import Acl, Delimiter, Marker, MaxKeys, Prefix, QueryElement, SetAcl
from bucketwire.request import (
    EMPTY_BODY,
    Body,
    Request,
    ResponseMeta,
    build_request,
    html_body,
    parser_request,
    string_request,
)
from bucketwire.result import Result
from bucketwire.xml_utils import KeyList, body_with_headers, headers_only, parse_key_list

T = TypeVar("T")


def bucket_path(bucket: str) -> str:
    return f"/{bucket}/"


def object_path(bucket: str, key: str) -> str:
    return f"/{bucket}/{key}"


def list_keys(bucket: str) -> Request[KeyList]:
    """List the first page of keys in ``bucket``."""
    return parser_request("ListKeys", "GET", bucket_path(bucket), EMPTY_BODY, parse_key_list)


def list_keys_page(
    bucket: str,
    *,
    prefix: str | None = None,
    delimiter: str | None = None,
    marker: str | None = None,
    max_keys: int | None = None,
) -> Request[KeyList]:
    """``list_keys`` with the optional listing parameters applied.

    Raises:
        ValueError: If ``max_keys`` is out of range.
    """
    query: list[QueryElement] = []
    if prefix is not None:
        query.append(Prefix(prefix))
    if delimiter is not None:
        query.append(Delimiter(delimiter))
    if marker is not None:
        query.append(Marker(marker))
    if max_keys is not None:
        query.append(MaxKeys(max_keys))
    return list_keys(bucket).add_query(query)


def get_object(bucket: str, key: str) -> Request[str]:
    return string_request("GetObject", "GET", object_path(bucket, key), EMPTY_BODY)


def get_full_object(
    bucket: str,
    key: str,
    parse: Callable[[ResponseMeta, str], Result[T, str]],
) -> Request[T]:
    """GET an object with a decoder that sees both metadata and body."""
    return build_request("GetObject", "GET", object_path(bucket, key), EMPTY_BODY, parse)


def get_object_with_headers(bucket: str, key: str) -> Request[tuple[str, dict[str, str]]]:
    return get_full_object(bucket, key, body_with_headers)


def get_headers(bucket: str, key: str) -> Request[dict[str, str]]:
    """Fetch an object's response headers.

    This issues a GET, not a HEAD: the body is transferred and discarded.
    """
    return get_full_object(bucket, key, headers_only)


def put_object(bucket: str, key: str, body: Body) -> Request[str]:
    """Write an object with the bucket's default (private) permissions."""
    return string_request("PutObject", "PUT", object_path(bucket, key), body)


def put_public_object(bucket: str, key: str, body: Body) -> Request[str]:
    return put_object(bucket, key, body).add_headers([SetAcl(Acl.PUBLIC_READ)])


def put_html_object(bucket: str, key: str, html: str) -> Request[str]:
    """Publish an HTML page as a publicly readable object."""
    return put_public_object(bucket, key, html_body(html))


def delete_object(bucket: str, key: str) -> Request[str]:
    return string_request("DeleteObject", "DELETE", object_path(bucket, key), EMPTY_BODY)
