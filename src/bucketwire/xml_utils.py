"""S3 XML response decoding helpers for bucketwire."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bucketwire.errors import ServiceError
from bucketwire.result import Failure, Result, Success

if TYPE_CHECKING:
    from bucketwire.request import ResponseMeta

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"


@dataclass(frozen=True)
class KeyList:
    """One page of a bucket listing.

    Attributes:
        keys: Object keys in the order the service returned them.
        is_truncated: Whether more keys are available after this page.
        next_marker: Marker to request the next page with, if truncated.
        common_prefixes: Prefixes collapsed by a delimiter, if one was sent.
    """

    keys: tuple[str, ...]
    is_truncated: bool
    next_marker: str | None = None
    common_prefixes: tuple[str, ...] = ()


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child.text or ""
    return None


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def parse_key_list(raw: str) -> Result[KeyList, str]:
    """Decode a ``ListBucketResult`` document.

    Accepts documents with or without the S3 namespace. When the service
    omits ``NextMarker`` on a truncated page (it only sends one when a
    delimiter was given), the last key of the page is the next marker.

    Args:
        raw: The response body.

    Returns:
        ``Success(KeyList)``, or ``Failure`` describing why the body is not
        a listing.
    """
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as exc:
        return Failure(f"Malformed listing XML: {exc}")

    if _local_name(root.tag) != "ListBucketResult":
        return Failure(f"Expected ListBucketResult, got {_local_name(root.tag)}")

    keys: list[str] = []
    for contents in _children(root, "Contents"):
        key = _child_text(contents, "Key")
        if key is None:
            return Failure("Listing entry without a Key element")
        keys.append(key)

    prefixes = [
        text
        for entry in _children(root, "CommonPrefixes")
        if (text := _child_text(entry, "Prefix")) is not None
    ]

    truncated_text = (_child_text(root, "IsTruncated") or "false").strip().lower()
    if truncated_text not in ("true", "false"):
        return Failure(f"Invalid IsTruncated value: {truncated_text!r}")
    is_truncated = truncated_text == "true"

    next_marker = _child_text(root, "NextMarker") or None
    if next_marker is None and is_truncated and keys:
        next_marker = keys[-1]

    return Success(
        KeyList(
            keys=tuple(keys),
            is_truncated=is_truncated,
            next_marker=next_marker if is_truncated else None,
            common_prefixes=tuple(prefixes),
        )
    )


def decode_service_error(meta: ResponseMeta, raw: str) -> ServiceError:
    """Decode an S3 ``<Error>`` document into a ``ServiceError``.

    Error documents carry no namespace. Responses without a readable error
    document (HEAD requests, proxies, gateways) still produce a
    ``ServiceError``, with a code derived from the status.

    Args:
        meta: Status and headers of the failed response.
        raw: The response body, possibly empty.

    Returns:
        The structured service error.
    """
    fallback = ServiceError(
        status=meta.status,
        code=f"HTTP{meta.status}",
        message=meta.reason or raw.strip()[:200],
        request_id=meta.headers.get("x-amz-request-id", ""),
    )
    if not raw.strip():
        return fallback
    try:
        root = ET.fromstring(raw)
    except ET.ParseError:
        return fallback
    if _local_name(root.tag) != "Error":
        return fallback

    return ServiceError(
        status=meta.status,
        code=_child_text(root, "Code") or fallback.code,
        message=_child_text(root, "Message") or "",
        resource=_child_text(root, "Resource") or "",
        request_id=_child_text(root, "RequestId") or fallback.request_id,
    )


def headers_only(meta: ResponseMeta, raw: str) -> Result[dict[str, str], str]:
    """Decoder that keeps the response headers and drops the body."""
    return Success(dict(meta.headers))


def body_with_headers(meta: ResponseMeta, raw: str) -> Result[tuple[str, dict[str, str]], str]:
    """Decoder that keeps both the body and the response headers."""
    return Success((raw, dict(meta.headers)))
