"""Query elements and their wire encoding.

A query is an ordered sequence of elements. Each element renders to
exactly one ``(key, value)`` pair, used either as a header or as a
query-string parameter depending on where the request applies it.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import assert_never

MAX_KEYS_LIMIT = 1000

ACL_HEADER = "x-amz-acl"


class Acl(str, Enum):
    """Canned ACLs accepted by S3-compatible services."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    AWS_EXEC_READ = "aws-exec-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


@dataclass(frozen=True)
class Pair:
    """An arbitrary key/value pair, passed through unchanged."""

    key: str
    value: str


@dataclass(frozen=True)
class Delimiter:
    value: str


@dataclass(frozen=True)
class Marker:
    """Pagination cursor for bucket listings."""

    value: str


@dataclass(frozen=True)
class MaxKeys:
    """Upper bound on the number of keys a listing returns."""

    count: int

    def __post_init__(self) -> None:
        if not 0 <= self.count <= MAX_KEYS_LIMIT:
            raise ValueError(f"max-keys must be between 0 and {MAX_KEYS_LIMIT}, got {self.count}")


@dataclass(frozen=True)
class Prefix:
    value: str


@dataclass(frozen=True)
class SetAcl:
    """Sets the canned ACL of the object being written."""

    acl: Acl

    def __post_init__(self) -> None:
        # Acl("bogus") raises ValueError, which is the construction-time check.
        object.__setattr__(self, "acl", Acl(self.acl))


QueryElement = Pair | Delimiter | Marker | MaxKeys | Prefix | SetAcl

Query = Sequence[QueryElement]


def encode_element(element: QueryElement) -> tuple[str, str]:
    """Render a single query element as a wire ``(key, value)`` pair."""
    match element:
        case Pair(key=key, value=value):
            return (key, value)
        case Delimiter(value=value):
            return ("delimiter", value)
        case Marker(value=value):
            return ("marker", value)
        case MaxKeys(count=count):
            return ("max-keys", str(count))
        case Prefix(value=value):
            return ("prefix", value)
        case SetAcl(acl=acl):
            return (ACL_HEADER, acl.value)
        case _:
            assert_never(element)


def encode_query(query: Query) -> list[tuple[str, str]]:
    """Render a query as wire pairs, one per element, in input order."""
    return [encode_element(element) for element in query]
