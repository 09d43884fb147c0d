"""Client error definitions for bucketwire.

Every failure that leaves the public API is exactly one of three
exceptions, all rooted at ``ClientError``:

- ``NetworkError``: the transport could not complete the round trip.
- ``APIError``: the service answered with an error document.
- ``DecodeError``: a local decode failed (account JSON, a response parser).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceError:
    """A structured error returned by the object-storage service.

    Attributes:
        status: The HTTP status code of the error response.
        code: The service error code (e.g. "NoSuchKey", "AccessDenied").
        message: Human-readable error description.
        resource: The resource the error refers to, if reported.
        request_id: The service request identifier, if reported.
    """

    status: int
    code: str
    message: str
    resource: str = ""
    request_id: str = ""


class ClientError(Exception):
    """Base exception for all bucketwire failures."""


class NetworkError(ClientError):
    """The transport failed before a response could be decoded.

    Attributes:
        cause: The underlying transport or I/O exception.
    """

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"Network failure: {cause}")
        self.cause = cause


class APIError(ClientError):
    """The service responded with an error payload.

    Attributes:
        error: The decoded service error.
    """

    def __init__(self, error: ServiceError) -> None:
        super().__init__(f"{error.code} ({error.status}): {error.message}")
        self.error = error

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message


class DecodeError(ClientError):
    """A local parse or decode step failed.

    Attributes:
        message: The decoder's description of what went wrong.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
