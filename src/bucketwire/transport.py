"""Transport layer: sign a request, send it once, decode the response.

The dispatcher talks to any object satisfying ``Transport``. The default
implementation, ``HttpxTransport``, uses an ``httpx.AsyncClient`` for the
round trip and botocore for signing.
"""

import logging
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Protocol, Self, TypeVar
from urllib.parse import quote, urlencode

import httpx
from botocore.credentials import Credentials

from bucketwire.config import HttpConfig
from bucketwire.errors import ServiceError
from bucketwire.query import Pair
from bucketwire.request import Payload, Request, ResponseMeta
from bucketwire.result import Failure, Result, Success
from bucketwire.signing import SigningContext, sign_headers

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class NetworkFailure:
    """The round trip did not complete."""

    error: Exception


@dataclass(frozen=True)
class ServiceFailure:
    """The service answered with an error response."""

    error: ServiceError


@dataclass(frozen=True)
class DecodeFailure:
    """A 2xx response that the request's decoder rejected."""

    message: str


TransportFailure = NetworkFailure | ServiceFailure | DecodeFailure


class Transport(Protocol):
    """Sends one prepared request and decodes the outcome."""

    async def dispatch(
        self,
        context: SigningContext,
        credentials: Credentials,
        request: Request[T],
    ) -> Result[T, TransportFailure]: ...


def build_url(context: SigningContext, request: Request[T]) -> httpx.URL:
    """Join the endpoint, the request path and the encoded query string.

    The query is percent-encoded here, with "/" escaped, so the URL that is
    signed is byte-for-byte the URL that is sent.
    """
    url = context.endpoint + request.path
    params = request.query_params()
    if params:
        url = f"{url}?{urlencode(params, quote_via=quote)}"
    return httpx.URL(url)


def decode_response(
    request: Request[T], meta: ResponseMeta, raw: str
) -> Result[T, TransportFailure]:
    """Apply the request's decoder on success, its error decoder otherwise.

    A decoder that raises is treated like one that returned ``Failure``.
    """
    if not 200 <= meta.status < 300:
        return Failure(ServiceFailure(request.error_decoder(meta, raw)))
    try:
        decoded = request.decoder(meta, raw)
    except Exception as exc:
        logger.debug("Decoder for %s raised", request.name, exc_info=True)
        return Failure(DecodeFailure(f"{type(exc).__name__}: {exc}"))
    match decoded:
        case Success(value=value):
            return Success(value)
        case Failure(error=message):
            return Failure(DecodeFailure(message))


class HttpxTransport:
    """Default transport backed by ``httpx.AsyncClient``.

    Attributes:
        client: The httpx client requests are sent with.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: HttpConfig | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            client: An existing client to send with. The transport does not
                close clients it did not create.
            config: Timeout and TLS settings for a client created here.
        """
        config = config or HttpConfig()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            verify=config.verify_tls,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def dispatch(
        self,
        context: SigningContext,
        credentials: Credentials,
        request: Request[T],
    ) -> Result[T, TransportFailure]:
        """Sign and send ``request`` exactly once.

        Returns:
            ``Success`` with the decoded value, or ``Failure`` with exactly
            one ``TransportFailure``.
        """
        payload = b""
        if isinstance(request.body, Payload):
            request = request.add_headers([Pair("Content-Type", request.body.mimetype)])
            payload = request.body.encode()
        headers = request.header_map()

        start = time.monotonic()
        try:
            url = build_url(context, request)
            signed = sign_headers(context, credentials, request.method, str(url), headers, payload)
            response = await self.client.request(
                request.method,
                url,
                headers=signed,
                content=payload or None,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "Transport failure for %s %s: %s",
                request.method,
                request.path,
                exc,
                extra={"operation": request.name, "method": request.method, "path": request.path},
            )
            return Failure(NetworkFailure(exc))

        duration_ms = round((time.monotonic() - start) * 1000, 2)
        logger.debug(
            "%s %s -> %d",
            request.method,
            request.path,
            response.status_code,
            extra={
                "operation": request.name,
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        meta = ResponseMeta(
            status=response.status_code,
            headers={name.lower(): value for name, value in response.headers.items()},
            reason=response.reason_phrase,
        )
        return decode_response(request, meta, response.text)
