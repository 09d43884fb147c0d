"""Dispatching requests on behalf of an account.

``send`` resolves the account's signing context, adds the fixed
``Accept: */*`` header, hands the request to the transport exactly once
and turns the transport's outcome into a value or one ``ClientError``.
Nothing is retried here.
"""

import logging
import time
from collections.abc import AsyncIterator
from pathlib import Path
from types import TracebackType
from typing import Self, TypeVar, assert_never

from bucketwire import metrics
from bucketwire.accounts import Account
from bucketwire.config import ClientConfig, load_config
from bucketwire.errors import APIError, ClientError, DecodeError, NetworkError
from bucketwire.logging_config import configure_from
from bucketwire.operations import list_keys_page
from bucketwire.query import Pair
from bucketwire.request import Request
from bucketwire.result import Failure, Success
from bucketwire.signing import resolve_context
from bucketwire.transport import (
    DecodeFailure,
    HttpxTransport,
    NetworkFailure,
    ServiceFailure,
    Transport,
    TransportFailure,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACCEPT_ANY = Pair("Accept", "*/*")


def to_client_error(failure: TransportFailure) -> ClientError:
    """Map a transport failure onto the public error it stands for."""
    match failure:
        case NetworkFailure(error=error):
            return NetworkError(error)
        case ServiceFailure(error=error):
            return APIError(error)
        case DecodeFailure(message=message):
            return DecodeError(message)
        case _:
            assert_never(failure)


def _outcome_label(error: ClientError) -> str:
    if isinstance(error, NetworkError):
        return "network_error"
    if isinstance(error, APIError):
        return "api_error"
    return "decode_error"


class Dispatcher:
    """Sends requests through a transport.

    Attributes:
        transport: The transport requests are delegated to.
        config: Endpoint, HTTP and metrics settings.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(config=self.config.http)
        if self.config.metrics.enabled:
            metrics.init_metrics()

    @classmethod
    def from_config_file(cls, path: str | Path) -> Self:
        """Load a YAML config file, install its logging settings and build a dispatcher.

        This reconfigures root logging, so it is meant for applications and
        scripts, not for libraries embedding bucketwire.
        """
        config = load_config(path)
        configure_from(config.logging)
        return cls(config=config)

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            await self.transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def send(self, account: Account, request: Request[T]) -> T:
        """Send ``request`` with ``account``'s credentials.

        Args:
            account: The account to sign and route with.
            request: The request to send.

        Returns:
            The value produced by the request's decoder.

        Raises:
            NetworkError: The transport failed.
            APIError: The service returned an error response.
            DecodeError: The response body did not decode.
        """
        context = resolve_context(account, self.config.endpoints)
        prepared = request.add_headers([ACCEPT_ANY])
        logger.debug(
            "Sending %s %s %s via %s",
            prepared.name,
            prepared.method,
            prepared.path,
            context.endpoint,
            extra={"operation": prepared.name, "method": prepared.method, "path": prepared.path},
        )

        start = time.monotonic()
        outcome = await self.transport.dispatch(context, account.credentials(), prepared)
        duration = time.monotonic() - start

        match outcome:
            case Success(value=value):
                metrics.record_operation(prepared.name, "success", duration)
                return value
            case Failure(error=failure):
                error = to_client_error(failure)
                metrics.record_operation(prepared.name, _outcome_label(error), duration)
                logger.warning(
                    "%s on %s failed for account %s: %s",
                    prepared.name,
                    prepared.path,
                    account.name,
                    error,
                    extra={"operation": prepared.name, "method": prepared.method, "path": prepared.path},
                )
                raise error
            case _:
                assert_never(outcome)

    async def iter_keys(
        self,
        account: Account,
        bucket: str,
        *,
        prefix: str | None = None,
        max_keys: int | None = None,
    ) -> AsyncIterator[str]:
        """Yield every key in ``bucket``, following listing markers.

        Each page is a separate ``send``; a failure on any page propagates.
        """
        marker: str | None = None
        while True:
            page = await self.send(
                account,
                list_keys_page(bucket, prefix=prefix, marker=marker, max_keys=max_keys),
            )
            for key in page.keys:
                yield key
            if not page.is_truncated or page.next_marker is None:
                return
            marker = page.next_marker


async def send(account: Account, request: Request[T], transport: Transport | None = None) -> T:
    """Send one request with a short-lived dispatcher.

    See ``Dispatcher.send`` for the errors raised.
    """
    async with Dispatcher(transport) as dispatcher:
        return await dispatcher.send(account, request)
