"""Signing context resolution and AWS Signature Version 4 signing.

The SigV4 algorithm itself is botocore's ``S3SigV4Auth``; this module only
decides which endpoint and region a request is signed for.

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/API/sig-v4-authenticating-requests.html
"""

import logging
from dataclasses import dataclass
from enum import Enum

from botocore.auth import S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from bucketwire.accounts import Account
from bucketwire.config import EndpointConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "s3"


class SigningMode(str, Enum):
    GLOBAL = "global"
    REGIONAL = "regional"


@dataclass(frozen=True)
class SigningContext:
    """Endpoint and signing region for one account.

    Attributes:
        region: Region name placed in the SigV4 credential scope.
        endpoint: Base URL (scheme and host) requests are sent to.
        mode: Whether the account has no region (global) or one (regional).
    """

    region: str
    endpoint: str
    mode: SigningMode


def resolve_context(account: Account, endpoints: EndpointConfig | None = None) -> SigningContext:
    """Select the endpoint and signing region for ``account``.

    No region selects the global endpoint, signed for the configured
    global region. A region selects the regional endpoint. Alternate
    providers use their own endpoint template and fall back to a default
    region when the account has none.
    """
    endpoints = endpoints or EndpointConfig()
    mode = SigningMode.GLOBAL if account.region is None else SigningMode.REGIONAL

    if account.is_alternate_provider:
        region = account.region or endpoints.alternate_default_region
        endpoint = endpoints.alternate_endpoint.format(region=region)
    elif account.region is None:
        region = endpoints.global_region
        endpoint = endpoints.global_endpoint
    else:
        region = account.region
        endpoint = endpoints.regional_endpoint.format(region=region)

    return SigningContext(region=region, endpoint=endpoint.rstrip("/"), mode=mode)


def sign_headers(
    context: SigningContext,
    credentials: Credentials,
    method: str,
    url: str,
    headers: dict[str, str],
    payload: bytes,
) -> dict[str, str]:
    """Sign a request and return the headers to send with it.

    Args:
        context: The resolved signing context.
        credentials: Access and secret key.
        method: HTTP method.
        url: The full request URL, query string included, exactly as sent.
        headers: Headers to sign along with the request.
        payload: The request body.

    Returns:
        ``headers`` plus ``Authorization``, ``X-Amz-Date`` and
        ``X-Amz-Content-SHA256``.
    """
    logger.debug("Signing %s %s for region %s", method, url, context.region)
    request = AWSRequest(method=method, url=url, data=payload, headers=dict(headers))
    S3SigV4Auth(credentials, SERVICE_NAME, context.region).add_auth(request)
    return dict(request.headers.items())
