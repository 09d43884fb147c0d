"""Account records and the accounts document.

The accounts document is a JSON array::

    [
      {
        "name": "primary",
        "region": "eu-west-1",
        "isDigitalOcean": false,
        "access-key": "AKIA...",
        "secret-key": "...",
        "buckets": ["site", "backups"]
      }
    ]

``region`` may be absent or null (global mode); ``isDigitalOcean``
defaults to false.
"""

import logging
from pathlib import Path

import httpx
from botocore.credentials import Credentials
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from bucketwire.errors import DecodeError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS_SOURCE = "accounts.json"


class Account(BaseModel):
    """Connection details for one storage account."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str
    region: str | None = None
    is_alternate_provider: bool = Field(default=False, alias="isDigitalOcean")
    access_key: str = Field(alias="access-key")
    secret_key: str = Field(alias="secret-key")
    buckets: tuple[str, ...]

    def credentials(self) -> Credentials:
        return Credentials(self.access_key, self.secret_key)


_ACCOUNT_LIST = TypeAdapter(list[Account])


def decode_accounts(text: str | bytes) -> list[Account]:
    """Decode an accounts document.

    Decoding is all-or-nothing: one bad entry rejects the whole document.

    Args:
        text: The JSON document.

    Returns:
        The accounts, in document order.

    Raises:
        DecodeError: On malformed JSON, a non-array document, a missing
            required field, or a value of the wrong type.
    """
    try:
        return _ACCOUNT_LIST.validate_json(text)
    except ValidationError as exc:
        raise DecodeError(str(exc)) from exc


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def fetch_accounts(
    source: str = DEFAULT_ACCOUNTS_SOURCE,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[Account]:
    """Load and decode the accounts document.

    HTTP(S) sources are fetched with httpx; any other source is read as a
    local file path.

    Args:
        source: URL or file path of the document.
        client: httpx client to use for URLs. A temporary one is created
            when omitted.

    Returns:
        The decoded accounts.

    Raises:
        NetworkError: If the document cannot be retrieved.
        DecodeError: If the document does not decode.
    """
    if _is_url(source):
        try:
            if client is None:
                async with httpx.AsyncClient() as own_client:
                    response = await own_client.get(source)
            else:
                response = await client.get(source)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch accounts from %s: %s", source, exc)
            raise NetworkError(exc) from exc
        text: str | bytes = response.content
    else:
        try:
            text = Path(source).read_bytes()
        except OSError as exc:
            logger.warning("Failed to read accounts from %s: %s", source, exc)
            raise NetworkError(exc) from exc

    accounts = decode_accounts(text)
    logger.debug("Loaded %d accounts from %s", len(accounts), source)
    return accounts
