"""Configuration loading and Pydantic models for bucketwire."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class EndpointConfig(BaseModel):
    """Where requests are sent and which region they are signed for."""

    global_endpoint: str = "https://s3.amazonaws.com"
    regional_endpoint: str = "https://s3.{region}.amazonaws.com"
    alternate_endpoint: str = "https://{region}.digitaloceanspaces.com"
    global_region: str = "us-east-1"
    alternate_default_region: str = "nyc3"


class HttpConfig(BaseModel):
    """Settings for the default httpx transport."""

    timeout: float = 30.0
    verify_tls: bool = True


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"


class MetricsConfig(BaseModel):
    enabled: bool = False


class ClientConfig(BaseModel):
    """Top-level bucketwire configuration."""

    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a YAML section as a dict, treating null or absent as empty."""
    data = raw.get(name)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return data


def _parse_http(data: dict[str, Any]) -> dict[str, Any]:
    """Parse the http section.

    Accepts ``verify`` as a shorthand for ``verify_tls``.
    """
    result = dict(data)
    if "verify" in result:
        result.setdefault("verify_tls", result.pop("verify"))
    return result


def load_config(path: Path) -> ClientConfig:
    """Load a ClientConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated ClientConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value has the wrong type.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return ClientConfig(
        endpoints=EndpointConfig(**_section(raw, "endpoints")),
        http=HttpConfig(**_parse_http(_section(raw, "http"))),
        logging=LoggingConfig(**_section(raw, "logging")),
        metrics=MetricsConfig(**_section(raw, "metrics")),
    )
