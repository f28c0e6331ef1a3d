"""Configuration loading and Pydantic models for s3v2sign."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

DEFAULT_ENDPOINT = "https://s3.amazonaws.com"


class CredentialsConfig(BaseModel):
    """Access key pair used for signing."""

    access_key_id: str = ""
    secret_access_key: str = ""


class SigningConfig(BaseModel):
    """Signing policy switches."""

    allow_oversized_keys: bool = True
    combine_duplicate_headers: bool = True
    require_standard_secret_length: bool = True


class TransportConfig(BaseModel):
    """HTTP dispatch settings for --send."""

    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 30.0
    verify_tls: bool = True


class LoggingConfig(BaseModel):
    """Log output settings."""

    level: str = "INFO"
    format: str = "text"


class S3V2SignConfig(BaseModel):
    """Top-level s3v2sign configuration."""

    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    signing: SigningConfig = Field(default_factory=SigningConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a YAML section as a dict, treating null or missing as empty."""
    data = raw.get(name)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config section {name!r} must be a mapping")
    return data


def load_config(path: Path) -> S3V2SignConfig:
    """Load an S3V2SignConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated S3V2SignConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the file or one of its sections is not a mapping.
        pydantic.ValidationError: If a value has the wrong type.
    """
    with open(path, "r") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a mapping")

    return S3V2SignConfig(
        credentials=CredentialsConfig(**_section(raw, "credentials")),
        signing=SigningConfig(**_section(raw, "signing")),
        transport=TransportConfig(**_section(raw, "transport")),
        logging=LoggingConfig(**_section(raw, "logging")),
    )


def apply_environment(config: S3V2SignConfig, environ: Mapping[str, str]) -> S3V2SignConfig:
    """Overlay credentials and endpoint from environment variables.

    Recognized variables: AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
    S3V2SIGN_ENDPOINT. Empty values are ignored.

    Args:
        config: The configuration to update in place.
        environ: Environment mapping, usually ``os.environ``.

    Returns:
        The same config object, for chaining.
    """
    if environ.get("AWS_ACCESS_KEY_ID"):
        config.credentials.access_key_id = environ["AWS_ACCESS_KEY_ID"]
    if environ.get("AWS_SECRET_ACCESS_KEY"):
        config.credentials.secret_access_key = environ["AWS_SECRET_ACCESS_KEY"]
    if environ.get("S3V2SIGN_ENDPOINT"):
        config.transport.endpoint = environ["S3V2SIGN_ENDPOINT"]
    return config
