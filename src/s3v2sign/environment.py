"""Runtime environment and credential checks for the s3v2sign CLI.

These run before any signing happens so that a misconfigured host fails with
an environment error rather than a confusing signature mismatch later.
"""

import hashlib
import logging

from s3v2sign.config import S3V2SignConfig
from s3v2sign.errors import InputDataError, InvalidEnvironment

logger = logging.getLogger(__name__)

# AWS secret access keys are 40 characters.
STANDARD_SECRET_LENGTH = 40

_REQUIRED_DIGESTS = ("sha1", "md5")


def check_environment() -> None:
    """Verify the hash primitives the signer needs are available.

    Raises:
        InvalidEnvironment: If a required digest cannot be constructed.
    """
    for name in _REQUIRED_DIGESTS:
        try:
            hashlib.new(name)
        except ValueError as exc:
            raise InvalidEnvironment(f"Hash primitive {name!r} is unavailable: {exc}") from exc
    logger.debug("Hash primitives available: %s", ", ".join(_REQUIRED_DIGESTS))


def validate_secret(secret: bytes, require_standard_length: bool = True) -> None:
    """Check a secret access key before it reaches the signer.

    Args:
        secret: The raw secret key bytes.
        require_standard_length: Require exactly STANDARD_SECRET_LENGTH bytes.

    Raises:
        InputDataError: If the secret is empty or of the wrong length.
    """
    if not secret:
        raise InputDataError("Secret access key is empty.")
    if require_standard_length and len(secret) != STANDARD_SECRET_LENGTH:
        raise InputDataError(
            f"Secret access key must be {STANDARD_SECRET_LENGTH} bytes, got {len(secret)}."
        )


def resolve_credentials(config: S3V2SignConfig) -> tuple[str, bytes]:
    """Return the (access_key_id, secret) pair from configuration.

    Args:
        config: Loaded configuration with environment overrides applied.

    Returns:
        The access key id and the secret key encoded as UTF-8 bytes.

    Raises:
        InvalidEnvironment: If either credential is missing.
    """
    creds = config.credentials
    if not creds.access_key_id:
        raise InvalidEnvironment(
            "No access key id configured (credentials.access_key_id or AWS_ACCESS_KEY_ID)."
        )
    if not creds.secret_access_key:
        raise InvalidEnvironment(
            "No secret access key configured "
            "(credentials.secret_access_key or AWS_SECRET_ACCESS_KEY)."
        )
    return creds.access_key_id, creds.secret_access_key.encode("utf-8")
