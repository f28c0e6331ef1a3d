"""Secret key normalization for HMAC."""

from s3v2sign.errors import UnsupportedKeyLengthError
from s3v2sign.hmac_engine import BLOCK_SIZE, DigestFn, sha1_digest


def normalize_key(
    secret: bytes,
    digest: DigestFn = sha1_digest,
    block_size: int = BLOCK_SIZE,
    allow_oversized: bool = True,
) -> bytes:
    """Map a secret of any length to exactly one hash block.

    Shorter keys are zero-padded. Longer keys are first replaced by their
    digest and then zero-padded (the standard HMAC key-shortening rule).

    Args:
        secret: The raw secret key.
        digest: One-way hash function used to shorten oversized keys.
        block_size: Hash block size in bytes.
        allow_oversized: If False, keys longer than ``block_size`` are refused.

    Returns:
        A key of exactly ``block_size`` bytes.

    Raises:
        UnsupportedKeyLengthError: If the key is oversized and
            ``allow_oversized`` is False.
    """
    if len(secret) > block_size:
        if not allow_oversized:
            raise UnsupportedKeyLengthError(len(secret), block_size)
        secret = digest(secret)
    return secret.ljust(block_size, b"\x00")
