"""HMAC built directly from a one-way hash primitive.

Implements the RFC 2104 inner/outer pad construction without the stdlib
``hmac`` module, so any ``bytes -> bytes`` digest function can be plugged in.

References:
    - https://www.rfc-editor.org/rfc/rfc2104
"""

import hashlib
from collections.abc import Callable

from s3v2sign.errors import PrimitiveFailure

DigestFn = Callable[[bytes], bytes]

# Constants
BLOCK_SIZE = 64  # SHA-1 block size in bytes
DIGEST_SIZE = 20  # SHA-1 digest size in bytes
IPAD = 0x36
OPAD = 0x5C


def sha1_digest(data: bytes) -> bytes:
    """Compute the raw SHA-1 digest of ``data``.

    Args:
        data: Bytes to hash.

    Returns:
        The 20-byte digest.

    Raises:
        PrimitiveFailure: If SHA-1 is unavailable in this interpreter.
    """
    try:
        hasher = hashlib.sha1(data)
    except ValueError as exc:
        # FIPS-restricted OpenSSL builds refuse sha1
        raise PrimitiveFailure(f"SHA-1 is unavailable: {exc}") from exc
    return hasher.digest()


def hmac_digest(
    key: bytes,
    message: bytes,
    digest: DigestFn = sha1_digest,
    block_size: int = BLOCK_SIZE,
) -> bytes:
    """Compute HMAC(key, message) with the given hash primitive.

    Args:
        key: A normalized key, exactly one hash block long.
        message: The message to authenticate.
        digest: One-way hash function (default SHA-1).
        block_size: Block size of ``digest`` in bytes.

    Returns:
        The raw keyed digest.

    Raises:
        ValueError: If ``key`` is not exactly ``block_size`` bytes.
    """
    if len(key) != block_size:
        raise ValueError(f"HMAC key must be {block_size} bytes, got {len(key)}")

    inner_pad = bytes(b ^ IPAD for b in key)
    inner_digest = digest(inner_pad + message)

    outer_pad = bytes(b ^ OPAD for b in key)
    return digest(outer_pad + inner_digest)
