"""AWS S3 Signature Version 2 signing.

Ties key normalization, canonicalization and the HMAC engine together and
formats the Authorization header value:

    AWS <AccessKeyId>:<Base64(HMAC-SHA1(NormalizedKey, StringToSign))>

Signing is a pure function of its inputs; nothing is cached between calls.
"""

import base64
from dataclasses import dataclass

from s3v2sign.canonical import CanonicalRequest, canonicalize
from s3v2sign.hmac_engine import BLOCK_SIZE, DigestFn, hmac_digest, sha1_digest
from s3v2sign.keys import normalize_key

# Constants
AUTH_SCHEME = "AWS"


@dataclass(frozen=True)
class SignedHeaders:
    """Headers a caller must attach to the outgoing request.

    Attributes:
        date: Value of the Date header (identical to the signed timestamp).
        authorization: Value of the Authorization header.
        content_md5: Content-MD5 value, or empty if not sent.
        content_type: Content-Type value, or empty if not sent.
        extra: Custom headers as (name, value) pairs, in input order.
    """

    date: str
    authorization: str
    content_md5: str = ""
    content_type: str = ""
    extra: tuple[tuple[str, str], ...] = ()

    def as_list(self) -> list[tuple[str, str]]:
        """Return all headers as (name, value) pairs, empty ones omitted."""
        headers = [("Date", self.date)]
        if self.content_md5:
            headers.append(("Content-MD5", self.content_md5))
        if self.content_type:
            headers.append(("Content-Type", self.content_type))
        headers.extend(self.extra)
        headers.append(("Authorization", self.authorization))
        return headers


def string_to_sign(request: CanonicalRequest, combine_duplicates: bool = True) -> str:
    """Return the canonical string-to-sign as text."""
    return canonicalize(request, combine_duplicates).decode("utf-8")


def compute_signature(
    secret: bytes,
    request: CanonicalRequest,
    *,
    digest: DigestFn = sha1_digest,
    block_size: int = BLOCK_SIZE,
    allow_oversized: bool = True,
    combine_duplicates: bool = True,
) -> str:
    """Compute the base64 signature of ``request``.

    Args:
        secret: The secret access key bytes.
        request: The request to sign.
        digest: One-way hash function (default SHA-1).
        block_size: Block size of ``digest`` in bytes.
        allow_oversized: Accept keys longer than one hash block.
        combine_duplicates: Join repeated x-amz-* header names.

    Returns:
        The base64-encoded signature.

    Raises:
        InputDataError: If the request or key is rejected.
        PrimitiveFailure: If hashing fails.
    """
    key = normalize_key(
        secret, digest=digest, block_size=block_size, allow_oversized=allow_oversized
    )
    message = canonicalize(request, combine_duplicates)
    mac = hmac_digest(key, message, digest, block_size)
    return base64.b64encode(mac).decode("ascii")


def sign(
    access_key_id: str,
    secret: bytes,
    request: CanonicalRequest,
    *,
    digest: DigestFn = sha1_digest,
    block_size: int = BLOCK_SIZE,
    allow_oversized: bool = True,
    combine_duplicates: bool = True,
) -> str:
    """Sign ``request`` and return the Authorization header value.

    Args:
        access_key_id: The public access key identifier.
        secret: The secret access key bytes.
        request: The request to sign.
        digest: One-way hash function (default SHA-1).
        block_size: Block size of ``digest`` in bytes.
        allow_oversized: Accept keys longer than one hash block.
        combine_duplicates: Join repeated x-amz-* header names.

    Returns:
        ``"AWS <access_key_id>:<signature>"``.

    Raises:
        InputDataError: If the request or key is rejected.
        PrimitiveFailure: If hashing fails.
    """
    signature = compute_signature(
        secret,
        request,
        digest=digest,
        block_size=block_size,
        allow_oversized=allow_oversized,
        combine_duplicates=combine_duplicates,
    )
    return f"{AUTH_SCHEME} {access_key_id}:{signature}"


class V2Signer:
    """Signs requests with one set of credentials and one signing policy.

    Attributes:
        access_key_id: The public access key identifier.
        allow_oversized: Accept keys longer than one hash block.
        combine_duplicates: Join repeated x-amz-* header names.
    """

    def __init__(
        self,
        access_key_id: str,
        secret: bytes,
        allow_oversized: bool = True,
        combine_duplicates: bool = True,
    ) -> None:
        """Initialize the signer.

        Args:
            access_key_id: The public access key identifier.
            secret: The secret access key bytes.
            allow_oversized: Accept keys longer than one hash block.
            combine_duplicates: Join repeated x-amz-* header names.
        """
        self.access_key_id = access_key_id
        self._secret = secret
        self.allow_oversized = allow_oversized
        self.combine_duplicates = combine_duplicates

    def __repr__(self) -> str:
        return f"V2Signer(access_key_id={self.access_key_id!r})"

    def string_to_sign(self, request: CanonicalRequest) -> str:
        return string_to_sign(request, self.combine_duplicates)

    def sign(self, request: CanonicalRequest) -> str:
        """Return the Authorization header value for ``request``."""
        return sign(
            self.access_key_id,
            self._secret,
            request,
            allow_oversized=self.allow_oversized,
            combine_duplicates=self.combine_duplicates,
        )

    def signed_headers(self, request: CanonicalRequest) -> SignedHeaders:
        """Sign ``request`` and collect every header the caller must send.

        Args:
            request: The request to sign.

        Returns:
            The complete header set, including Authorization.
        """
        authorization = self.sign(request)
        return SignedHeaders(
            date=request.date,
            authorization=authorization,
            content_md5=request.content_md5,
            content_type=request.content_type,
            extra=tuple((h.name, h.value) for h in request.headers),
        )
