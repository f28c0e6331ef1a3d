"""Canonical string-to-sign construction for S3 V2 signatures.

Serializes a request into the exact byte sequence the service recomputes on
its side:

    VERB\\n
    Content-MD5\\n
    Content-Type\\n
    Date\\n
    [x-amz-name:value\\n ...]
    CanonicalizedResource

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/userguide/RESTAuthentication.html
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from s3v2sign.errors import InputDataError

# Constants
AMZ_PREFIX = "x-amz-"
FORBIDDEN_HEADER = "x-amz-date"
HEADER_SEPARATOR = ": "
SUBRESOURCES = frozenset({"acl", "torrent"})
VERBS = frozenset({"GET", "PUT", "POST", "DELETE", "HEAD"})


@dataclass(frozen=True)
class AmazonHeader:
    """A custom request header.

    Attributes:
        name: Header name as supplied; compared case-insensitively.
        value: Header value as supplied.
    """

    name: str
    value: str

    @property
    def canonical_name(self) -> str:
        return self.name.strip().lower()

    @property
    def is_amazon(self) -> bool:
        return self.canonical_name.startswith(AMZ_PREFIX)


@dataclass(frozen=True)
class CanonicalRequest:
    """The request fields covered by a V2 signature.

    Attributes:
        verb: HTTP method (GET, PUT, POST, DELETE, HEAD).
        resource: Request path starting with '/', optionally with a query string.
        date: RFC 1123 timestamp, also sent as the Date header.
        content_md5: Base64 MD5 of the body, or empty.
        content_type: MIME type of the body, or empty.
        headers: Custom headers; only x-amz-* ones are signed.
    """

    verb: str
    resource: str
    date: str
    content_md5: str = ""
    content_type: str = ""
    headers: tuple[AmazonHeader, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_request(request: CanonicalRequest) -> None:
    """Reject requests that cannot be signed with this protocol version.

    Args:
        request: The request to check.

    Raises:
        InputDataError: On an unknown verb, an absolute URL or relative path
            as resource, or an X-Amz-Date header.
    """
    if request.verb not in VERBS:
        raise InputDataError(f"Unsupported HTTP verb: {request.verb!r}")

    resource = request.resource
    if resource.startswith(("http://", "https://")):
        raise InputDataError(
            f"Resource must be a path, not a URL: {resource!r}"
        )
    if not resource.startswith("/"):
        raise InputDataError(f"Resource must start with '/': {resource!r}")

    for header in request.headers:
        if header.canonical_name == FORBIDDEN_HEADER:
            raise InputDataError(
                f"Header {header.name!r} is not allowed; the timestamp is taken from Date."
            )


def canonicalize(request: CanonicalRequest, combine_duplicates: bool = True) -> bytes:
    """Build the UTF-8 string-to-sign for ``request``.

    Args:
        request: The request to serialize.
        combine_duplicates: Join repeated header names into one line.

    Returns:
        The canonical string-to-sign as bytes.

    Raises:
        InputDataError: If the request fails validation.
    """
    validate_request(request)

    lines = [
        request.verb,
        request.content_md5,
        request.content_type,
        request.date,
    ]
    lines.extend(canonicalize_headers(request.headers, combine_duplicates))
    lines.append(canonicalize_resource(request.resource))
    return "\n".join(lines).encode("utf-8")


def canonicalize_headers(
    headers: Iterable[AmazonHeader], combine_duplicates: bool = True
) -> list[str]:
    """Render the signed x-amz-* headers as sorted ``name:value`` lines.

    Args:
        headers: All custom headers of the request.
        combine_duplicates: If True, values of a repeated name are joined with
            ',' in order of appearance (RFC 2616 section 4.2). If False, each
            occurrence gets its own line.

    Returns:
        Canonical header lines in ascending name order.
    """
    # Name -> values, preserving first-seen order of values
    grouped: dict[str, list[str]] = {}
    for header in headers:
        if not header.is_amazon:
            continue
        grouped.setdefault(header.canonical_name, []).append(header.value.strip())

    lines = []
    for name in sorted(grouped):
        values = grouped[name]
        if combine_duplicates:
            lines.append(f"{name}:{','.join(values)}")
        else:
            lines.extend(f"{name}:{value}" for value in values)
    return lines


def canonicalize_resource(resource: str) -> str:
    """Strip the query string from a resource, keeping ?acl and ?torrent.

    Args:
        resource: Request path with optional query string.

    Returns:
        The canonicalized resource.
    """
    path, sep, query = resource.partition("?")
    if sep and query in SUBRESOURCES:
        return f"{path}?{query}"
    return path


def parse_header_lines(lines: Iterable[str]) -> list[AmazonHeader]:
    """Parse ``Name: Value`` lines into headers.

    Lines that do not split into exactly one name and one value on ': ', or
    whose name is empty, are skipped.

    Args:
        lines: Raw lines, e.g. from a header file.

    Returns:
        The parsed headers in input order.
    """
    headers = []
    for line in lines:
        parts = line.rstrip("\r\n").split(HEADER_SEPARATOR)
        if len(parts) != 2 or not parts[0].strip():
            continue
        headers.append(AmazonHeader(name=parts[0], value=parts[1]))
    return headers
