"""Request payload and timestamp helpers."""

import base64
import email.utils
import hashlib
from datetime import datetime, timezone
from pathlib import Path

from s3v2sign.errors import InputDataError

_CHUNK_SIZE = 64 * 1024


def content_md5(data: bytes) -> str:
    """Return the base64 MD5 of ``data``, as sent in Content-MD5."""
    return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")


def file_content_md5(path: Path, chunk_size: int = _CHUNK_SIZE) -> str:
    """Stream a file through MD5 and return the base64 Content-MD5 value.

    Args:
        path: File to digest.
        chunk_size: Read size in bytes.

    Returns:
        The base64-encoded MD5 digest.

    Raises:
        InputDataError: If the file cannot be read.
    """
    hasher = hashlib.md5()
    try:
        with open(path, "rb") as fh:
            while chunk := fh.read(chunk_size):
                hasher.update(chunk)
    except OSError as exc:
        raise InputDataError(f"Cannot read upload file {str(path)!r}: {exc.strerror}") from exc
    return base64.b64encode(hasher.digest()).decode("ascii")


def http_date(when: datetime | None = None) -> str:
    """Format a timestamp as RFC 1123 in UTC (e.g. 'Tue, 27 Mar 2007 19:36:42 +0000').

    Naive datetimes are taken to be UTC. Defaults to the current time.
    """
    if when is None:
        when = datetime.now(timezone.utc)
    elif when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return email.utils.format_datetime(when.astimezone(timezone.utc).replace(microsecond=0))
