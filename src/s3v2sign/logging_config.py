"""Structured logging configuration for s3v2sign.

Logs always go to stderr because stdout carries the signed headers or the
response body. A SecretFilter on the handler keeps the secret access key out
of log output.
"""

import json
import logging
import re
import sys
from collections.abc import Mapping
from datetime import datetime, timezone

REDACTED = "[REDACTED]"


class SecretFilter(logging.Filter):
    """Logging filter that redacts registered secrets from log output.

    Example:
        secret_filter = SecretFilter()
        secret_filter.register_secret("wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY")
        handler.addFilter(secret_filter)
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: set[str] = set()
        self._pattern: re.Pattern[str] | None = None

    def register_secret(self, secret: str) -> None:
        """Register a secret to redact. Empty strings are ignored."""
        if secret:
            self._secrets.add(secret)
            self._pattern = re.compile("|".join(re.escape(s) for s in self._secrets))

    def _redact_arg(self, arg: object) -> object:
        text = arg if isinstance(arg, str) else str(arg)
        redacted = self._pattern.sub(REDACTED, text)
        # Non-str args keep their type unless their text carries a secret
        if isinstance(arg, str) or redacted != text:
            return redacted
        return arg

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is not None:
            record.msg = self._pattern.sub(REDACTED, str(record.msg))
            if isinstance(record.args, Mapping):
                record.args = {key: self._redact_arg(val) for key, val in record.args.items()}
            elif record.args:
                record.args = tuple(self._redact_arg(arg) for arg in record.args)
            if record.exc_info and record.exc_info[1] is not None:
                # Formatters reuse exc_text instead of re-rendering the traceback
                text = record.exc_text or logging.Formatter().formatException(record.exc_info)
                record.exc_text = self._pattern.sub(REDACTED, text)
        return True


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Fields: timestamp, level, logger, message, plus the signing extras
    (verb, resource, status, access_key_id) when attached to the record.
    """

    EXTRA_FIELDS = ("verb", "resource", "status", "access_key_id")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = record.exc_text or self.formatException(record.exc_info)
        for key in self.EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", fmt: str = "text") -> SecretFilter:
    """Configure root logging with the specified level and format.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: Format type, 'text' for human-readable or 'json' for structured.

    Returns:
        The SecretFilter installed on the handler, for registering secrets.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Remove existing handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)

    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    secret_filter = SecretFilter()
    handler.addFilter(secret_filter)
    root.addHandler(handler)
    return secret_filter
