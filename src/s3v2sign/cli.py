"""CLI entry point for s3v2sign."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import BinaryIO

import httpx
import yaml
from pydantic import ValidationError

from s3v2sign import transport
from s3v2sign.canonical import VERBS, AmazonHeader, CanonicalRequest, parse_header_lines
from s3v2sign.config import S3V2SignConfig, apply_environment, load_config
from s3v2sign.environment import check_environment, resolve_credentials, validate_secret
from s3v2sign.errors import (
    EX_USAGE,
    InputDataError,
    InternalError,
    InvalidEnvironment,
    InvalidOption,
    SigningError,
)
from s3v2sign.logging_config import configure_logging
from s3v2sign.payload import file_content_md5, http_date
from s3v2sign.signer import SignedHeaders, V2Signer

logger = logging.getLogger("s3v2sign")

DEFAULT_CONFIG = Path("s3v2sign.yaml")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="s3v2sign",
        description="Sign S3 REST requests with AWS Signature Version 2",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to YAML configuration file (default: {DEFAULT_CONFIG} if present)",
    )
    parser.add_argument(
        "--access-key-id",
        type=str,
        default=None,
        help="Access key id (overrides config and AWS_ACCESS_KEY_ID)",
    )
    parser.add_argument(
        "--verb",
        type=str,
        default=None,
        choices=sorted(VERBS),
        help="HTTP verb (default: GET, or PUT with --upload-file)",
    )
    parser.add_argument(
        "--resource",
        type=str,
        required=True,
        help="Resource path, e.g. /bucket/key or /bucket/key?acl",
    )
    content = parser.add_mutually_exclusive_group()
    content.add_argument(
        "--content-md5",
        type=str,
        default="",
        help="Base64 MD5 of the request body",
    )
    content.add_argument(
        "--upload-file",
        type=Path,
        default=None,
        help="File to upload; its Content-MD5 is computed",
    )
    parser.add_argument(
        "--content-type",
        type=str,
        default="",
        help="Content-Type of the request body",
    )
    parser.add_argument(
        "--header-file",
        type=Path,
        default=None,
        help="File of 'Name: Value' lines with extra x-amz-* headers",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="RFC 1123 timestamp to sign (default: now)",
    )
    parser.add_argument(
        "--show-string-to-sign",
        action="store_true",
        default=False,
        help="Print the canonical string-to-sign to stderr",
    )
    parser.add_argument(
        "--send",
        action="store_true",
        default=False,
        help="Send the signed request to the configured endpoint",
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        default=None,
        help="Service endpoint for --send (overrides config and S3V2SIGN_ENDPOINT)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the response body here instead of stdout (with --send)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    return parser.parse_args(argv)


def _load(args: argparse.Namespace) -> S3V2SignConfig:
    """Load configuration, then apply environment and CLI overrides."""
    path = args.config
    if path is None and DEFAULT_CONFIG.exists():
        path = DEFAULT_CONFIG

    if path is None:
        config = S3V2SignConfig()
    else:
        try:
            config = load_config(path)
        except FileNotFoundError:
            raise InvalidEnvironment(f"Config file not found: {path}")
        except OSError as exc:
            raise InvalidEnvironment(f"Cannot read config {path}: {exc.strerror}")
        except (yaml.YAMLError, ValueError, ValidationError) as exc:
            raise InvalidEnvironment(f"Failed to load config {path}: {exc}")

    apply_environment(config, os.environ)

    if args.access_key_id is not None:
        config.credentials.access_key_id = args.access_key_id
    if args.endpoint is not None:
        config.transport.endpoint = args.endpoint
    if args.log_level is not None:
        config.logging.level = args.log_level
    if args.log_format is not None:
        config.logging.format = args.log_format
    return config


def _check_options(args: argparse.Namespace) -> str:
    """Reject conflicting options and return the effective verb."""
    verb = args.verb or ("PUT" if args.upload_file is not None else "GET")
    if args.upload_file is not None and verb not in ("PUT", "POST"):
        raise InvalidOption(f"--upload-file cannot be used with {verb}")
    if args.output is not None and not args.send:
        raise InvalidOption("--output requires --send")
    return verb


def _read_headers(path: Path | None) -> list[AmazonHeader]:
    if path is None:
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise InputDataError(f"Cannot read header file {str(path)!r}: {exc.strerror}") from exc
    headers = parse_header_lines(lines)
    skipped = sum(1 for line in lines if line.strip()) - len(headers)
    if skipped:
        logger.debug("Ignored %d malformed line(s) in %s", skipped, path)
    return headers


def _send(
    args: argparse.Namespace,
    config: S3V2SignConfig,
    verb: str,
    signed: SignedHeaders,
    body: BinaryIO | None = None,
) -> httpx.Response:
    return transport.send(
        signed,
        verb,
        config.transport.endpoint,
        args.resource,
        body,
        timeout=config.transport.timeout,
        verify=config.transport.verify_tls,
    )


def run(args: argparse.Namespace, config: S3V2SignConfig) -> int:
    """Sign (and optionally send) the request described by ``args``.

    Args:
        args: Parsed command-line arguments.
        config: Effective configuration.

    Returns:
        Process exit status (0 on success).

    Raises:
        SigningError: On any user, environment or transport failure.
    """
    verb = _check_options(args)
    check_environment()

    access_key_id, secret = resolve_credentials(config)
    validate_secret(secret, config.signing.require_standard_secret_length)

    content_md5 = args.content_md5
    if args.upload_file is not None:
        content_md5 = file_content_md5(args.upload_file)

    request = CanonicalRequest(
        verb=verb,
        resource=args.resource,
        date=args.date or http_date(),
        content_md5=content_md5,
        content_type=args.content_type,
        headers=tuple(_read_headers(args.header_file)),
    )

    signer = V2Signer(
        access_key_id,
        secret,
        allow_oversized=config.signing.allow_oversized_keys,
        combine_duplicates=config.signing.combine_duplicate_headers,
    )
    if args.show_string_to_sign:
        sys.stderr.write(signer.string_to_sign(request) + "\n")

    signed = signer.signed_headers(request)
    logger.debug(
        "Signed %s %s",
        verb,
        args.resource,
        extra={"verb": verb, "resource": args.resource, "access_key_id": access_key_id},
    )

    if not args.send:
        for name, value in signed.as_list():
            sys.stdout.write(f"{name}: {value}\n")
        return 0

    if args.upload_file is None:
        response = _send(args, config, verb, signed)
    else:
        try:
            with args.upload_file.open("rb") as body:
                response = _send(args, config, verb, signed, body)
        except OSError as exc:
            raise InputDataError(
                f"Cannot read upload file {str(args.upload_file)!r}: {exc.strerror}"
            ) from exc

    if args.output is not None:
        args.output.write_bytes(response.content)
    else:
        sys.stdout.buffer.write(response.content)
        sys.stdout.flush()
    transport.raise_for_status(response)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the s3v2sign CLI.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Process exit status.
    """
    try:
        args = parse_args(argv)
    except SystemExit as exc:
        # argparse exits 0 for --help and 2 for usage errors
        return 0 if exc.code in (0, None) else EX_USAGE

    # Use a basic stderr logger for config-loading errors
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        config = _load(args)
    except SigningError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        return exc.exit_status

    # Configure structured logging (replaces basicConfig)
    secret_filter = configure_logging(level=config.logging.level, fmt=config.logging.format)
    secret_filter.register_secret(config.credentials.secret_access_key)

    try:
        return run(args, config)
    except SigningError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        return exc.exit_status
    except Exception as exc:
        err = InternalError(f"Unexpected failure: {exc}")
        logger.exception("%s: %s", err.code, err.message)
        return err.exit_status


if __name__ == "__main__":
    sys.exit(main())
