"""Dispatch of signed requests over HTTP with httpx.

The signer never touches the network; this module is the optional last step
the CLI takes when asked to ``--send`` the request it just signed.
"""

import logging
from typing import BinaryIO

import httpx

from s3v2sign.errors import InputDataError, TransportError
from s3v2sign.signer import SignedHeaders

logger = logging.getLogger(__name__)


def build_url(endpoint: str, resource: str) -> str:
    """Join an endpoint and a resource path, keeping the query string.

    Args:
        endpoint: Scheme and host, e.g. 'https://s3.amazonaws.com'.
        resource: Request path starting with '/'.

    Returns:
        The absolute request URL.

    Raises:
        InputDataError: If the endpoint has no http(s) scheme.
    """
    if not endpoint.startswith(("http://", "https://")):
        raise InputDataError(f"Endpoint must be an http(s) URL: {endpoint!r}")
    return endpoint.rstrip("/") + resource


def send(
    signed: SignedHeaders,
    verb: str,
    endpoint: str,
    resource: str,
    body: bytes | BinaryIO | None = None,
    *,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
    verify: bool = True,
) -> httpx.Response:
    """Send a signed request and return the response.

    Args:
        signed: Headers produced by V2Signer.signed_headers().
        verb: HTTP method.
        endpoint: Scheme and host of the service.
        resource: The same resource path that was signed.
        body: Request body for PUT/POST, as bytes or an open binary file.
        client: An httpx.Client to reuse. It is left open.
        timeout: Request timeout in seconds (own client only).
        verify: Verify TLS certificates (own client only).

    Returns:
        The httpx response with its body read.

    Raises:
        TransportError: If the request cannot be completed.
    """
    url = build_url(endpoint, resource)
    headers = signed.as_list()

    logger.info("%s %s", verb, url, extra={"verb": verb, "resource": resource})

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, verify=verify)
    try:
        response = client.request(verb, url, headers=headers, content=body)
    except httpx.HTTPError as exc:
        raise TransportError(f"{verb} {url} failed: {exc}") from exc
    finally:
        if owns_client:
            client.close()

    logger.debug(
        "Response status %d for %s %s",
        response.status_code,
        verb,
        url,
        extra={"verb": verb, "resource": resource, "status": response.status_code},
    )
    return response


def raise_for_status(response: httpx.Response) -> None:
    """Raise TransportError for 4xx/5xx responses.

    The S3 error body (XML) is included in the message when present.
    """
    if response.status_code < 400:
        return
    detail = response.text.strip()
    message = f"Service returned HTTP {response.status_code}"
    if detail:
        message = f"{message}: {detail}"
    raise TransportError(message, status=response.status_code)
