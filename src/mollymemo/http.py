"""Shared httpx request helper with bounded retries on transient failures.

Transport errors and 5xx responses are retried with exponential backoff.
Any other response, including 4xx, is returned to the caller, which treats
a non-success status as terminal for that call.
"""

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from mollymemo.errors import TransientNetworkError

logger = logging.getLogger(__name__)

USER_AGENT = "MollyMemo/0.1"

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def _is_retryable(error: BaseException) -> bool:
    """Transport failures (incl. timeouts) and 5xx responses are transient."""
    return isinstance(error, (TransientNetworkError, httpx.TransportError))


@retry(
    retry=retry_if_exception(_is_retryable),
    wait=wait_exponential_jitter(initial=0.5, max=4, jitter=1),
    stop=stop_after_attempt(3),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def send_request(
    client: httpx.AsyncClient, method: str, url: str, **kwargs
) -> httpx.Response:
    """Send one request through ``client``, retrying transient failures.

    Raises:
        TransientNetworkError: 5xx after exhausting retries.
        httpx.TransportError: network failure after exhausting retries.
    """
    response = await client.request(method, url, **kwargs)
    if response.status_code >= 500:
        raise TransientNetworkError(f"{method} {url} returned {response.status_code}")
    return response


def json_object(response: httpx.Response) -> dict | None:
    """Decode a JSON object body. None when the body is not JSON or not an object."""
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


async def fetch_bytes(
    client: httpx.AsyncClient, url: str, max_bytes: int, **kwargs
) -> bytes | None:
    """Stream a GET body into memory, stopping once it exceeds ``max_bytes``.

    Returns None for non-success responses and oversized bodies. A declared
    ``Content-Length`` over the cap is refused before any body is read.
    Transport errors propagate.
    """
    async with client.stream("GET", url, **kwargs) as response:
        if not response.is_success:
            logger.warning("GET %s returned %d", url, response.status_code)
            return None

        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > max_bytes:
            logger.warning("Body of %s too large (%s bytes declared)", url, declared)
            return None

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > max_bytes:
                logger.warning("Body of %s exceeded %d bytes, aborting", url, max_bytes)
                return None
    return bytes(body)
