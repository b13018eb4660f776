"""Shared HTTP request helper with bounded retries.

Every external collaborator goes through :func:`request_with_retry`, so the
retry policy (total attempts, exponential backoff, which failures count as
transient) lives in one place.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Final

import httpx

from formable_wiki.config import FormableWikiConfig, load_config

# 429 and every 5xx response are retried; other statuses are final
RETRYABLE_STATUS: Final[frozenset[int]] = frozenset({429})


# =============================================================================
# EXCEPTIONS
# =============================================================================


class LookupUnavailableError(LookupError):
    """Raised when a collaborator stays unreachable after all attempts."""

    pass


# =============================================================================
# CLIENT
# =============================================================================


def make_client(config: FormableWikiConfig | None = None) -> httpx.Client:
    """Create an httpx client with the configured timeout."""
    config = config or load_config()
    return httpx.Client(timeout=config.request_timeout, follow_redirects=True)


def _is_retryable(response: httpx.Response) -> bool:
    return response.status_code in RETRYABLE_STATUS or response.status_code >= 500


def request_with_retry(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    max_attempts: int = 2,
    retry_delay: float = 0.5,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying transport errors and 429/5xx responses.

    Args:
        client: httpx client used for the request.
        method: HTTP method.
        url: Request URL.
        max_attempts: Total attempts, including the first one.
        retry_delay: Base delay in seconds; attempt ``n`` waits
            ``retry_delay * 2**n`` before the next try.
        logger: Logger to use instead of the module logger.
        **kwargs: Passed through to ``client.request``.

    Returns:
        The first non-retryable response (which may be a 4xx).

    Raises:
        LookupUnavailableError: If every attempt failed with a transport
            error or a retryable status.
    """
    log = logger or logging.getLogger("formable_wiki.lookup")
    last_error: str = "no attempts made"

    for attempt in range(max_attempts):
        try:
            response = client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            last_error = f"{type(e).__name__}: {e}"
        else:
            if not _is_retryable(response):
                return response
            last_error = f"HTTP {response.status_code}"

        if attempt < max_attempts - 1:
            # Exponential backoff
            delay = retry_delay * (2**attempt)
            log.debug(f"{method} {url} failed ({last_error}), retrying in {delay:.2f}s")
            time.sleep(delay)

    raise LookupUnavailableError(f"{method} {url} failed after {max_attempts} attempts: {last_error}")
