"""Shared async HTTP client utilities for registry adapters.

Provides a thin wrapper around ``httpx.AsyncClient`` with standardised
timeouts, user-agent headers, and error handling, so that HTTP behaviour is
consistent and testable.

Failures are mapped onto the registry error hierarchy:

- HTTP 404 raises ``NotFound``;
- timeouts, transport failures and other HTTP errors raise ``NetworkError``;
- a body that is not JSON raises ``MalformedMetadata``.
"""

from __future__ import annotations

import logging
from typing import Any

from lockwright import DEFAULT_TIMEOUT, USER_AGENT
from lockwright.exceptions import MalformedMetadata, NetworkError, NotFound

logger = logging.getLogger(__name__)


def _ensure_httpx() -> Any:  # noqa: ANN401
    """Lazily import httpx and raise a friendly error if missing.

    Returns:
        The ``httpx`` module.

    Raises:
        SystemExit: If httpx is not installed.
    """
    try:
        import httpx  # noqa: F811

        return httpx
    except ImportError:
        raise SystemExit(
            "httpx is required for HTTP registries.\n"
            "Install it with: pip install lockwright[registry]"
        )


async def fetch_json(
    url: str,
    *,
    params: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Any = None,
) -> dict[str, Any] | list[Any]:
    """Fetch a URL and parse the response as JSON.

    Args:
        url: The URL to fetch.
        params: Optional query parameters.
        timeout: Request timeout in seconds.
        transport: Optional ``httpx`` transport, used by tests.

    Returns:
        Parsed JSON response (dict or list).

    Raises:
        NotFound: On HTTP 404.
        NetworkError: On timeouts, connection failures and other HTTP errors.
        MalformedMetadata: If the body is not valid JSON.
    """
    httpx = _ensure_httpx()
    request_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers=request_headers,
            follow_redirects=True,
            transport=transport,
        ) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
    except httpx.TimeoutException as exc:
        logger.warning("Timeout fetching %s", url)
        raise NetworkError(f"Timeout fetching {url}") from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status == 404:
            raise NotFound(f"Not found: {url}") from exc
        logger.warning("HTTP %d from %s", status, url)
        raise NetworkError(f"HTTP {status} from {url}") from exc
    except httpx.RequestError as exc:
        logger.warning("Request error for %s: %s", url, exc)
        raise NetworkError(f"Request error for {url}: {exc}") from exc
    except ValueError as exc:
        raise MalformedMetadata(f"Invalid JSON from {url}: {exc}") from exc
