"""Shared JSON-over-HTTP helper for the data sources."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from beancount_prices.core.exceptions import SourceError

logger = logging.getLogger(__name__)

USER_AGENT = "beancount-prices/0.1"


def build_client(timeout: float, headers: dict[str, str] | None = None) -> httpx.AsyncClient:
    """Create the async client a source owns for the whole run."""
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT, **(headers or {})},
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
    )


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    error_cls: type[SourceError],
    params: dict[str, str] | None = None,
    context: dict[str, Any] | None = None,
) -> Any:
    """GET ``url`` and decode the JSON body. No retries.

    Raises:
        error_cls: On transport errors, non-2xx status or a non-JSON body.
    """
    ctx = {"url": url, **(context or {})}
    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(
            "HTTP error from %s: %s %s",
            url,
            e.response.status_code,
            e.response.text[:200],
        )
        raise error_cls(
            f"HTTP {e.response.status_code} from {url}",
            context={**ctx, "status_code": e.response.status_code},
        ) from e
    except httpx.RequestError as e:
        logger.error("Request error for %s: %s", url, e)
        raise error_cls(f"request to {url} failed: {e}", context=ctx) from e

    try:
        return response.json()
    except ValueError as e:
        raise error_cls(f"invalid JSON from {url}", context=ctx) from e
