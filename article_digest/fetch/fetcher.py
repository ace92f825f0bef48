"""
HTTP fetching of article pages.

Pages are fetched with httpx using a bounded timeout, an identifying
User-Agent and a capped redirect count. Any network or HTTP failure is
normalized into ``ExtractionError`` with the httpx exception chained.
"""

from __future__ import annotations

import logging

import httpx

from ..config import FetchConfig
from ..errors import ExtractionError

logger = logging.getLogger(__name__)


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    """Create an AsyncClient configured for article fetching."""
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers=_headers(cfg),
        follow_redirects=True,
        max_redirects=cfg.max_redirects,
        trust_env=cfg.trust_env,
    )


async def fetch_html(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Fetch the raw markup of ``url``.

    A caller-supplied client is used as-is and left open; otherwise a client
    is created for this call and closed before returning.

    Args:
        url: The page to fetch
        cfg: Fetch settings (timeout, user agent, redirect cap)
        client: Optional shared AsyncClient

    Returns:
        The response body decoded as text

    Raises:
        ExtractionError: On timeout, connection failure, too many redirects
            or a non-2xx response
    """
    if client is None:
        async with build_client(cfg) as owned:
            return await _get(owned, url, cfg)
    return await _get(client, url, cfg)


async def _get(client: httpx.AsyncClient, url: str, cfg: FetchConfig) -> str:
    try:
        resp = await client.get(url, headers=_headers(cfg), timeout=cfg.timeout_seconds)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ExtractionError(
            f"HTTP {exc.response.status_code} fetching {url}", url=url, cause="network"
        ) from exc
    except httpx.HTTPError as exc:
        raise ExtractionError(
            f"{type(exc).__name__} fetching {url}: {exc}", url=url, cause="network"
        ) from exc
    logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
    return resp.text


def _headers(cfg: FetchConfig) -> dict[str, str]:
    return {"User-Agent": cfg.user_agent, "Accept": cfg.accept}
