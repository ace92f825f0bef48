"""
Pipeline orchestration: extract an article, then summarize it.

The caller (a scheduler or the CLI) decides cadence and what to do with
failures; errors propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from .config import AppConfig
from .core.types import SummaryRequest, SummaryResult
from .fetch.extractor import extract_article
from .fetch.fetcher import build_client
from .llm.summarizer import Summarizer

logger = logging.getLogger(__name__)


async def digest_url(
    url: str,
    cfg: AppConfig,
    summarizer: Summarizer,
    author: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> SummaryResult | None:
    """Extract and summarize one article.

    Returns:
        The validated summary, or None if the page had no readable text

    Raises:
        ExtractionError: If the page could not be fetched
        SummarizationError: If every candidate model failed
    """
    article = await extract_article(url, cfg.fetch, client=client)
    if article is None:
        return None
    request = SummaryRequest.from_article(url, article, author=author)
    return await summarizer.summarize(request)


async def digest_urls(
    urls: Sequence[str],
    cfg: AppConfig,
    summarizer: Summarizer,
) -> list[SummaryResult | None]:
    """Digest several URLs one after another, sharing a single HTTP client."""
    results: list[SummaryResult | None] = []
    async with build_client(cfg.fetch) as client:
        for url in urls:
            result = await digest_url(url, cfg, summarizer, client=client)
            if result is None:
                logger.info("Skipped %s: no readable content", url)
            results.append(result)
    return results
