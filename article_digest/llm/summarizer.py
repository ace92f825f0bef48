"""
Resilient summarization over an ordered list of candidate models.

Each call walks the candidate list in order. Every candidate gets up to
``max_retries + 1`` attempts; a transient failure (rate limit, overload,
connectivity, or output that fails validation) sleeps and retries the same
model, a non-transient failure moves straight to the next model. The first
schema-valid response wins. Retries are strictly sequential, and the
backend call and every sleep are awaits, so cancelling the calling task
stops the loop without starting another attempt.
"""

from __future__ import annotations

import asyncio
from functools import partial
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from ..config import AppConfig, load_config
from ..core.types import SummaryRequest, SummaryResult
from ..errors import SummarizationError, ValidationFailure, format_error_for_log
from ..logging_utils import log_event, truncate_text
from .prompts import build_batch_prompt, build_prompt
from .providers.base import GenerativeBackend
from .providers.gemini import create_backend
from .retry import ErrorKind, candidate_models, classify_error, normalize_error, retry_delay
from .validation import parse_json_payload, to_summary_result, validate_batch, validate_summary

logger = logging.getLogger(__name__)

T = TypeVar("T")
SleepFn = Callable[[float], Awaitable[Any]]


class Summarizer:
    """Summarize articles through a generative backend with retry and model fallback.

    Args:
        cfg: Immutable application config (models, retry budget, prompt size)
        backend: Backend used for every attempt
        sleep: Awaitable sleep used between attempts; injectable for tests
    """

    def __init__(self, cfg: AppConfig, backend: GenerativeBackend, sleep: SleepFn = asyncio.sleep):
        self.cfg = cfg
        self.backend = backend
        self._sleep = sleep

    async def summarize(self, request: SummaryRequest) -> SummaryResult:
        """Summarize one article.

        Raises:
            SummarizationError: If every candidate model failed
        """
        prompt = build_prompt(request, self.cfg.summary.max_chars)
        return await self._invoke(prompt, self._accept_single, label=request.url)

    async def summarize_batch(self, requests: Sequence[SummaryRequest]) -> list[SummaryResult]:
        """Summarize several articles in one backend call.

        All-or-nothing: the response must contain one valid summary per
        request, in order, or the whole call is retried and eventually fails.
        """
        requests = list(requests)
        if not requests:
            return []
        prompt = build_batch_prompt(requests, self.cfg.summary.max_chars)
        accept = partial(self._accept_batch, len(requests))
        return await self._invoke(prompt, accept, label=f"batch of {len(requests)}")

    async def _invoke(self, prompt: str, accept: Callable[[str, str], T], label: str) -> T:
        models = candidate_models(self.cfg.provider)
        if not models:
            raise SummarizationError("No candidate models configured")
        max_attempts = self.cfg.provider.max_retries + 1
        last_error: Exception | None = None
        attempts = 0

        for model in models:
            for attempt in range(max_attempts):
                attempts += 1
                try:
                    raw = await self.backend.generate(model, prompt)
                    result = accept(raw, model)
                except Exception as exc:  # noqa: BLE001
                    last_error = normalize_error(exc, model)
                    kind = classify_error(last_error)
                    if kind is ErrorKind.NON_TRANSIENT:
                        log_event(
                            logger,
                            "Model failed, trying next candidate",
                            level=logging.WARNING,
                            model=model,
                            attempt=attempt,
                            kind=kind.value,
                            error=format_error_for_log(last_error),
                            target=label,
                        )
                        break
                    if attempt + 1 >= max_attempts:
                        log_event(
                            logger,
                            "Model exhausted its attempts",
                            level=logging.WARNING,
                            model=model,
                            attempts=max_attempts,
                            error=format_error_for_log(last_error),
                            target=label,
                        )
                        break
                    delay = retry_delay(last_error, attempt)
                    log_event(
                        logger,
                        "Transient failure, retrying",
                        level=logging.WARNING,
                        model=model,
                        attempt=attempt,
                        kind=kind.value,
                        delay_seconds=delay,
                        error=format_error_for_log(last_error),
                        target=label,
                    )
                    await self._sleep(delay)
                    continue

                log_event(logger, "Summary accepted", model=model, attempt=attempt, target=label)
                return result

        raise SummarizationError(
            f"All {len(models)} candidate models failed for {label}",
            last_error=last_error,
            attempts=attempts,
        ) from last_error

    def _accept_single(self, raw: str, model: str) -> SummaryResult:
        obj = validate_summary(parse_json_payload(raw, dict))
        if obj is None:
            raise self._reject(f"{model} did not return valid summary JSON", raw, model)
        return to_summary_result(obj, model)

    def _accept_batch(self, expected_count: int, raw: str, model: str) -> list[SummaryResult]:
        items = validate_batch(parse_json_payload(raw, list), expected_count)
        if items is None:
            raise self._reject(
                f"{model} did not return valid batch summary JSON for {expected_count} articles",
                raw,
                model,
            )
        return [to_summary_result(item, model) for item in items]

    def _reject(self, message: str, raw: str | None, model: str) -> ValidationFailure:
        raw = raw or ""
        log_event(
            logger,
            "Model output failed validation",
            level=logging.DEBUG,
            model=model,
            output=truncate_text(raw, self.cfg.summary.snippet_chars),
        )
        return ValidationFailure(message, snippet=raw[: self.cfg.summary.snippet_chars], model=model)


async def summarize_with_gemini(
    request: SummaryRequest,
    cfg: AppConfig | None = None,
) -> SummaryResult:
    """Summarize one article with Gemini using config from YAML defaults and the environment."""
    cfg = cfg or load_config(None)
    return await Summarizer(cfg, create_backend(cfg.provider)).summarize(request)


async def summarize_batch_with_gemini(
    requests: Sequence[SummaryRequest],
    cfg: AppConfig | None = None,
) -> list[SummaryResult]:
    """Summarize several articles with Gemini in a single request."""
    cfg = cfg or load_config(None)
    return await Summarizer(cfg, create_backend(cfg.provider)).summarize_batch(requests)
