"""
Failure classification and retry timing for backend calls.

Classification matches on provider error text and status codes, so it is
kept in this one module; the summarizer only asks whether an error is
transient and how long to wait.
"""

from __future__ import annotations

from enum import Enum
import re

import httpx

from ..config import ProviderConfig
from ..errors import (
    NonTransientBackendError,
    TransientBackendError,
    ValidationFailure,
)

BASE_DELAY_SECONDS = 2.0
MAX_DELAY_SECONDS = 30.0

_RETRY_IN_RE = re.compile(r"Please retry in\s+([0-9]+(?:\.[0-9]+)?)\s*s", re.IGNORECASE)

_TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}
_TRANSIENT_MARKERS = (
    "429",
    "too many requests",
    "quota",
    "resource_exhausted",
    "resource exhausted",
    "503",
    "service unavailable",
    "unavailable",
    "overloaded",
    "fetch failed",
    "connection reset",
    "econnreset",
    "timed out",
    "etimedout",
)


class ErrorKind(Enum):
    TRANSIENT = "transient"
    NON_TRANSIENT = "non_transient"


def classify_error(exc: BaseException) -> ErrorKind:
    """Decide whether ``exc`` is worth retrying against the same model."""
    if isinstance(exc, (TransientBackendError, ValidationFailure, httpx.TransportError)):
        return ErrorKind.TRANSIENT
    if isinstance(exc, NonTransientBackendError):
        return ErrorKind.NON_TRANSIENT
    status_code = getattr(exc, "status_code", None)
    if status_code in _TRANSIENT_STATUS_CODES:
        return ErrorKind.TRANSIENT
    if isinstance(status_code, int) and 400 <= status_code < 500:
        return ErrorKind.NON_TRANSIENT
    message = str(exc).lower()
    status = getattr(exc, "status", None)
    if status:
        message = f"{message} {str(status).lower()}"
    if any(marker in message for marker in _TRANSIENT_MARKERS):
        return ErrorKind.TRANSIENT
    return ErrorKind.NON_TRANSIENT


def normalize_error(exc: Exception, model: str) -> Exception:
    """Map any backend failure onto the transient/non-transient error types.

    ValidationFailure passes through unchanged; everything else becomes a
    BackendError subclass chained to the original.
    """
    if isinstance(exc, (ValidationFailure, TransientBackendError, NonTransientBackendError)):
        return exc
    kind = classify_error(exc)
    error_cls = TransientBackendError if kind is ErrorKind.TRANSIENT else NonTransientBackendError
    normalized = error_cls(
        str(exc) or type(exc).__name__,
        status_code=getattr(exc, "status_code", None),
        status=getattr(exc, "status", None),
        retry_after=getattr(exc, "retry_after", None),
        model=getattr(exc, "model", None) or model,
    )
    normalized.__cause__ = exc
    return normalized


def parse_retry_delay(message: str | None) -> float | None:
    """Extract a server-suggested wait, in seconds, from an error message.

    Examples:
        >>> parse_retry_delay("Quota exceeded. Please retry in 12.3s.")
        12.3
    """
    if not message:
        return None
    match = _RETRY_IN_RE.search(message)
    if not match:
        return None
    seconds = float(match.group(1))
    if seconds <= 0:
        return None
    return seconds


def backoff_delay(attempt: int) -> float:
    """Exponential backoff from a 2 second base, capped at 30 seconds."""
    return min(MAX_DELAY_SECONDS, BASE_DELAY_SECONDS * 2 ** max(0, attempt))


def retry_delay(exc: BaseException, attempt: int) -> float:
    """Seconds to wait before the next attempt on the same model."""
    suggested = parse_retry_delay(str(exc))
    if suggested is None:
        retry_after = getattr(exc, "retry_after", None)
        if isinstance(retry_after, (int, float)) and retry_after > 0:
            suggested = float(retry_after)
    if suggested is not None:
        return suggested
    return backoff_delay(attempt)


def candidate_models(cfg: ProviderConfig) -> tuple[str, ...]:
    """Primary, fallback, then built-in models, deduplicated in first-seen order."""
    ordered = [cfg.model, cfg.fallback_model, *cfg.builtin_models]
    seen: dict[str, None] = {}
    for name in ordered:
        if name and name.strip():
            seen.setdefault(name.strip(), None)
    return tuple(seen)
