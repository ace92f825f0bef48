"""
Error taxonomy for extraction and summarization.

Raw third-party exceptions (httpx, readability) never leave the pipeline;
they are normalized into these types with the original kept as ``__cause__``.
An article that yields no readable text is not an error: extraction returns
``None`` for it.
"""

from __future__ import annotations


class DigestError(Exception):
    """Base class for all pipeline errors."""


class ExtractionError(DigestError):
    """Fetching an article page failed (network, timeout or HTTP status)."""

    def __init__(self, message: str, url: str, cause: str = "network"):
        super().__init__(message)
        self.url = url
        self.cause = cause


class BackendError(DigestError):
    """A call to the generative backend failed.

    Attributes:
        status_code: HTTP status code, or None for transport-level failures
        status: Provider status string (e.g. "RESOURCE_EXHAUSTED"), if any
        retry_after: Server-suggested wait in seconds, if the provider sent one
        model: Model the failing call was issued against
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        status: str | None = None,
        retry_after: float | None = None,
        model: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.status = status
        self.retry_after = retry_after
        self.model = model


class TransientBackendError(BackendError):
    """Rate limit, overload or connectivity failure; worth retrying."""


class NonTransientBackendError(BackendError):
    """Invalid model, auth or malformed request; retrying the same model is pointless."""


class ValidationFailure(DigestError):
    """Model output could not be parsed or did not match the result schema."""

    def __init__(self, message: str, snippet: str, model: str | None = None):
        super().__init__(message)
        self.snippet = snippet
        self.model = model


class SummarizationError(DigestError):
    """Every candidate model exhausted its attempts."""

    def __init__(self, message: str, last_error: Exception | None = None, attempts: int = 0):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = attempts


def format_error_for_log(exc: BaseException, max_depth: int = 5) -> str:
    """Render an exception and its cause chain on one line for log output.

    Examples:
        >>> format_error_for_log(SummarizationError("all failed"))
        'SummarizationError: all failed'
    """
    parts: list[str] = []
    current: BaseException | None = exc
    depth = 0
    while current is not None and depth < max_depth:
        text = f"{type(current).__name__}: {current}"
        status_code = getattr(current, "status_code", None)
        if status_code is not None:
            text += f" (status={status_code})"
        parts.append(text)
        current = current.__cause__
        depth += 1
    return " <- ".join(parts)
