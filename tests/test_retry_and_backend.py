"""Tests for failure classification, backoff timing and the Gemini REST backend."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from article_digest.config import ProviderConfig
from article_digest.errors import (
    BackendError,
    NonTransientBackendError,
    TransientBackendError,
    ValidationFailure,
)
from article_digest.llm.providers.gemini import GeminiBackend, _extract_text, create_backend
from article_digest.llm.retry import (
    ErrorKind,
    backoff_delay,
    candidate_models,
    classify_error,
    parse_retry_delay,
    retry_delay,
)


@pytest.mark.parametrize(
    "message",
    [
        "[429 Too Many Requests] Resource has been exhausted (e.g. check quota).",
        "[503 UNAVAILABLE] The model is overloaded. Please try again later.",
        "TypeError: fetch failed",
        "read ECONNRESET",
        "The read operation timed out",
    ],
)
def test_transient_messages(message):
    assert classify_error(BackendError(message)) is ErrorKind.TRANSIENT


@pytest.mark.parametrize(
    "exc",
    [
        BackendError("[404 NOT_FOUND] models/gemini-9 is not found", status_code=404),
        BackendError("[400 INVALID_ARGUMENT] API key not valid.", status_code=400),
        BackendError("[403 PERMISSION_DENIED] Permission denied.", status_code=403),
        BackendError(
            "[400 INVALID_ARGUMENT] Model gemini-x is unavailable in your region", status_code=400
        ),
        BackendError("[403 PERMISSION_DENIED] Project quota is disabled (429).", status_code=403),
        ValueError("bad request payload"),
    ],
)
def test_non_transient_errors(exc):
    assert classify_error(exc) is ErrorKind.NON_TRANSIENT


def test_classification_of_typed_errors():
    assert classify_error(httpx.ReadTimeout("slow")) is ErrorKind.TRANSIENT
    assert classify_error(ValidationFailure("bad", snippet="")) is ErrorKind.TRANSIENT
    assert classify_error(NonTransientBackendError("quota")) is ErrorKind.NON_TRANSIENT
    assert classify_error(BackendError("boom", status_code=503)) is ErrorKind.TRANSIENT


def test_backoff_doubles_and_caps():
    assert [backoff_delay(i) for i in range(6)] == [2.0, 4.0, 8.0, 16.0, 30.0, 30.0]


def test_parse_retry_delay():
    assert parse_retry_delay("Quota exceeded. Please retry in 12.3s.") == 12.3
    assert parse_retry_delay("please retry in 4 s") == 4.0
    assert parse_retry_delay("Please retry in 0s") is None
    assert parse_retry_delay("no hint") is None
    assert parse_retry_delay(None) is None


def test_retry_delay_prefers_server_hint():
    assert retry_delay(BackendError("Please retry in 3s"), attempt=4) == 3.0
    assert retry_delay(BackendError("quota", retry_after=9.0), attempt=0) == 9.0
    assert retry_delay(BackendError("quota"), attempt=2) == 8.0


def test_candidate_models_dedupes_in_order():
    cfg = ProviderConfig(model="gemini-2.5-flash", fallback_model=" gemini-2.5-flash ")

    assert candidate_models(cfg) == (
        "gemini-2.5-flash",
        "gemini-2.5-flash-lite",
        "gemini-1.5-flash",
        "gemini-1.5-pro",
    )


def test_candidate_models_skips_blank_entries():
    cfg = ProviderConfig(model="", fallback_model=None, builtin_models=("a", "", "b", "a"))

    assert candidate_models(cfg) == ("a", "b")


def _backend(handler) -> tuple[GeminiBackend, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiBackend(ProviderConfig(), "test-key", client=client), client


def _generate(handler, model: str = "gemini-2.5-flash") -> str:
    async def run():
        backend, client = _backend(handler)
        async with client:
            return await backend.generate(model, "prompt")

    return asyncio.run(run())


def test_gemini_backend_posts_prompt_and_returns_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params["key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": '{"ok": true}'}]}}]}
        )

    assert _generate(handler) == '{"ok": true}'
    assert seen["path"] == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "prompt"


def test_gemini_backend_parses_error_envelope():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={
                "error": {
                    "code": 429,
                    "message": "You exceeded your current quota.",
                    "status": "RESOURCE_EXHAUSTED",
                    "details": [
                        {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": "12s"}
                    ],
                }
            },
        )

    with pytest.raises(BackendError) as excinfo:
        _generate(handler)

    err = excinfo.value
    assert err.status_code == 429
    assert err.status == "RESOURCE_EXHAUSTED"
    assert err.retry_after == 12.0
    assert err.model == "gemini-2.5-flash"
    assert classify_error(err) is ErrorKind.TRANSIENT


def test_gemini_backend_unknown_model_is_non_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={"error": {"code": 404, "message": "models/nope is not found", "status": "NOT_FOUND"}},
        )

    with pytest.raises(BackendError) as excinfo:
        _generate(handler, model="nope")

    assert classify_error(excinfo.value) is ErrorKind.NON_TRANSIENT


def test_gemini_backend_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientBackendError) as excinfo:
        _generate(handler)

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_extract_text_skips_thought_parts():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"thought": True, "text": "internal reasoning"},
                        {"text": '{"title": "A"'},
                        {"text": ', "url": "u"}'},
                    ]
                }
            }
        ]
    }

    assert _extract_text(data) == '{"title": "A", "url": "u"}'
    assert _extract_text({"promptFeedback": {"blockReason": "SAFETY"}}) == ""


def test_create_backend_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(ValueError, match="Missing Gemini API key"):
        create_backend(ProviderConfig())

    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert create_backend(ProviderConfig()).api_key == "from-env"
