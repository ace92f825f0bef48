"""
Google Gemini backend.

Calls the Generative Language REST API (``generateContent``) with httpx.
Failures are raised as ``BackendError`` carrying the HTTP status, the
provider status string and any RetryInfo delay from the error envelope.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import ProviderConfig, get_api_key
from ...errors import BackendError, TransientBackendError
from .base import GenerativeBackend

logger = logging.getLogger(__name__)


class GeminiBackend(GenerativeBackend):
    """Gemini ``generateContent`` over REST."""

    name = "gemini"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the backend.

        Args:
            cfg: Provider configuration (base URL, timeout, temperature)
            api_key: Gemini API key
            client: Optional shared AsyncClient; left open by this class

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError("Missing Gemini API key")
        self.cfg = cfg
        self.api_key = api_key
        self.client = client

    async def generate(self, model: str, prompt: str) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "responseMimeType": "application/json",
            },
        }
        data = await self._post(model, payload)
        return _extract_text(data)

    async def _post(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{model}:generateContent"
        params = {"key": self.api_key}
        try:
            if self.client is not None:
                resp = await self.client.post(
                    url, params=params, json=payload, timeout=self.cfg.request_timeout_seconds
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self.cfg.request_timeout_seconds, trust_env=self.cfg.trust_env
                ) as client:
                    resp = await client.post(url, params=params, json=payload)
        except httpx.TransportError as exc:
            raise TransientBackendError(
                f"{type(exc).__name__}: {str(exc) or 'connection failed'}", model=model
            ) from exc

        if resp.status_code >= 400:
            raise _error_from_response(resp, model)
        try:
            return resp.json()
        except ValueError as exc:
            raise BackendError(
                f"Invalid JSON body from Gemini ({resp.status_code})",
                status_code=resp.status_code,
                model=model,
            ) from exc


def create_backend(cfg: ProviderConfig, client: httpx.AsyncClient | None = None) -> GeminiBackend:
    """Build the Gemini backend, reading the API key from config or environment."""
    return GeminiBackend(cfg, get_api_key(cfg), client=client)


def _error_from_response(resp: httpx.Response, model: str) -> BackendError:
    message = resp.text.strip() or resp.reason_phrase
    status: str | None = None
    retry_after: float | None = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        message = str(error.get("message") or message)
        status = error.get("status")
        for detail in error.get("details") or []:
            if isinstance(detail, dict) and str(detail.get("@type", "")).endswith("RetryInfo"):
                retry_after = _parse_duration(detail.get("retryDelay"))
    logger.debug("Gemini %s returned %d %s", model, resp.status_code, status or "")
    return BackendError(
        f"[{resp.status_code} {status or resp.reason_phrase}] {message}",
        status_code=resp.status_code,
        status=status,
        retry_after=retry_after,
        model=model,
    )


def _parse_duration(value: Any) -> float | None:
    """Parse a protobuf Duration string such as ``"12s"`` or ``"1.5s"``."""
    if not isinstance(value, str) or not value.endswith("s"):
        return None
    try:
        seconds = float(value[:-1])
    except ValueError:
        return None
    return seconds if seconds > 0 else None


def _extract_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(parts, list):
        return ""
    answer = [p.get("text", "") for p in parts if isinstance(p, dict) and not p.get("thought")]
    if any(answer):
        return "".join(answer)
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))
