"""Tests for the extract-then-summarize pipeline and the CLI."""

from __future__ import annotations

import asyncio
import json
import logging

from typer.testing import CliRunner

from article_digest import cli, runner
from article_digest.config import AppConfig
from article_digest.core.types import ExtractedArticle, SummaryPoint, SummaryResult
from article_digest.errors import ExtractionError
from article_digest.logging_utils import JsonlFormatter, log_event, truncate_text


ARTICLE = ExtractedArticle(
    title="",
    excerpt="Excerpt",
    text="Readable text of the article.",
    image_url="https://example.com/a.png",
)


class _StubSummarizer:
    def __init__(self):
        self.requests = []

    async def summarize(self, request):
        self.requests.append(request)
        return SummaryResult(
            author=request.author,
            title=request.title,
            url=request.url,
            points=[SummaryPoint(heading="H", paragraph="P")] * 10,
            categories=["Miscellaneous"],
            model_used="stub-model",
        )


def test_digest_url_builds_request_from_extracted_article(monkeypatch):
    async def fake_extract(url, cfg, client=None):
        return ARTICLE

    monkeypatch.setattr(runner, "extract_article", fake_extract)
    summarizer = _StubSummarizer()

    result = asyncio.run(
        runner.digest_url("https://example.com/a", AppConfig(), summarizer, author="Ann")
    )

    request = summarizer.requests[0]
    assert request.title == "https://example.com/a"
    assert request.author == "Ann"
    assert request.text == ARTICLE.text
    assert result.model_used == "stub-model"


def test_digest_url_returns_none_when_not_extractable(monkeypatch):
    async def fake_extract(url, cfg, client=None):
        return None

    monkeypatch.setattr(runner, "extract_article", fake_extract)
    summarizer = _StubSummarizer()

    result = asyncio.run(runner.digest_url("https://example.com/a", AppConfig(), summarizer))

    assert result is None
    assert summarizer.requests == []


def test_digest_urls_keeps_order(monkeypatch):
    async def fake_extract(url, cfg, client=None):
        return None if url.endswith("empty") else ARTICLE

    monkeypatch.setattr(runner, "extract_article", fake_extract)

    results = asyncio.run(
        runner.digest_urls(
            ["https://example.com/1", "https://example.com/empty"], AppConfig(), _StubSummarizer()
        )
    )

    assert results[0].url == "https://example.com/1"
    assert results[1] is None


def test_cli_extract_prints_json(monkeypatch):
    async def fake_extract(url, cfg):
        return ARTICLE

    monkeypatch.setattr(cli, "extract_article", fake_extract)

    result = CliRunner().invoke(cli.app, ["extract", "https://example.com/a"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["image_url"] == "https://example.com/a.png"


def test_cli_extract_reports_not_extractable(monkeypatch):
    async def fake_extract(url, cfg):
        return None

    monkeypatch.setattr(cli, "extract_article", fake_extract)

    result = CliRunner().invoke(cli.app, ["extract", "https://example.com/a"])

    assert result.exit_code == 2


def test_cli_extract_reports_fetch_errors(monkeypatch):
    async def fake_extract(url, cfg):
        raise ExtractionError("HTTP 503 fetching page", url=url)

    monkeypatch.setattr(cli, "extract_article", fake_extract)

    result = CliRunner().invoke(cli.app, ["extract", "https://example.com/a"])

    assert result.exit_code == 1
    assert "ExtractionError" in result.stdout


def test_cli_summarize_requires_api_key(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    result = CliRunner().invoke(cli.app, ["summarize", "https://example.com/a"])

    assert result.exit_code == 1
    assert "Missing Gemini API key" in result.stdout


def test_jsonl_formatter_includes_extra_fields():
    record = logging.LogRecord("article_digest", logging.INFO, __file__, 1, "Retry", None, None)
    record.model = "gemini-2.5-flash"
    record.delay_seconds = 2.0

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["message"] == "Retry"
    assert payload["model"] == "gemini-2.5-flash"
    assert payload["delay_seconds"] == 2.0


def test_log_event_and_truncate_text(caplog):
    logger = logging.getLogger("digest_test")

    with caplog.at_level(logging.WARNING, logger="digest_test"):
        log_event(logger, "Attempt failed", level=logging.WARNING, model="m")
        log_event(None, "ignored")

    assert caplog.records[0].model == "m"
    assert truncate_text("abcdef", max_chars=3) == "abc...(truncated)"


def test_cli_log_dir_writes_jsonl_log_file(monkeypatch, tmp_path):
    async def fake_extract(url, cfg):
        logging.getLogger("article_digest.fetch").info("Fetched page", extra={"url": url})
        return ARTICLE

    monkeypatch.setattr(cli, "extract_article", fake_extract)

    result = CliRunner().invoke(
        cli.app, ["extract", "https://example.com/a", "--log-dir", str(tmp_path)]
    )

    assert result.exit_code == 0
    lines = (tmp_path / "digest.jsonl").read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "Fetched page"
    assert record["url"] == "https://example.com/a"


def test_cli_batch_shares_one_http_client(monkeypatch):
    clients = []

    async def fake_extract(url, cfg, client=None):
        clients.append(client)
        return None if url.endswith("empty") else ARTICLE

    class _BatchSummarizer:
        async def summarize_batch(self, requests):
            return [
                SummaryResult(
                    author=None,
                    title=request.title,
                    url=request.url,
                    points=[SummaryPoint(heading="H", paragraph="P")] * 10,
                    categories=["Miscellaneous"],
                    model_used="stub-model",
                )
                for request in requests
            ]

    monkeypatch.setattr(cli, "extract_article", fake_extract)
    monkeypatch.setattr(cli, "_build_summarizer", lambda cfg: _BatchSummarizer())

    result = CliRunner().invoke(
        cli.app,
        ["batch", "https://example.com/1", "https://example.com/empty", "https://example.com/2"],
    )

    assert result.exit_code == 0
    assert len(clients) == 3
    assert clients[0] is not None
    assert all(client is clients[0] for client in clients)
