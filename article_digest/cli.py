"""
Command-line interface for the article digest pipeline.

Uses Typer to expose extraction and summarization for manual runs.
Supports loading .env files for API key configuration.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, replace
import json
from pathlib import Path
from typing import NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console

from .config import AppConfig, load_config
from .core.types import SummaryRequest
from .errors import DigestError, format_error_for_log
from .fetch.extractor import extract_article
from .fetch.fetcher import build_client
from .llm.providers.gemini import create_backend
from .llm.summarizer import Summarizer
from .logging_utils import setup_logging
from .runner import digest_url

app = typer.Typer(add_completion=False, help="Extract and summarize web articles.")
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
ModelOption = typer.Option(None, "--model", help="Primary model (overrides GEMINI_MODEL).")
RetriesOption = typer.Option(
    None, "--max-retries", min=0, help="Retries per model (overrides GEMINI_MAX_RETRIES)."
)
LogDirOption = typer.Option(None, "--log-dir", help="Also write a log file to this directory.")


def _load(
    config: Path | None,
    log_level: str | None,
    model: str | None = None,
    max_retries: int | None = None,
    log_dir: Path | None = None,
) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)

    logging_updates = {}
    if log_level:
        logging_updates["level"] = log_level
    if log_dir is not None:
        logging_updates["file"] = True
    if logging_updates:
        cfg = replace(cfg, logging=replace(cfg.logging, **logging_updates))
    provider_updates = {}
    if model:
        provider_updates["model"] = model
    if max_retries is not None:
        provider_updates["max_retries"] = max_retries
    if provider_updates:
        cfg = replace(cfg, provider=replace(cfg.provider, **provider_updates))

    setup_logging(cfg.logging, log_dir)
    return cfg


def _build_summarizer(cfg: AppConfig) -> Summarizer:
    try:
        backend = create_backend(cfg.provider)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red] (set {cfg.provider.api_key_env})")
        raise typer.Exit(code=1) from exc
    return Summarizer(cfg, backend)


def _fail(exc: DigestError) -> NoReturn:
    console.print(f"[red]{format_error_for_log(exc)}[/red]")
    raise typer.Exit(code=1)


@app.command()
def extract(
    url: str = typer.Argument(..., help="Article URL."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_dir: Path | None = LogDirOption,
):
    """Fetch a page and print its readable content as JSON."""
    cfg = _load(config, log_level, log_dir=log_dir)
    try:
        article = asyncio.run(extract_article(url, cfg.fetch))
    except DigestError as exc:
        _fail(exc)
    if article is None:
        console.print(f"No readable content at {url}")
        raise typer.Exit(code=2)
    console.print_json(json.dumps(asdict(article)))


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Article URL."),
    author: str | None = typer.Option(None, "--author", help="Author name to pass to the model."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    model: str | None = ModelOption,
    max_retries: int | None = RetriesOption,
    log_dir: Path | None = LogDirOption,
):
    """Extract an article and print its structured summary as JSON."""
    cfg = _load(config, log_level, model, max_retries, log_dir)
    summarizer = _build_summarizer(cfg)
    try:
        result = asyncio.run(digest_url(url, cfg, summarizer, author=author))
    except DigestError as exc:
        _fail(exc)
    if result is None:
        console.print(f"No readable content at {url}")
        raise typer.Exit(code=2)
    console.print_json(json.dumps(result.to_dict()))


@app.command()
def batch(
    urls: list[str] = typer.Argument(..., help="Article URLs, summarized in one request."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    model: str | None = ModelOption,
    max_retries: int | None = RetriesOption,
    log_dir: Path | None = LogDirOption,
):
    """Extract several articles and summarize them together in one model call."""
    cfg = _load(config, log_level, model, max_retries, log_dir)
    summarizer = _build_summarizer(cfg)
    try:
        results = asyncio.run(_run_batch(urls, cfg, summarizer))
    except DigestError as exc:
        _fail(exc)
    console.print_json(json.dumps([result.to_dict() for result in results]))


async def _run_batch(urls: list[str], cfg: AppConfig, summarizer: Summarizer):
    requests = []
    async with build_client(cfg.fetch) as client:
        for url in urls:
            article = await extract_article(url, cfg.fetch, client=client)
            if article is None:
                console.print(f"Skipping {url}: no readable content")
                continue
            requests.append(SummaryRequest.from_article(url, article))
    return await summarizer.summarize_batch(requests)


if __name__ == "__main__":
    app()
