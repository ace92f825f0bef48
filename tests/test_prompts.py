"""Tests for prompt rendering and text truncation."""

from __future__ import annotations

from article_digest.core.types import SummaryRequest
from article_digest.llm.prompts import (
    ALL_CATEGORIES,
    CATEGORY_TAXONOMY,
    MAX_TEXT_CHARS,
    build_batch_prompt,
    build_prompt,
    clip_text,
)


def _request(idx: int = 1, text: str = "Body text.") -> SummaryRequest:
    return SummaryRequest(
        author=None,
        title=f"Title {idx}",
        url=f"https://example.com/{idx}",
        text=text,
    )


def test_prompt_truncates_article_text_to_budget():
    text = "Z" * 40000

    prompt = build_prompt(_request(text=text))

    assert len(clip_text(text)) == MAX_TEXT_CHARS == 15000
    assert "Z" * 15000 in prompt
    assert "Z" * 15001 not in prompt


def test_prompt_is_deterministic_and_names_rules():
    request = _request()

    prompt = build_prompt(request)

    assert prompt == build_prompt(request)
    assert "Return ONLY valid JSON" in prompt
    assert "exactly 10 items" in prompt
    assert '"Miscellaneous"' in prompt
    assert "URL: https://example.com/1" in prompt
    assert prompt.endswith("Body text.")
    for domain in CATEGORY_TAXONOMY:
        assert f"{domain}: " in prompt


def test_prompt_keeps_braces_in_article_text():
    prompt = build_prompt(_request(text="function() { return {a: 1}; }"))

    assert "function() { return {a: 1}; }" in prompt


def test_batch_prompt_labels_articles_in_order():
    requests = [_request(i, text=f"Text of article {i}") for i in range(1, 4)]

    prompt = build_batch_prompt(requests)

    positions = [prompt.index(f"Article #{i}:") for i in range(1, 4)]
    assert positions == sorted(positions)
    assert "exactly 3 objects" in prompt
    assert "Text: Text of article 2" in prompt


def test_batch_prompt_truncates_each_article():
    requests = [_request(1, text="Q" * 20000), _request(2, text="short")]

    prompt = build_batch_prompt(requests)

    assert "Q" * 15000 in prompt
    assert "Q" * 15001 not in prompt


def test_taxonomy_includes_fallback_category():
    assert "Miscellaneous" in ALL_CATEGORIES
    assert "Artificial Intelligence" in ALL_CATEGORIES
