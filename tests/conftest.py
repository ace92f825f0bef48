"""Shared fixtures for article digest tests."""

from __future__ import annotations

import json

import pytest


def make_point(idx: int) -> dict:
    if idx % 2:
        return {"heading": f"Point {idx}", "paragraph": f"Paragraph for point {idx}."}
    return {"heading": f"Point {idx}", "bullets": [f"Fact {idx}a", f"Fact {idx}b"]}


def make_summary(url: str = "https://example.com/story", title: str = "Story", points: int = 10) -> dict:
    return {
        "author": "Jane Reporter",
        "title": title,
        "url": url,
        "points": [make_point(i) for i in range(points)],
        "categories": ["Machine Learning", "Journalism"],
    }


@pytest.fixture
def summary_payload() -> dict:
    return make_summary()


@pytest.fixture
def summary_json(summary_payload) -> str:
    return json.dumps(summary_payload)
