"""
Parsing and schema checks for model output.

Nothing in this module raises on bad model output: every check returns
``None`` when the output is unusable so the caller can decide whether to
retry.
"""

from __future__ import annotations

import json
from typing import Any

from ..core.types import SummaryPoint, SummaryResult
from .prompts import ALL_CATEGORIES, FALLBACK_CATEGORY, POINT_COUNT

_BRACKETS: dict[type, tuple[str, str]] = {dict: ("{", "}"), list: ("[", "]")}
_CATEGORY_LOOKUP = {category.lower(): category for category in ALL_CATEGORIES}
MIN_BULLETS = 2
MAX_BULLETS = 5


def parse_json_payload(content: str | None, expect: type = dict) -> Any | None:
    """Parse model output as JSON of the ``expect`` kind (dict or list).

    If the whole string does not parse, the span between the first opening
    and the last closing bracket of that kind is tried instead, which
    tolerates prose or markdown fences around the payload.
    """
    if not content:
        return None
    try:
        obj = json.loads(content)
    except json.JSONDecodeError:
        obj = _parse_snippet(content, expect)
    if not isinstance(obj, expect):
        return None
    return obj


def _parse_snippet(content: str, expect: type) -> Any | None:
    opening, closing = _BRACKETS[expect]
    start = content.find(opening)
    end = content.rfind(closing)
    if start == -1 or end == -1 or end <= start:
        return None
    try:
        return json.loads(content[start : end + 1])
    except json.JSONDecodeError:
        return None


def validate_summary(obj: Any) -> dict[str, Any] | None:
    """Return ``obj`` if it is a well-formed single-article summary, else None."""
    if not isinstance(obj, dict):
        return None
    if not _non_empty_str(obj.get("title")) or not _non_empty_str(obj.get("url")):
        return None
    points = obj.get("points")
    if not isinstance(points, list) or len(points) != POINT_COUNT:
        return None
    if not all(_valid_point(point) for point in points):
        return None
    return obj


def validate_batch(obj: Any, expected_count: int) -> list[dict[str, Any]] | None:
    """Return ``obj`` if it is a list of ``expected_count`` valid summaries, else None."""
    if not isinstance(obj, list) or len(obj) != expected_count:
        return None
    if not all(validate_summary(item) is not None for item in obj):
        return None
    return obj


def _valid_point(point: Any) -> bool:
    if not isinstance(point, dict):
        return False
    heading = point.get("heading")
    if not isinstance(heading, str) or not heading.strip():
        return False
    bullets = point.get("bullets")
    has_paragraph = _non_empty_str(point.get("paragraph"))
    if bullets:
        return not has_paragraph and _has_bullets(bullets)
    return has_paragraph


def _has_bullets(bullets: Any) -> bool:
    if not isinstance(bullets, list) or not MIN_BULLETS <= len(bullets) <= MAX_BULLETS:
        return False
    return all(_non_empty_str(bullet) for bullet in bullets)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_categories(raw: Any) -> list[str]:
    """Map model categories onto the taxonomy, dropping unknown ones."""
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raw = []
    categories: list[str] = []
    for value in raw:
        if not isinstance(value, str):
            continue
        match = _CATEGORY_LOOKUP.get(value.strip().lower())
        if match and match not in categories:
            categories.append(match)
    if len(categories) > 1 and FALLBACK_CATEGORY in categories:
        categories.remove(FALLBACK_CATEGORY)
    return categories or [FALLBACK_CATEGORY]


def to_summary_result(obj: dict[str, Any], model_used: str) -> SummaryResult:
    """Build a SummaryResult from a dict that passed ``validate_summary``."""
    points = []
    for point in obj["points"]:
        if _has_bullets(point.get("bullets")):
            points.append(
                SummaryPoint(
                    heading=point["heading"].strip(),
                    bullets=[bullet.strip() for bullet in point["bullets"]],
                )
            )
        else:
            points.append(
                SummaryPoint(heading=point["heading"].strip(), paragraph=point["paragraph"].strip())
            )
    author = obj.get("author")
    return SummaryResult(
        author=author.strip() if _non_empty_str(author) else None,
        title=obj["title"].strip(),
        url=obj["url"].strip(),
        points=points,
        categories=normalize_categories(obj.get("categories")),
        model_used=model_used,
    )
