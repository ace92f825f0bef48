"""
Core data types for the article digest pipeline.

This module defines the data structures passed between pipeline stages:
- ExtractedArticle: Readable content pulled out of a fetched page
- SummaryRequest: Input to prompt construction for one article
- SummaryPoint: One heading with either bullets or a paragraph
- SummaryResult: Validated model output stamped with the model that produced it

Every value is created per call and handed to the caller; nothing here is
shared between pipeline invocations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ExtractedArticle:
    """Readable article content extracted from a web page.

    Attributes:
        title: Article headline as detected on the page (may be empty)
        excerpt: Short description from page metadata or the first paragraph
        text: Plain text with whitespace collapsed and trimmed; never empty
        image_url: Absolute URL of a representative image, if one was found
    """
    title: str
    excerpt: str | None
    text: str
    image_url: str | None = None


@dataclass(frozen=True)
class SummaryRequest:
    """Input for summarizing one article."""
    author: str | None
    title: str
    url: str
    text: str

    @classmethod
    def from_article(
        cls,
        url: str,
        article: ExtractedArticle,
        author: str | None = None,
    ) -> "SummaryRequest":
        return cls(author=author, title=article.title or url, url=url, text=article.text)


@dataclass
class SummaryPoint:
    """One summary point: a heading plus either bullets or a paragraph, never both."""
    heading: str
    bullets: list[str] | None = None
    paragraph: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"heading": self.heading}
        if self.bullets:
            data["bullets"] = list(self.bullets)
        if self.paragraph:
            data["paragraph"] = self.paragraph
        return data


@dataclass
class SummaryResult:
    """Schema-validated summary of an article.

    Attributes:
        author: Author name echoed by the model, if any
        title: Article title
        url: Article URL
        points: Exactly ten summary points
        categories: Categories from the fixed taxonomy, or ["Miscellaneous"]
        model_used: Name of the backend model whose response was accepted
    """
    author: str | None
    title: str
    url: str
    points: list[SummaryPoint]
    categories: list[str] = field(default_factory=list)
    model_used: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "author": self.author,
            "title": self.title,
            "url": self.url,
            "points": [point.to_dict() for point in self.points],
            "categories": list(self.categories),
            "model_used": self.model_used,
        }
