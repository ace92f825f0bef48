"""
Article fetching and extraction.

This package handles HTTP fetching and readable-content extraction
for a single article URL.
"""

from .extractor import extract_article, extract_from_html, strip_styles
from .fetcher import fetch_html

__all__ = [
    "extract_article",
    "extract_from_html",
    "fetch_html",
    "strip_styles",
]
