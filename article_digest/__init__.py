"""
Article Digest - readable-content extraction and resilient Gemini summarization.

This package fetches a web article, extracts its readable text and a
representative image, and produces a schema-validated ten-point summary
through Gemini with retry, backoff and model fallback.

Example:
    $ article-digest summarize https://example.com/story
"""

__all__ = [
    "__version__",
    "ExtractedArticle",
    "SummaryRequest",
    "SummaryResult",
    "Summarizer",
    "extract_article",
    "summarize_with_gemini",
    "summarize_batch_with_gemini",
]
__version__ = "0.1.0"

from .core.types import ExtractedArticle, SummaryRequest, SummaryResult
from .fetch.extractor import extract_article
from .llm.summarizer import Summarizer, summarize_batch_with_gemini, summarize_with_gemini
