"""
Core domain models.

This package contains data types that are independent of any specific
pipeline stage.
"""

from .types import ExtractedArticle, SummaryPoint, SummaryRequest, SummaryResult

__all__ = [
    "ExtractedArticle",
    "SummaryRequest",
    "SummaryPoint",
    "SummaryResult",
]
