"""Generative backends."""

from .base import GenerativeBackend
from .gemini import GeminiBackend, create_backend

__all__ = ["GenerativeBackend", "GeminiBackend", "create_backend"]
