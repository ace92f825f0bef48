"""Prompt construction, output validation and resilient model invocation."""

from .prompts import build_batch_prompt, build_prompt
from .providers.base import GenerativeBackend
from .providers.gemini import GeminiBackend, create_backend
from .retry import ErrorKind, candidate_models, classify_error
from .summarizer import Summarizer, summarize_batch_with_gemini, summarize_with_gemini
from .validation import parse_json_payload, validate_batch, validate_summary

__all__ = [
    "ErrorKind",
    "GeminiBackend",
    "GenerativeBackend",
    "Summarizer",
    "build_batch_prompt",
    "build_prompt",
    "candidate_models",
    "classify_error",
    "create_backend",
    "parse_json_payload",
    "summarize_batch_with_gemini",
    "summarize_with_gemini",
    "validate_batch",
    "validate_summary",
]
