"""Abstract interface for generative text backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class GenerativeBackend(ABC):
    """Backend that turns one prompt into one text response."""

    name: str = "backend"

    @abstractmethod
    async def generate(self, model: str, prompt: str) -> str:
        """Return the raw text produced by ``model`` for ``prompt``.

        Implementations raise ``BackendError`` (or a subclass) on failure.
        """
        raise NotImplementedError
