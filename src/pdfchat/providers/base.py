"""Base provider interfaces for embeddings and language models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

__all__ = ["EmbeddingProvider", "LLMProvider"]


class EmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    model_name: str = "unknown"

    @abstractmethod
    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Return one embedding per text, in input order."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""


class LLMProvider(ABC):
    """Abstract interface for chat-completion providers."""

    model_name: str = "unknown"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Generate a completion for the given prompt."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
