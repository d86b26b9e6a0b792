"""Embedding and chat providers."""
from __future__ import annotations

from typing import Optional, Tuple

import httpx

from pdfchat.config import PROVIDER_MOCK, PROVIDER_OPENAI, Settings

from .base import EmbeddingProvider, LLMProvider
from .mock import MockEmbeddingProvider, MockLLMProvider
from .openai_compat import OpenAIChatClient, OpenAIEmbeddingClient


def create_providers(
    settings: Settings,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Tuple[EmbeddingProvider, LLMProvider]:
    """Return the embedding and chat providers selected by ``settings.provider``."""

    if settings.provider == PROVIDER_MOCK:
        return MockEmbeddingProvider(), MockLLMProvider()
    if settings.provider == PROVIDER_OPENAI:
        return (
            OpenAIEmbeddingClient(settings, http_client=http_client),
            OpenAIChatClient(settings, http_client=http_client),
        )
    raise ValueError(f"Unsupported PDFCHAT_PROVIDER: {settings.provider!r}")


__all__ = [
    "EmbeddingProvider",
    "LLMProvider",
    "MockEmbeddingProvider",
    "MockLLMProvider",
    "OpenAIChatClient",
    "OpenAIEmbeddingClient",
    "create_providers",
]
