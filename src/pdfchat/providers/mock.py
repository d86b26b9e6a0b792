"""Deterministic offline providers for tests and local development."""
from __future__ import annotations

import hashlib
import random
from typing import List, Sequence

from .base import EmbeddingProvider, LLMProvider


class MockEmbeddingProvider(EmbeddingProvider):
    """Return deterministic embedding vectors derived from each text."""

    model_name = "mock-embedding"

    def __init__(self, dimension: int = 8) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be a positive integer")
        self.dimension = dimension
        self.calls: List[List[str]] = []

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        vectors: List[List[float]] = []
        for text in texts:
            seed = hashlib.sha256(text.encode("utf-8")).hexdigest()
            rng = random.Random(seed)
            vectors.append([(rng.random() * 2.0) - 1.0 for _ in range(self.dimension)])
        return vectors


class MockLLMProvider(LLMProvider):
    """Return a deterministic response for any prompt."""

    model_name = "mock-llm"

    def __init__(self) -> None:
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return f"MOCK_ANSWER: {prompt[-100:].strip()}"
