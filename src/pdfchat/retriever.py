"""Utilities for retrieving relevant context from the vector store."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional

from pdfchat.errors import EmbeddingError
from pdfchat.providers.base import EmbeddingProvider
from pdfchat.telemetry import emit_retriever_event
from pdfchat.vectorstore import InMemoryVectorStore, ScoredChunk

DEFAULT_TOP_K = 4


@dataclass(slots=True)
class RetrievalResult:
    """Chunks most similar to a question, best first."""

    question: str
    items: List[ScoredChunk] = field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [item.chunk.content for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


class Retriever:
    """Embed a question once and look up its nearest chunks."""

    def __init__(
        self,
        vector_store: InMemoryVectorStore,
        embedding_provider: EmbeddingProvider,
        *,
        default_k: int = DEFAULT_TOP_K,
    ) -> None:
        if default_k <= 0:
            raise ValueError("default_k must be a positive integer")
        self._vector_store = vector_store
        self._embedding_provider = embedding_provider
        self.default_k = default_k

    async def retrieve(self, question: str, k: Optional[int] = None) -> RetrievalResult:
        """Return the top matching chunks for the supplied question."""

        top_k = self.default_k if k is None else k
        started = time.perf_counter()
        embeddings = await self._embedding_provider.embed([question])
        if len(embeddings) != 1:
            raise EmbeddingError(f"Expected 1 query embedding, received {len(embeddings)}")

        items = self._vector_store.query(embeddings[0], top_k)
        emit_retriever_event(
            query=question,
            top_k=top_k,
            results=[{"chunk_index": item.chunk.metadata.chunk_index, "score": item.score} for item in items],
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return RetrievalResult(question=question, items=items)
