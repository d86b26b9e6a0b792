"""In-memory vector index with cosine-similarity search."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from pdfchat.errors import DimensionMismatchError, EmptyStoreError
from pdfchat.ingest.models import DocumentChunk
from pdfchat.telemetry import emit_vectorstore_event

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScoredChunk:
    """A stored chunk paired with its similarity to the query."""

    chunk: DocumentChunk
    score: float
    position: int


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors; 0.0 if either has zero norm."""

    if len(vec_a) != len(vec_b):
        raise DimensionMismatchError(len(vec_a), len(vec_b))
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(a, b) / norm)


class InMemoryVectorStore:
    """Ordered (chunk, embedding) pairs for a single document session.

    The embedding dimensionality is fixed by the first successful ``add``.
    """

    def __init__(self) -> None:
        self._chunks: List[DocumentChunk] = []
        self._vectors: List[np.ndarray] = []
        self._dimension: Optional[int] = None
        self._matrix: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self._chunks)

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    @property
    def chunks(self) -> List[DocumentChunk]:
        return list(self._chunks)

    def add(self, chunks: Sequence[DocumentChunk], embeddings: Sequence[Sequence[float]]) -> None:
        """Append chunks with their embeddings; the batch is rejected as a whole on error."""

        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Got {len(chunks)} chunks but {len(embeddings)} embeddings; they must match one-to-one"
            )
        if not chunks:
            return

        expected = self._dimension if self._dimension is not None else len(embeddings[0])
        if expected == 0:
            raise ValueError("Embeddings must have at least one dimension")
        for embedding in embeddings:
            if len(embedding) != expected:
                raise DimensionMismatchError(expected, len(embedding))

        self._dimension = expected
        self._chunks.extend(chunks)
        self._vectors.extend(np.asarray(embedding, dtype=np.float64) for embedding in embeddings)
        self._matrix = None
        emit_vectorstore_event("vectorstore.add", count=len(chunks), dimension=self._dimension)

    def query(self, query_embedding: Sequence[float], k: int) -> List[ScoredChunk]:
        """Return the *k* most similar entries, best first, ties in insertion order."""

        if k <= 0:
            raise ValueError("k must be a positive integer")
        if not self._chunks:
            raise EmptyStoreError()
        if len(query_embedding) != self._dimension:
            raise DimensionMismatchError(self._dimension or 0, len(query_embedding))

        scores = self._similarities(np.asarray(query_embedding, dtype=np.float64))
        order = np.argsort(-scores, kind="stable")[:k]
        return [
            ScoredChunk(chunk=self._chunks[index], score=float(scores[index]), position=int(index))
            for index in order
        ]

    def _similarities(self, query: np.ndarray) -> np.ndarray:
        if self._matrix is None:
            self._matrix = np.vstack(self._vectors)
        norms = np.linalg.norm(self._matrix, axis=1) * np.linalg.norm(query)
        dots = self._matrix @ query
        scores = np.zeros(len(self._chunks), dtype=np.float64)
        nonzero = norms > 0.0
        scores[nonzero] = dots[nonzero] / norms[nonzero]
        return scores


__all__ = ["InMemoryVectorStore", "ScoredChunk", "cosine_similarity"]
