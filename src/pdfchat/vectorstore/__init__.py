"""Vector store used to index the active document's chunks."""

from __future__ import annotations

from pdfchat.errors import DimensionMismatchError, EmptyStoreError, VectorStoreError

from .memory import InMemoryVectorStore, ScoredChunk, cosine_similarity

__all__ = [
    "DimensionMismatchError",
    "EmptyStoreError",
    "InMemoryVectorStore",
    "ScoredChunk",
    "VectorStoreError",
    "cosine_similarity",
]
