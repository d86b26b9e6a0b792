"""Data models used by the ingestion pipeline."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PageContent:
    """Represents text extracted from a page in the source document."""

    page_number: int
    text: str
    char_offset: int


@dataclass(slots=True)
class ChunkMetadata:
    """Metadata attached to an individual chunk."""

    document_name: str
    chunk_index: int
    char_start: int
    char_end: int


@dataclass(slots=True)
class DocumentChunk:
    """Container that pairs chunk text with associated metadata."""

    content: str
    metadata: ChunkMetadata

    def to_dict(self) -> dict[str, object]:
        return {
            "content": self.content,
            "document_name": self.metadata.document_name,
            "chunk_index": self.metadata.chunk_index,
            "char_start": self.metadata.char_start,
            "char_end": self.metadata.char_end,
        }
