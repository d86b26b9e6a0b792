"""Document ingestion: PDF extraction, normalisation and chunking."""
from __future__ import annotations

from .chunking import ChunkingConfig, TextChunker
from .extractors import PAGE_SEPARATOR, PDFExtractionResult, PDFExtractor
from .models import ChunkMetadata, DocumentChunk, PageContent
from .normalization import normalize_text
from .pipeline import IngestedDocument, IngestPipeline, IngestPipelineConfig

__all__ = [
    "PAGE_SEPARATOR",
    "ChunkMetadata",
    "ChunkingConfig",
    "DocumentChunk",
    "IngestPipeline",
    "IngestPipelineConfig",
    "IngestedDocument",
    "PDFExtractionResult",
    "PDFExtractor",
    "PageContent",
    "TextChunker",
    "normalize_text",
]
