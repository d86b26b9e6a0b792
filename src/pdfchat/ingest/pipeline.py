"""High level ingestion pipeline entry point."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from pdfchat.errors import ExtractionError

from .chunking import ChunkingConfig, TextChunker
from .extractors import NO_TEXT_MESSAGE, PDFExtractor, PDFExtractionResult, join_pages
from .models import DocumentChunk, PageContent
from .normalization import normalize_text

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestPipelineConfig:
    chunk_chars: int = 1000
    overlap_chars: int = 200


@dataclass(slots=True)
class IngestedDocument:
    """Text and chunks produced for one document."""

    name: str
    pages: List[PageContent]
    text: str
    chunks: List[DocumentChunk] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def page_count(self) -> int:
        return len(self.pages)


class IngestPipeline:
    """Pipeline orchestrating PDF extraction, normalisation and chunking."""

    def __init__(
        self,
        config: Optional[IngestPipelineConfig] = None,
        *,
        extractor: Optional[PDFExtractor] = None,
    ) -> None:
        self.config = config or IngestPipelineConfig()
        self.extractor = extractor or PDFExtractor()
        self.chunker = TextChunker(
            ChunkingConfig(chunk_chars=self.config.chunk_chars, overlap_chars=self.config.overlap_chars)
        )

    def process(self, file_bytes: bytes, document_name: str) -> IngestedDocument:
        """Turn PDF bytes into ordered, embedding-ready chunks."""

        started = time.perf_counter()
        extraction: PDFExtractionResult = self.extractor.extract(file_bytes)
        pages = join_pages([normalize_text(page.text) for page in extraction.pages])
        text = PDFExtractionResult(pages=pages).text
        if not text.strip():
            raise ExtractionError(NO_TEXT_MESSAGE)

        chunks = self.chunker.chunk_document(text, document_name)
        LOGGER.info(
            "Generated %s chunks from %s page(s) of %s", len(chunks), len(pages), document_name
        )
        return IngestedDocument(
            name=document_name,
            pages=pages,
            text=text,
            chunks=chunks,
            duration_seconds=time.perf_counter() - started,
        )
