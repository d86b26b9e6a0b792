"""Chunking utilities for breaking text into embedding-friendly units."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

from .models import ChunkMetadata, DocumentChunk

_SENTENCE_END_RE = re.compile(r"[.!?](?=\s)")
_WHITESPACE_RE = re.compile(r"\s")
LOGGER = logging.getLogger(__name__)

Span = Tuple[str, int, int]


@dataclass(slots=True)
class ChunkingConfig:
    chunk_chars: int = 1000
    overlap_chars: int = 200

    def validate(self) -> None:
        if self.chunk_chars <= 0:
            raise ValueError("chunk_chars must be a positive integer")
        if self.overlap_chars < 0:
            raise ValueError("overlap_chars must be a non-negative integer")
        if self.overlap_chars >= self.chunk_chars:
            raise ValueError("overlap_chars must be smaller than chunk_chars")


class TextChunker:
    """Split text into overlapping chunks, preferring natural boundaries.

    A window of ``chunk_chars`` characters is cut at the last paragraph
    break, then sentence end, then whitespace it contains; a hard cut is
    used when the window has none of those far enough from its start.
    Each following window starts ``overlap_chars`` before the end of the
    previous chunk. Chunks are stripped of surrounding whitespace, so the
    effective overlap shrinks when the overlap window begins with spaces.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self.config = config or ChunkingConfig()
        self.config.validate()

    def chunk_document(self, text: str, document_name: str) -> List[DocumentChunk]:
        chunks: List[DocumentChunk] = []
        for index, (content, start, end) in enumerate(self.chunk_text(text)):
            metadata = ChunkMetadata(
                document_name=document_name,
                chunk_index=index,
                char_start=start,
                char_end=end,
            )
            LOGGER.debug("Chunk %s offsets %s-%s", index, start, end)
            chunks.append(DocumentChunk(content=content, metadata=metadata))
        return chunks

    def chunk_text(self, text: str) -> List[Span]:
        """Return ``(chunk, start, end)`` triples covering *text* in order."""

        if not text:
            return []
        chunk_chars = self.config.chunk_chars
        overlap_chars = self.config.overlap_chars
        text_length = len(text)
        spans: List[Span] = []
        start = 0
        while start < text_length:
            window_end = min(start + chunk_chars, text_length)
            if window_end >= text_length:
                chunk_end = text_length
            else:
                chunk_end = self._find_break(text, start, window_end)

            raw_chunk = text[start:chunk_end]
            stripped_chunk = raw_chunk.strip()
            if not stripped_chunk:
                start = chunk_end
                continue
            leading_ws = len(raw_chunk) - len(raw_chunk.lstrip())
            trailing_ws = len(raw_chunk) - len(raw_chunk.rstrip())
            final_start = start + leading_ws
            final_end = chunk_end - trailing_ws
            spans.append((stripped_chunk, final_start, final_end))
            if chunk_end >= text_length:
                break

            next_start = final_end - overlap_chars
            if next_start <= final_start:
                next_start = chunk_end
            start = next_start
        return spans

    def _find_break(self, text: str, start: int, window_end: int) -> int:
        # One character of lookahead lets a window that stops right before
        # whitespace count as ending on a boundary.
        segment_length = window_end - start
        probe = text[start : window_end + 1]
        chunk_chars = self.config.chunk_chars

        paragraph_break = probe.rfind("\n\n")
        if paragraph_break != -1 and paragraph_break >= max(1, chunk_chars // 3):
            return start + paragraph_break

        sentence_break = self._last_sentence_break(probe, segment_length)
        if sentence_break is not None and sentence_break >= max(1, chunk_chars // 4):
            return start + sentence_break

        word_break = self._last_whitespace(probe)
        if word_break is not None and word_break >= max(1, chunk_chars // 4):
            return start + word_break

        return window_end

    @staticmethod
    def _last_sentence_break(probe: str, limit: int) -> int | None:
        position = None
        for match in _SENTENCE_END_RE.finditer(probe):
            if match.end() <= limit:
                position = match.end()
        return position

    @staticmethod
    def _last_whitespace(probe: str) -> int | None:
        position = None
        for match in _WHITESPACE_RE.finditer(probe):
            position = match.start()
        return position
