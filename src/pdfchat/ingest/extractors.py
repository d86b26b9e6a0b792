"""PDF text extraction backed by PyPDF2."""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import List

from PyPDF2 import PdfReader

from pdfchat.errors import ExtractionError

from .models import PageContent

LOGGER = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"
NO_TEXT_MESSAGE = "The PDF appears to be empty or contains no extractable text."


@dataclass(slots=True)
class PDFExtractionResult:
    pages: List[PageContent]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        """Page texts joined in page order with a paragraph break between pages."""

        return PAGE_SEPARATOR.join(page.text for page in self.pages)


def join_pages(texts: List[str]) -> List[PageContent]:
    """Assign page numbers and offsets within the joined document text."""

    pages: List[PageContent] = []
    char_offset = 0
    for index, text in enumerate(texts, start=1):
        pages.append(PageContent(page_number=index, text=text, char_offset=char_offset))
        char_offset += len(text) + len(PAGE_SEPARATOR)
    return pages


class PDFExtractor:
    """Extract page-ordered plain text from PDF bytes."""

    def extract(self, data: bytes) -> PDFExtractionResult:
        """Return the text of every page, failing when none of it is usable."""

        if not data:
            raise ExtractionError("The uploaded file is empty.")

        try:
            reader = PdfReader(io.BytesIO(data))
            raw_pages = list(reader.pages)
        except Exception as error:
            LOGGER.warning("PyPDF2 could not parse the document: %s", error)
            raise ExtractionError(f"The file is not a readable PDF: {error}", cause=error) from error

        texts: List[str] = []
        for index, page in enumerate(raw_pages, start=1):
            try:
                text = page.extract_text() or ""
            except Exception as error:  # pragma: no cover - depends on the PDF content streams
                LOGGER.warning("Failed to extract text from PDF page %s: %s", index, error)
                text = ""
            texts.append(text)

        result = PDFExtractionResult(pages=join_pages(texts))
        if not result.text.strip():
            LOGGER.info("PDF with %s page(s) has no text layer", result.page_count)
            raise ExtractionError(NO_TEXT_MESSAGE)

        LOGGER.debug("Extracted %s characters from %s page(s)", len(result.text), result.page_count)
        return result
