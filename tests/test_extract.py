import pytest

from pdfchat.errors import ExtractionError
from pdfchat.ingest import IngestPipeline, IngestPipelineConfig
from pdfchat.ingest.extractors import NO_TEXT_MESSAGE, PAGE_SEPARATOR, PDFExtractor, join_pages


def test_extracts_text_from_every_page(pdf_factory):
    data = pdf_factory(["First page text", "Second page text"])

    result = PDFExtractor().extract(data)

    assert result.page_count == 2
    assert "First page text" in result.pages[0].text
    assert "Second page text" in result.pages[1].text
    assert result.text.index("First page") < result.text.index("Second page")


def test_page_offsets_follow_separator():
    pages = join_pages(["abc", "de"])

    assert [page.page_number for page in pages] == [1, 2]
    assert pages[1].char_offset == 3 + len(PAGE_SEPARATOR)


def test_garbage_bytes_raise_extraction_error():
    with pytest.raises(ExtractionError):
        PDFExtractor().extract(b"this is definitely not a pdf")


def test_empty_upload_raises_extraction_error():
    with pytest.raises(ExtractionError):
        PDFExtractor().extract(b"")


def test_pdf_without_text_layer_is_rejected(pdf_factory):
    with pytest.raises(ExtractionError) as excinfo:
        PDFExtractor().extract(pdf_factory(["", ""]))

    assert str(excinfo.value) == NO_TEXT_MESSAGE


def test_pipeline_produces_named_chunks(pdf_factory):
    lines = "\n".join(f"Line number {index} of the contract." for index in range(12))
    pipeline = IngestPipeline(IngestPipelineConfig(chunk_chars=120, overlap_chars=20))

    document = pipeline.process(pdf_factory([lines, "Closing remarks."]), "contract.pdf")

    assert document.page_count == 2
    assert len(document.chunks) > 1
    assert all(chunk.metadata.document_name == "contract.pdf" for chunk in document.chunks)
    assert all(len(chunk.content) <= 120 for chunk in document.chunks)
    assert "Closing remarks." in document.chunks[-1].content
    for chunk in document.chunks:
        assert document.text[chunk.metadata.char_start : chunk.metadata.char_end] == chunk.content
