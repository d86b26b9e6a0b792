"""Shared fixtures: in-memory PDFs, offline settings and mock HTTP transports."""
from __future__ import annotations

from typing import Callable, Iterable, List, Sequence

import httpx
import pytest

from pdfchat.config import PROVIDER_MOCK, Settings
from pdfchat.providers.mock import MockEmbeddingProvider, MockLLMProvider


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _content_stream(lines: Sequence[str]) -> bytes:
    if not lines:
        return b""
    operations = ["BT", "/F1 12 Tf", "72 720 Td"]
    for index, line in enumerate(lines):
        if index:
            operations.append("0 -16 Td")
        operations.append(f"({_escape_pdf_text(line)}) Tj")
    operations.append("ET")
    return "\n".join(operations).encode("latin-1")


def make_pdf(pages: Iterable[str]) -> bytes:
    """Build a minimal PDF with one Helvetica text line per input line.

    Each entry of *pages* becomes a page; newlines inside an entry start a
    new text line. An empty entry yields a page without a text layer.
    """

    page_lines: List[List[str]] = [[line for line in page.split("\n") if line] for page in pages]
    page_count = len(page_lines)
    font_id = 3
    first_page_id = 4

    objects: List[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"",  # page tree, filled in below
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    kids = []
    for index, lines in enumerate(page_lines):
        page_id = first_page_id + index * 2
        content_id = page_id + 1
        kids.append(f"{page_id} 0 R")
        stream = _content_stream(lines)
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {content_id} 0 R >>"
            ).encode("latin-1")
        )
        objects.append(
            f"<< /Length {len(stream)} >>\nstream\n".encode("latin-1") + stream + b"\nendstream"
        )
    objects[1] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {page_count} >>".encode("latin-1")

    output = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(output))
        output += f"{number} 0 obj\n".encode("latin-1") + body + b"\nendobj\n"

    xref_offset = len(output)
    output += f"xref\n0 {len(objects) + 1}\n".encode("latin-1")
    output += b"0000000000 65535 f \n"
    for offset in offsets:
        output += f"{offset:010d} 00000 n \n".encode("latin-1")
    output += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n"
    ).encode("latin-1")
    return bytes(output)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def pdf_factory() -> Callable[[Iterable[str]], bytes]:
    return make_pdf


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base_url="http://gateway.test/api/v1",
        api_key="client-token",
        provider=PROVIDER_MOCK,
        chunk_chars=200,
        chunk_overlap=40,
        top_k=3,
        default_document=None,
        upstream_base_url="https://upstream.test/v1",
        upstream_api_key="sk-test-secret",
    )


@pytest.fixture
def embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider(dimension=8)


@pytest.fixture
def llm() -> MockLLMProvider:
    return MockLLMProvider()


@pytest.fixture
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Return a factory for ``httpx.AsyncClient`` instances backed by a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
