"""API router exposing the single-document chat session."""
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from pdfchat.conversation import ConversationTurn
from pdfchat.errors import ConfigurationError, ExtractionError, PDFChatError, RemoteServiceError
from pdfchat.services.session import (
    AskResult,
    SessionController,
    SessionSnapshot,
    get_session_controller,
    user_message,
)
from pdfchat.vectorstore import ScoredChunk

LOGGER = logging.getLogger(__name__)

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}

router = APIRouter(prefix="/session", tags=["session"])


class AskRequest(BaseModel):
    """Request body accepted by the ask endpoint."""

    question: str = Field(..., description="Question about the loaded document.")


class TurnItem(BaseModel):
    role: str
    text: str


class SourceItem(BaseModel):
    """Chunk that was placed in the prompt for an answer."""

    content: str
    score: float
    metadata: dict[str, Any]


class SessionResponse(BaseModel):
    """Current state of the chat session."""

    state: str
    generation: int
    document_name: str | None
    chunk_count: int
    history: list[TurnItem]
    error: str | None = None


class AskResponse(BaseModel):
    """Response payload for the ask endpoint."""

    question: str
    answer: str | None
    error: str | None
    discarded: bool
    sources: list[SourceItem]
    history: list[TurnItem]


def _serialise_history(turns: list[ConversationTurn]) -> list[TurnItem]:
    return [TurnItem(**turn.to_dict()) for turn in turns]


def _serialise_sources(items: list[ScoredChunk]) -> list[SourceItem]:
    return [
        SourceItem(content=item.chunk.content, score=item.score, metadata=asdict(item.chunk.metadata))
        for item in items
    ]


def _snapshot_response(snapshot: SessionSnapshot) -> SessionResponse:
    return SessionResponse(
        state=snapshot.state.value,
        generation=snapshot.generation,
        document_name=snapshot.document_name,
        chunk_count=snapshot.chunk_count,
        history=_serialise_history(snapshot.history),
        error=snapshot.error,
    )


def _is_pdf(upload: UploadFile) -> bool:
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if content_type in PDF_CONTENT_TYPES:
        return True
    return (upload.filename or "").lower().endswith(".pdf")


@router.get("", response_model=SessionResponse)
async def read_session(
    controller: SessionController = Depends(get_session_controller),
) -> SessionResponse:
    """Return the current session state and conversation."""

    return _snapshot_response(controller.snapshot())


@router.post("/document", response_model=SessionResponse)
async def upload_document(
    file: UploadFile = File(...),
    controller: SessionController = Depends(get_session_controller),
) -> SessionResponse:
    """Replace the active document with the uploaded PDF."""

    if not _is_pdf(file):
        raise HTTPException(status_code=415, detail="Only PDF documents are supported")

    data = await file.read()
    name = file.filename or "document.pdf"
    try:
        result = await controller.load_document(data, name)
    except ExtractionError as exc:
        raise HTTPException(status_code=422, detail=user_message(exc)) from exc
    except RemoteServiceError as exc:
        raise HTTPException(status_code=502, detail=user_message(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=user_message(exc)) from exc
    except PDFChatError as exc:
        LOGGER.error("Indexing %s failed: %s", name, exc)
        raise HTTPException(status_code=500, detail=user_message(exc)) from exc

    if result.superseded:
        raise HTTPException(status_code=409, detail="A newer document was loaded while this one was processing")
    LOGGER.info("Loaded %s with %s chunk(s)", name, result.chunk_count)
    return _snapshot_response(controller.snapshot())


@router.post("/ask", response_model=AskResponse)
async def ask_question(
    request: AskRequest,
    controller: SessionController = Depends(get_session_controller),
) -> AskResponse:
    """Answer a question about the loaded document."""

    result: AskResult = await controller.ask(request.question)
    return AskResponse(
        question=result.question,
        answer=result.answer,
        error=result.error,
        discarded=result.discarded,
        sources=_serialise_sources(result.sources),
        history=_serialise_history(controller.history),
    )


@router.post("/clear", response_model=SessionResponse)
async def clear_conversation(
    controller: SessionController = Depends(get_session_controller),
) -> SessionResponse:
    """Forget the conversation but keep the loaded document."""

    controller.clear_history()
    return _snapshot_response(controller.snapshot())


@router.post("/reset", response_model=SessionResponse)
async def reset_session(
    controller: SessionController = Depends(get_session_controller),
) -> SessionResponse:
    """Drop the document, its index and the conversation."""

    controller.reset()
    return _snapshot_response(controller.snapshot())
