"""Session controller: document ingestion and question answering for one user."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import List, Optional

import httpx

from pdfchat.config import Settings, get_settings
from pdfchat.conversation import ConversationHistory, ConversationTurn
from pdfchat.errors import (
    ConfigurationError,
    EmptyStoreError,
    ExtractionError,
    PDFChatError,
    RemoteServiceError,
)
from pdfchat.ingest import IngestPipeline, IngestPipelineConfig
from pdfchat.ingest.extractors import NO_TEXT_MESSAGE
from pdfchat.logging_config import AUDIT_LOGGER_NAME
from pdfchat.providers import create_providers
from pdfchat.providers.base import EmbeddingProvider, LLMProvider
from pdfchat.retriever import Retriever
from pdfchat.synthesizer import AnswerSynthesizer
from pdfchat.telemetry import emit_exception, emit_ingest_event
from pdfchat.vectorstore import InMemoryVectorStore, ScoredChunk

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)

PROVIDER_ERROR_PREFIX = "There was a problem contacting the model provider."
EMPTY_STORE_MESSAGE = "No document is loaded yet. Upload a PDF before asking questions."
EMPTY_QUESTION_MESSAGE = "Please enter a question."


class SessionState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    QUERYING = "querying"
    ERROR = "error"


@dataclass(slots=True)
class LoadResult:
    document_name: str
    generation: int
    page_count: int = 0
    chunk_count: int = 0
    duration_seconds: float = 0.0
    superseded: bool = False


@dataclass(slots=True)
class AskResult:
    question: str
    answer: Optional[str] = None
    error: Optional[str] = None
    discarded: bool = False
    sources: List[ScoredChunk] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.answer is not None and self.error is None and not self.discarded


@dataclass(slots=True)
class SessionSnapshot:
    state: SessionState
    generation: int
    document_name: Optional[str]
    chunk_count: int
    history: List[ConversationTurn]
    error: Optional[str]


def user_message(error: BaseException) -> str:
    """Translate an error into the message shown next to the conversation."""

    if isinstance(error, EmptyStoreError):
        return EMPTY_STORE_MESSAGE
    if isinstance(error, RemoteServiceError):
        if error.status_code == 401:
            return f"{PROVIDER_ERROR_PREFIX} (Error 401: invalid or missing API key)"
        if error.status_code == 429:
            return f"{PROVIDER_ERROR_PREFIX} (Error 429: quota exceeded)"
        if error.status_code == 500:
            return f"{PROVIDER_ERROR_PREFIX} (Error 500: internal gateway error)"
        return f"{PROVIDER_ERROR_PREFIX} Detail: {error}"
    return str(error) or error.__class__.__name__


class SessionController:
    """Own the active vector store and conversation history of a session.

    Every document load starts a new store generation. Questions record
    the generation they were asked against, and an answer that arrives
    after the generation has moved on is dropped instead of being added
    to the new document's history. Loads never wait for questions.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        embedding_provider: EmbeddingProvider,
        llm: LLMProvider,
        pipeline: Optional[IngestPipeline] = None,
    ) -> None:
        self.settings = settings
        self._embedding_provider = embedding_provider
        self._llm = llm
        self._synthesizer = AnswerSynthesizer(llm)
        self._pipeline = pipeline or IngestPipeline(
            IngestPipelineConfig(
                chunk_chars=settings.chunk_chars,
                overlap_chars=settings.chunk_overlap,
            )
        )
        self._history = ConversationHistory()
        self._store: Optional[InMemoryVectorStore] = None
        self._retriever: Optional[Retriever] = None
        self._document_name: Optional[str] = None
        self._state = SessionState.EMPTY
        self._generation = 0
        self._history_epoch = 0
        self._last_error: Optional[str] = None
        self._ask_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "SessionController":
        embedding_provider, llm = create_providers(settings, http_client=http_client)
        return cls(settings, embedding_provider=embedding_provider, llm=llm)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def store(self) -> Optional[InMemoryVectorStore]:
        return self._store

    @property
    def history(self) -> List[ConversationTurn]:
        return self._history.turns()

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            generation=self._generation,
            document_name=self._document_name,
            chunk_count=len(self._store) if self._store is not None else 0,
            history=self._history.turns(),
            error=self._last_error,
        )

    def _start_generation(self) -> int:
        self._generation += 1
        self._history_epoch += 1
        self._store = None
        self._retriever = None
        self._history.clear()
        self._last_error = None
        return self._generation

    async def load_document(self, data: bytes, name: str) -> LoadResult:
        """Replace the active document; raises when the document cannot be indexed."""

        generation = self._start_generation()
        self._document_name = name
        self._state = SessionState.LOADING
        emit_ingest_event(
            "ingest.document.start",
            document_name=name,
            generation=generation,
            size_bytes=len(data),
        )
        started = time.perf_counter()

        try:
            document = await asyncio.to_thread(self._pipeline.process, data, name)
            if not document.chunks:
                raise ExtractionError(NO_TEXT_MESSAGE)
            embeddings = await self._embedding_provider.embed(
                [chunk.content for chunk in document.chunks]
            )
            store = InMemoryVectorStore()
            store.add(document.chunks, embeddings)
        except Exception as error:
            if generation != self._generation:
                LOGGER.info("Discarding failure of superseded load %s: %s", generation, error)
                return LoadResult(document_name=name, generation=generation, superseded=True)
            self._store = None
            self._retriever = None
            self._state = SessionState.ERROR
            self._last_error = user_message(error)
            emit_ingest_event(
                "ingest.document.error",
                document_name=name,
                generation=generation,
                size_bytes=len(data),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                error=error,
            )
            raise

        duration = time.perf_counter() - started
        if generation != self._generation:
            LOGGER.info("Load of %s (generation %s) was superseded; discarding it", name, generation)
            return LoadResult(
                document_name=name,
                generation=generation,
                page_count=document.page_count,
                chunk_count=len(document.chunks),
                duration_seconds=duration,
                superseded=True,
            )

        self._store = store
        self._retriever = Retriever(store, self._embedding_provider, default_k=self.settings.top_k)
        self._state = SessionState.READY
        emit_ingest_event(
            "ingest.document.complete",
            document_name=name,
            generation=generation,
            size_bytes=len(data),
            duration_ms=duration * 1000.0,
            pages=document.page_count,
            chunks=len(document.chunks),
        )
        AUDIT_LOGGER.info(
            {
                "event": "load_document",
                "generation": generation,
                "document_name": name,
                "chunk_count": len(document.chunks),
            }
        )
        return LoadResult(
            document_name=name,
            generation=generation,
            page_count=document.page_count,
            chunk_count=len(document.chunks),
            duration_seconds=duration,
        )

    async def load_default_document(self) -> Optional[LoadResult]:
        """Load the configured default PDF when it exists; otherwise stay empty."""

        path = self.settings.default_document
        if path is None or not path.is_file():
            LOGGER.info("No default document found at %s; waiting for an upload", path)
            return None
        try:
            return await self.load_document(path.read_bytes(), path.name)
        except PDFChatError as error:
            LOGGER.warning("Default document %s could not be loaded: %s", path, error)
            return None

    async def ask(self, question: str) -> AskResult:
        """Answer a question about the active document.

        Failures are reported on the result rather than raised; the user
        turn stays in the history without an assistant reply.
        """

        question = (question or "").strip()
        if not question:
            return AskResult(question=question, error=EMPTY_QUESTION_MESSAGE)

        async with self._ask_lock:
            generation = self._generation
            epoch = self._history_epoch
            retriever = self._retriever
            if retriever is None:
                return AskResult(question=question, error=user_message(EmptyStoreError()))

            prior_history = self._history.turns()
            self._history.append_user(question)
            self._state = SessionState.QUERYING
            self._last_error = None
            try:
                retrieval = await retriever.retrieve(question)
                answer = await self._synthesizer.synthesize(question, retrieval, prior_history)
            except PDFChatError as error:
                if generation != self._generation:
                    LOGGER.info("Dropping failed answer for superseded generation %s", generation)
                    return AskResult(question=question, discarded=True)
                message = user_message(error)
                self._last_error = message
                self._state = SessionState.READY
                if isinstance(error, ConfigurationError):
                    LOGGER.error("Configuration problem while answering: %s", error)
                emit_exception(module=f"{__name__}.ask", error=error, generation=generation)
                return AskResult(question=question, error=message)
            except Exception:
                if generation == self._generation:
                    self._state = SessionState.READY
                raise

            if generation != self._generation or epoch != self._history_epoch:
                LOGGER.info("Answer for generation %s arrived after the conversation changed; dropped", generation)
                if generation == self._generation:
                    self._state = SessionState.READY
                return AskResult(question=question, discarded=True)

            self._history.append_assistant(answer)
            self._state = SessionState.READY
            AUDIT_LOGGER.info(
                {
                    "event": "ask",
                    "generation": generation,
                    "question": question,
                    "sources": [item.chunk.metadata.chunk_index for item in retrieval.items],
                }
            )
            return AskResult(question=question, answer=answer, sources=list(retrieval.items))

    def clear_history(self) -> None:
        """Forget the conversation but keep the indexed document."""

        self._history_epoch += 1
        self._history.clear()
        self._last_error = None

    def reset(self) -> None:
        """Drop the document, its index and the conversation."""

        self._start_generation()
        self._document_name = None
        self._state = SessionState.EMPTY

    async def aclose(self) -> None:
        await self._embedding_provider.aclose()
        await self._llm.aclose()


@lru_cache()
def get_session_controller() -> SessionController:
    """FastAPI dependency returning the shared :class:`SessionController`."""

    return SessionController.from_settings(get_settings())


def reset_session_controller_cache() -> None:
    """Clear the cached controller (primarily for testing)."""

    get_session_controller.cache_clear()  # type: ignore[attr-defined]
