"""Structured lifecycle events emitted through the standard logging tree."""

from __future__ import annotations

import logging
import os
import platform
import sys
import traceback
from typing import Any, Iterable, Optional


LOGGER = logging.getLogger("pdfchat.telemetry")

_ENV_KEYS_TO_LOG: tuple[str, ...] = (
    "PDFCHAT_API_BASE_URL",
    "PDFCHAT_PROVIDER",
    "PDFCHAT_EMBEDDING_MODEL",
    "PDFCHAT_CHAT_MODEL",
    "PDFCHAT_CHUNK_CHARS",
    "PDFCHAT_CHUNK_OVERLAP",
    "PDFCHAT_TOP_K",
    "PDFCHAT_DEFAULT_DOCUMENT",
    "PDFCHAT_UPSTREAM_BASE_URL",
)


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    req_id: str | None = None,
    generation: int | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with a stable schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if req_id:
        event["req_id"] = req_id
    if generation is not None:
        event["generation"] = generation
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_app_startup_event() -> None:
    # OPENAI_API_KEY is deliberately absent from the logged keys.
    env_values = {key: os.getenv(key) for key in _ENV_KEYS_TO_LOG if os.getenv(key) is not None}
    details = {
        "env": env_values,
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "secret_configured": bool(os.getenv("OPENAI_API_KEY")),
    }
    log_event(LOGGER, "app.startup", details=details, pid=os.getpid())


def emit_ingest_event(
    step: str,
    *,
    document_name: str,
    generation: int,
    size_bytes: int | None = None,
    duration_ms: float | None = None,
    pages: int | None = None,
    chunks: int | None = None,
    error: BaseException | None = None,
) -> None:
    details = {
        "document": document_name,
        "size_bytes": size_bytes,
        "pages": pages,
        "chunks": chunks,
    }
    level = "error" if error else "info"
    log_event(
        LOGGER,
        step,
        level=level,
        generation=generation,
        duration_ms=duration_ms,
        details=details,
        exc=error,
    )


def emit_embeddings_event(
    *,
    model: str,
    count: int,
    duration_ms: float,
    errors: list[str] | None = None,
) -> None:
    details = {
        "model": model,
        "count": count,
        "errors": errors or [],
        "per_item_ms": round(duration_ms / count, 3) if count else None,
    }
    log_event(LOGGER, "embeddings.compute", duration_ms=duration_ms, details=details)


def emit_vectorstore_event(step: str, *, count: int, dimension: int | None) -> None:
    log_event(LOGGER, step, details={"count": count, "dimension": dimension})


def emit_retriever_event(
    *,
    query: str,
    top_k: int,
    results: list[dict[str, Any]],
    duration_ms: float,
) -> None:
    details = {
        "query_preview": query[:120],
        "top_k": top_k,
        "results": results,
    }
    log_event(LOGGER, "retriever.search", duration_ms=duration_ms, details=details)


def emit_inference_request(
    *,
    req_id: str,
    model: str,
    prompt_len: int,
    temperature: float,
    sources: Iterable[int],
) -> None:
    details = {
        "model": model,
        "prompt_len": prompt_len,
        "temperature": temperature,
        "sources": list(sources),
    }
    log_event(LOGGER, "inference.request", req_id=req_id, details=details)


def emit_inference_result(
    *,
    req_id: str,
    model: str,
    duration_ms: float,
    answer_preview: str,
    error: BaseException | None = None,
) -> None:
    details = {"model": model, "answer_preview": answer_preview[:120]}
    level = "error" if error else "info"
    log_event(
        LOGGER,
        "inference.result",
        level=level,
        req_id=req_id,
        duration_ms=duration_ms,
        details=details,
        exc=error,
    )


def emit_proxy_event(
    *,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    upstream_error: str | None = None,
) -> None:
    details = {"method": method, "path": path, "status_code": status_code}
    if upstream_error is not None:
        details["upstream_error"] = upstream_error[:500]
    level = "warning" if status_code >= 400 else "info"
    log_event(LOGGER, "gateway.forward", level=level, duration_ms=duration_ms, details=details)


def emit_exception(
    *,
    module: str,
    error: BaseException,
    generation: int | None = None,
    suggestion: str | None = None,
) -> None:
    details = {"module": module}
    if suggestion:
        details["suggestion"] = suggestion
    log_event(
        LOGGER,
        "exception",
        level="error",
        generation=generation,
        details=details,
        exc=error,
    )


__all__ = [
    "emit_app_startup_event",
    "emit_embeddings_event",
    "emit_exception",
    "emit_inference_request",
    "emit_inference_result",
    "emit_ingest_event",
    "emit_proxy_event",
    "emit_retriever_event",
    "emit_vectorstore_event",
    "log_event",
]
