import asyncio
import logging
from typing import Any, Callable, TypeVar

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from pdfchat.api.chat import router as chat_router
from pdfchat.gateway import close_upstream_client
from pdfchat.gateway import router as gateway_router
from pdfchat.logging_config import configure_logging
from pdfchat.services.session import SessionController, get_session_controller
from pdfchat.telemetry import emit_app_startup_event, emit_exception

configure_logging()

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="PDF Chat API")
app.include_router(chat_router)
app.include_router(gateway_router)


T = TypeVar("T")


def _resolve_dependency(factory: Callable[[], T]) -> T:
    """Resolve a dependency while respecting FastAPI overrides."""

    override: Any | None = app.dependency_overrides.get(factory)
    resolved: Any = override if override is not None else factory
    return resolved() if callable(resolved) else resolved


async def _load_default_document(controller: SessionController) -> None:
    try:
        await controller.load_default_document()
    except Exception as exc:  # pragma: no cover - logged for the operator
        emit_exception(module=f"{__name__}._load_default_document", error=exc)


@app.on_event("startup")
async def _startup_default_document() -> None:
    """Index the default document in the background once the server is up.

    The load runs as a task because its embedding calls may go through
    this process's own gateway, which only answers after startup ends.
    """

    emit_app_startup_event()
    controller = _resolve_dependency(get_session_controller)
    app.state.default_document_task = asyncio.create_task(_load_default_document(controller))


@app.on_event("shutdown")
async def _shutdown_clients() -> None:
    task = getattr(app.state, "default_document_task", None)
    if task is not None and not task.done():
        task.cancel()
    controller = _resolve_dependency(get_session_controller)
    await controller.aclose()
    await close_upstream_client()


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pdfchat.main:app", host="0.0.0.0", port=8000)
