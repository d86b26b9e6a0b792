"""Reverse proxy that forwards model API calls with the server-side secret."""
from __future__ import annotations

import logging
import time
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from pdfchat.config import Settings, get_settings
from pdfchat.errors import ConfigurationError
from pdfchat.telemetry import emit_proxy_event

LOGGER = logging.getLogger(__name__)

FORWARDED_HEADERS = ("content-type", "accept", "user-agent")
_BODYLESS_METHODS = {"GET", "HEAD"}
_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

router = APIRouter(prefix="/api/v1", tags=["gateway"])

_UPSTREAM_CLIENT: Optional[httpx.AsyncClient] = None


def get_upstream_client() -> httpx.AsyncClient:
    """Return the shared client used to reach the upstream provider."""

    global _UPSTREAM_CLIENT
    if _UPSTREAM_CLIENT is None or _UPSTREAM_CLIENT.is_closed:
        timeout = get_settings().http_timeout
        _UPSTREAM_CLIENT = httpx.AsyncClient(timeout=timeout)
    return _UPSTREAM_CLIENT


async def close_upstream_client() -> None:
    global _UPSTREAM_CLIENT
    if _UPSTREAM_CLIENT is not None:
        await _UPSTREAM_CLIENT.aclose()
        _UPSTREAM_CLIENT = None


def _build_target(settings: Settings, path: str, query: str) -> str:
    base = settings.upstream_base_url.rstrip("/")
    target = f"{base}/{path.lstrip('/')}"
    if query:
        target = f"{target}?{query}"
    return target


def _forward_headers(request: Request, secret: str) -> dict[str, str]:
    headers: dict[str, str] = {}
    for name in FORWARDED_HEADERS:
        value = request.headers.get(name)
        if value is not None:
            headers[name] = value
    headers["authorization"] = f"Bearer {secret}"
    return headers


@router.api_route("/{path:path}", methods=_ALL_METHODS)
async def forward(
    path: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    """Relay the request to the upstream API with the provider secret attached."""

    started = time.perf_counter()
    method = request.method.upper()

    try:
        secret = settings.require_upstream_api_key()
    except ConfigurationError as exc:
        LOGGER.error("Gateway request rejected: %s", exc)
        return JSONResponse(status_code=500, content={"error": exc.message})

    if not path.strip("/"):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid route", "pathname": request.url.path},
        )

    target = _build_target(settings, path, request.url.query)
    content = None if method in _BODYLESS_METHODS else await request.body()
    upstream_request = client.build_request(
        method,
        target,
        headers=_forward_headers(request, secret),
        content=content,
    )

    try:
        upstream = await client.send(upstream_request, stream=True)
    except httpx.HTTPError as exc:
        LOGGER.error("Gateway could not reach %s: %s", target, exc)
        emit_proxy_event(
            method=method,
            path=path,
            status_code=500,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            upstream_error=str(exc),
        )
        return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})

    if not upstream.is_success:
        try:
            body = await upstream.aread()
        finally:
            await upstream.aclose()
        text = body.decode("utf-8", errors="replace")
        LOGGER.warning("Upstream returned HTTP %s for %s: %s", upstream.status_code, path, text[:500])
        emit_proxy_event(
            method=method,
            path=path,
            status_code=upstream.status_code,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            upstream_error=text,
        )
        return Response(content=body, status_code=upstream.status_code, media_type="application/json")

    emit_proxy_event(
        method=method,
        path=path,
        status_code=upstream.status_code,
        duration_ms=(time.perf_counter() - started) * 1000.0,
    )
    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
        background=BackgroundTask(upstream.aclose),
    )
