"""Clients for OpenAI-compatible embedding and chat endpoints.

Both clients talk to the gateway base URL (``PDFCHAT_API_BASE_URL``) so
the provider secret is only ever known to the gateway process.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, List, Optional, Sequence, Type

import httpx

from pdfchat.config import Settings
from pdfchat.errors import EmbeddingError, RemoteServiceError, SynthesisError
from pdfchat.telemetry import emit_embeddings_event, emit_inference_request, emit_inference_result

from .base import EmbeddingProvider, LLMProvider

LOGGER = logging.getLogger(__name__)


def describe_error_body(response: httpx.Response) -> str:
    """Pull a readable message out of an error response body."""

    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:500] if text else response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        message = error.get("message")
        if message:
            return str(message)
    if isinstance(error, str) and error:
        return error
    return response.reason_phrase or str(response.status_code)


class _OpenAICompatibleClient:
    """Shared HTTP plumbing for the embedding and chat clients."""

    error_class: Type[RemoteServiceError] = RemoteServiceError

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = settings.require_api_base_url()
        self._api_key = settings.api_key
        self._timeout = settings.http_timeout
        self._client = http_client
        self._owns_client = http_client is None

    def _headers(self) -> dict[str, str]:
        headers = {"content-type": "application/json", "accept": "application/json"}
        if self._api_key:
            headers["authorization"] = f"Bearer {self._api_key}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._client

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}/{path.lstrip('/')}"
        client = self._get_client()
        try:
            response = await client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as error:
            raise self.error_class(f"Request to {url} failed: {error}", cause=error) from error

        if response.status_code >= 400:
            message = describe_error_body(response)
            LOGGER.warning("Provider returned HTTP %s for %s: %s", response.status_code, path, message)
            raise self.error_class(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as error:
            raise self.error_class(
                f"Provider returned a non-JSON body for {path}",
                status_code=response.status_code,
                cause=error,
            ) from error
        if not isinstance(body, dict):
            raise self.error_class(
                f"Provider returned an unexpected payload for {path}",
                status_code=response.status_code,
            )
        return body

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class OpenAIEmbeddingClient(_OpenAICompatibleClient, EmbeddingProvider):
    """Embed texts through ``POST <base>/embeddings``."""

    error_class = EmbeddingError

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(settings, http_client=http_client)
        self.model_name = settings.embedding_model
        self.batch_size = max(1, settings.embedding_batch_size)

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        started = time.perf_counter()
        embeddings: List[List[float]] = []
        try:
            for offset in range(0, len(texts), self.batch_size):
                batch = list(texts[offset : offset + self.batch_size])
                embeddings.extend(await self._embed_batch(batch))
        except EmbeddingError as error:
            emit_embeddings_event(
                model=self.model_name,
                count=len(texts),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                errors=[str(error)],
            )
            raise

        emit_embeddings_event(
            model=self.model_name,
            count=len(texts),
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return embeddings

    async def _embed_batch(self, batch: List[str]) -> List[List[float]]:
        body = await self._post("embeddings", {"model": self.model_name, "input": batch})
        items = body.get("data")
        if not isinstance(items, list) or len(items) != len(batch):
            received = len(items) if isinstance(items, list) else 0
            raise EmbeddingError(
                f"Expected {len(batch)} embeddings from the provider, received {received}"
            )
        try:
            ordered = sorted(items, key=lambda item: int(item.get("index", 0)))
            return [[float(value) for value in item["embedding"]] for item in ordered]
        except (KeyError, TypeError, ValueError, AttributeError) as error:
            raise EmbeddingError(
                f"Malformed embedding payload from the provider: {error!r}", cause=error
            ) from error


class OpenAIChatClient(_OpenAICompatibleClient, LLMProvider):
    """Generate answers through ``POST <base>/chat/completions``."""

    error_class = SynthesisError

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(settings, http_client=http_client)
        self.model_name = settings.chat_model
        self.temperature = settings.temperature

    async def generate(self, prompt: str) -> str:
        req_id = uuid.uuid4().hex
        emit_inference_request(
            req_id=req_id,
            model=self.model_name,
            prompt_len=len(prompt),
            temperature=self.temperature,
            sources=[],
        )
        started = time.perf_counter()
        payload = {
            "model": self.model_name,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            body = await self._post("chat/completions", payload)
            answer = self._extract_answer(body)
        except SynthesisError as error:
            emit_inference_result(
                req_id=req_id,
                model=self.model_name,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                answer_preview="",
                error=error,
            )
            raise

        emit_inference_result(
            req_id=req_id,
            model=self.model_name,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            answer_preview=answer,
        )
        return answer

    @staticmethod
    def _extract_answer(body: dict[str, Any]) -> str:
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as error:
            raise SynthesisError("Provider response did not contain an answer", cause=error) from error
        if content is None:
            raise SynthesisError("Provider returned an empty answer")
        return str(content)
