"""Runtime configuration resolved from environment variables."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from pdfchat.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://127.0.0.1:8000/api/v1"
DEFAULT_UPSTREAM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_DOCUMENT = "documento.pdf"

PROVIDER_OPENAI = "openai"
PROVIDER_MOCK = "mock"


def _load_dotenv(env_file: Path | None = None) -> None:
    if env_file is not None and env_file.exists():
        load_dotenv(dotenv_path=env_file)
    else:
        load_dotenv()


def _str_from_env(name: str, default: str | None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


@dataclass(slots=True)
class Settings:
    """Explicit configuration handed to the session controller and the gateway."""

    api_base_url: str = DEFAULT_API_BASE_URL
    api_key: Optional[str] = None
    provider: str = PROVIDER_OPENAI
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_batch_size: int = 512
    chat_model: str = DEFAULT_CHAT_MODEL
    temperature: float = 0.3
    chunk_chars: int = 1000
    chunk_overlap: int = 200
    top_k: int = 4
    http_timeout: float = 60.0
    default_document: Optional[Path] = Path(DEFAULT_DOCUMENT)
    upstream_base_url: str = DEFAULT_UPSTREAM_BASE_URL
    upstream_api_key: Optional[str] = None

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        """Build settings from the process environment (and an optional ``.env`` file)."""

        _load_dotenv(env_file)
        default_document = _str_from_env("PDFCHAT_DEFAULT_DOCUMENT", DEFAULT_DOCUMENT)
        provider = (_str_from_env("PDFCHAT_PROVIDER", PROVIDER_OPENAI) or PROVIDER_OPENAI).lower()
        return cls(
            api_base_url=_str_from_env("PDFCHAT_API_BASE_URL", DEFAULT_API_BASE_URL) or "",
            api_key=_str_from_env("PDFCHAT_API_KEY", None),
            provider=provider,
            embedding_model=_str_from_env("PDFCHAT_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL)
            or DEFAULT_EMBEDDING_MODEL,
            embedding_batch_size=_int_from_env("PDFCHAT_EMBEDDING_BATCH_SIZE", 512),
            chat_model=_str_from_env("PDFCHAT_CHAT_MODEL", DEFAULT_CHAT_MODEL) or DEFAULT_CHAT_MODEL,
            temperature=_float_from_env("PDFCHAT_TEMPERATURE", 0.3),
            chunk_chars=_int_from_env("PDFCHAT_CHUNK_CHARS", 1000),
            chunk_overlap=_int_from_env("PDFCHAT_CHUNK_OVERLAP", 200),
            top_k=_int_from_env("PDFCHAT_TOP_K", 4),
            http_timeout=_float_from_env("PDFCHAT_HTTP_TIMEOUT", 60.0),
            default_document=Path(default_document) if default_document else None,
            upstream_base_url=_str_from_env("PDFCHAT_UPSTREAM_BASE_URL", DEFAULT_UPSTREAM_BASE_URL)
            or DEFAULT_UPSTREAM_BASE_URL,
            upstream_api_key=_str_from_env("OPENAI_API_KEY", None),
        )

    def require_api_base_url(self) -> str:
        """Return the gateway base URL without a trailing slash."""

        if not self.api_base_url or not self.api_base_url.strip():
            raise ConfigurationError(
                "PDFCHAT_API_BASE_URL is not configured; remote model calls are unavailable."
            )
        return self.api_base_url.strip().rstrip("/")

    def require_upstream_api_key(self) -> str:
        """Return the provider secret used by the gateway."""

        if not self.upstream_api_key:
            raise ConfigurationError("The OPENAI_API_KEY variable is not configured on the server.")
        return self.upstream_api_key


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings (FastAPI dependency)."""

    return Settings.from_env()


def reset_settings_cache() -> None:
    """Clear the cached settings (primarily for testing)."""

    get_settings.cache_clear()  # type: ignore[attr-defined]


__all__ = ["PROVIDER_MOCK", "PROVIDER_OPENAI", "Settings", "get_settings", "reset_settings_cache"]
