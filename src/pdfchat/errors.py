"""Exception hierarchy shared by the ingestion, retrieval and gateway layers."""
from __future__ import annotations


class PDFChatError(RuntimeError):
    """Base class for every error raised by the application."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause


class ConfigurationError(PDFChatError):
    """Raised when a required setting (base URL, credential) is missing."""


class ExtractionError(PDFChatError):
    """Raised when a PDF cannot be parsed or holds no extractable text."""


class RemoteServiceError(PDFChatError):
    """Raised when a call to the model provider fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class EmbeddingError(RemoteServiceError):
    """Raised when the embedding endpoint rejects or fails a request."""


class SynthesisError(RemoteServiceError):
    """Raised when the chat-completion endpoint rejects or fails a request."""


class VectorStoreError(PDFChatError):
    """Base class for in-memory vector store invariant violations."""


class DimensionMismatchError(VectorStoreError):
    """Raised when an embedding length differs from the store's dimension."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Embedding dimension mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class EmptyStoreError(VectorStoreError):
    """Raised when querying a store that holds no entries."""

    def __init__(self, message: str = "The vector store is empty; load a document first.") -> None:
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "DimensionMismatchError",
    "EmbeddingError",
    "EmptyStoreError",
    "ExtractionError",
    "PDFChatError",
    "RemoteServiceError",
    "SynthesisError",
    "VectorStoreError",
]
