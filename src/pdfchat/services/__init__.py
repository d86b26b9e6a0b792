"""Application services."""

from .session import (
    AskResult,
    LoadResult,
    SessionController,
    SessionSnapshot,
    SessionState,
    get_session_controller,
    reset_session_controller_cache,
    user_message,
)

__all__ = [
    "AskResult",
    "LoadResult",
    "SessionController",
    "SessionSnapshot",
    "SessionState",
    "get_session_controller",
    "reset_session_controller_cache",
    "user_message",
]
