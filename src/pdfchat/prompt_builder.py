"""Utilities for constructing the question-answering prompt."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from pdfchat.conversation import ConversationTurn, Role
from pdfchat.retriever import RetrievalResult

_PROMPT_PATH = Path(__file__).resolve().parent / "prompts" / "answer.txt"
_ROLE_LABELS = {Role.USER: "User", Role.ASSISTANT: "Assistant"}


def _load_template(path: Path) -> str:
    """Read and trim the contents of a template file."""
    return path.read_text(encoding="utf-8").strip()


_TEMPLATE = _load_template(_PROMPT_PATH)


def format_history(history: Iterable[ConversationTurn]) -> str:
    return "\n".join(f"{_ROLE_LABELS[turn.role]}: {turn.text}" for turn in history)


def build_prompt(
    question: str,
    retrieval: RetrievalResult,
    history: Iterable[ConversationTurn] = (),
) -> str:
    """Compose the full prompt used for answering a question about the document."""

    if question is None:
        raise ValueError("question must not be None")

    context_block = "\n\n".join(text.strip() for text in retrieval.texts if text.strip())
    return _TEMPLATE.format(
        chat_history=format_history(history),
        context=context_block,
        question=question.strip(),
    )


__all__ = ["build_prompt", "format_history"]
