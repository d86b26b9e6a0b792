"""Answer synthesis: prompt the chat model with retrieved context."""
from __future__ import annotations

import logging
from typing import Iterable

from pdfchat.conversation import ConversationTurn
from pdfchat.errors import SynthesisError
from pdfchat.prompt_builder import build_prompt
from pdfchat.providers.base import LLMProvider
from pdfchat.retriever import RetrievalResult

LOGGER = logging.getLogger(__name__)


class AnswerSynthesizer:
    """Build one prompt per question and return the model's answer verbatim."""

    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    @property
    def model_name(self) -> str:
        return self._llm.model_name

    async def synthesize(
        self,
        question: str,
        retrieval: RetrievalResult,
        history: Iterable[ConversationTurn] = (),
    ) -> str:
        prompt = build_prompt(question, retrieval, list(history))
        LOGGER.debug("Prompt of %s characters with %s context chunk(s)", len(prompt), len(retrieval))
        try:
            return await self._llm.generate(prompt)
        except SynthesisError:
            raise
        except Exception as error:
            raise SynthesisError(f"Answer generation failed: {error}", cause=error) from error
