import pytest

from pdfchat.config import PROVIDER_OPENAI
from pdfchat.providers import (
    MockEmbeddingProvider,
    MockLLMProvider,
    OpenAIChatClient,
    OpenAIEmbeddingClient,
    create_providers,
)


@pytest.mark.anyio
async def test_mock_embeddings_are_deterministic():
    provider = MockEmbeddingProvider(dimension=4)

    first = await provider.embed(["alpha", "beta"])
    second = await provider.embed(["alpha"])

    assert len(first) == 2
    assert all(len(vector) == 4 for vector in first)
    assert first[0] == second[0]
    assert first[0] != first[1]
    assert provider.calls == [["alpha", "beta"], ["alpha"]]


@pytest.mark.anyio
async def test_mock_llm_echoes_prompt_tail():
    llm = MockLLMProvider()

    answer = await llm.generate("Context...\nCurrent user question: what?")

    assert answer.startswith("MOCK_ANSWER:")
    assert answer.endswith("what?")
    assert llm.prompts == ["Context...\nCurrent user question: what?"]


def test_mock_embedding_dimension_must_be_positive():
    with pytest.raises(ValueError):
        MockEmbeddingProvider(dimension=0)


def test_create_providers_selects_backend(settings):
    embedding, llm = create_providers(settings)
    assert isinstance(embedding, MockEmbeddingProvider)
    assert isinstance(llm, MockLLMProvider)

    settings.provider = PROVIDER_OPENAI
    embedding, llm = create_providers(settings)
    assert isinstance(embedding, OpenAIEmbeddingClient)
    assert isinstance(llm, OpenAIChatClient)


def test_create_providers_rejects_unknown_backend(settings):
    settings.provider = "carrier-pigeon"

    with pytest.raises(ValueError):
        create_providers(settings)
