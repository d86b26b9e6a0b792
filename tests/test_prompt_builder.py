from pdfchat.conversation import ConversationHistory
from pdfchat.ingest.models import ChunkMetadata, DocumentChunk
from pdfchat.prompt_builder import build_prompt, format_history
from pdfchat.retriever import RetrievalResult
from pdfchat.vectorstore import ScoredChunk


def _retrieval(question: str, *texts: str) -> RetrievalResult:
    items = [
        ScoredChunk(
            chunk=DocumentChunk(content=text, metadata=ChunkMetadata("doc.pdf", index, 0, len(text))),
            score=1.0 - index * 0.1,
            position=index,
        )
        for index, text in enumerate(texts)
    ]
    return RetrievalResult(question=question, items=items)


def test_prompt_contains_question_context_and_history():
    history = ConversationHistory()
    history.append_user("Who signed it?")
    history.append_assistant("Both parties.")

    prompt = build_prompt(
        "  When does it expire?  ",
        _retrieval("When does it expire?", "The term is two years.", "Either party may terminate."),
        history.turns(),
    )

    assert "Current user question: When does it expire?" in prompt
    assert "The term is two years.\n\nEither party may terminate." in prompt
    assert "User: Who signed it?\nAssistant: Both parties." in prompt
    assert prompt.index("Conversation history:") < prompt.index("Document context:")


def test_prompt_without_history_or_context_still_renders():
    prompt = build_prompt("Hello?", _retrieval("Hello?"))

    assert "Conversation history:\n\n" in prompt
    assert prompt.rstrip().endswith("Hello?")


def test_braces_in_document_text_are_kept_verbatim():
    prompt = build_prompt("q", _retrieval("q", "JSON like {\"a\": 1}"))

    assert "{\"a\": 1}" in prompt


def test_format_history_labels_roles():
    history = ConversationHistory()
    history.append_user("hi")

    assert format_history(history) == "User: hi"
