import pytest

from pdfchat.errors import DimensionMismatchError, EmptyStoreError
from pdfchat.ingest.models import ChunkMetadata, DocumentChunk
from pdfchat.vectorstore import InMemoryVectorStore, cosine_similarity


def _chunks(*texts: str) -> list[DocumentChunk]:
    return [
        DocumentChunk(
            content=text,
            metadata=ChunkMetadata(document_name="doc.pdf", chunk_index=index, char_start=0, char_end=len(text)),
        )
        for index, text in enumerate(texts)
    ]


@pytest.fixture
def store() -> InMemoryVectorStore:
    store = InMemoryVectorStore()
    store.add(_chunks("east", "north", "north-east"), [[1.0, 0.0], [0.0, 1.0], [0.7, 0.7]])
    return store


def test_query_orders_by_similarity(store):
    results = store.query([1.0, 0.0], k=2)

    assert [item.chunk.content for item in results] == ["east", "north-east"]
    assert results[0].score == pytest.approx(1.0)
    assert results[0].score >= results[1].score


def test_query_returns_everything_when_k_exceeds_size(store):
    results = store.query([0.0, 1.0], k=10)

    assert len(results) == 3
    assert [item.chunk.content for item in results][0] == "north"
    scores = [item.score for item in results]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_insertion_order():
    store = InMemoryVectorStore()
    store.add(_chunks("first", "second", "third"), [[1.0, 1.0], [0.0, 1.0], [1.0, 1.0]])

    results = store.query([1.0, 1.0], k=2)

    assert [item.position for item in results] == [0, 2]


def test_dimension_is_fixed_by_first_insert(store):
    assert store.dimension == 2

    with pytest.raises(DimensionMismatchError):
        store.add(_chunks("up"), [[0.0, 0.0, 1.0]])

    assert len(store) == 3


def test_mixed_dimensions_in_one_batch_leave_store_unchanged():
    store = InMemoryVectorStore()

    with pytest.raises(DimensionMismatchError):
        store.add(_chunks("a", "b"), [[1.0, 0.0], [1.0, 0.0, 0.0]])

    assert len(store) == 0
    assert store.dimension is None


def test_query_with_wrong_dimension_fails(store):
    with pytest.raises(DimensionMismatchError):
        store.query([1.0, 0.0, 0.0], k=1)


def test_chunk_and_embedding_counts_must_match():
    with pytest.raises(ValueError):
        InMemoryVectorStore().add(_chunks("a", "b"), [[1.0, 0.0]])


def test_empty_store_rejects_queries():
    with pytest.raises(EmptyStoreError):
        InMemoryVectorStore().query([1.0, 0.0], k=1)


def test_non_positive_k_is_rejected(store):
    with pytest.raises(ValueError):
        store.query([1.0, 0.0], k=0)


def test_zero_vector_scores_zero(store):
    results = store.query([0.0, 0.0], k=3)

    assert [item.score for item in results] == [0.0, 0.0, 0.0]
    assert [item.position for item in results] == [0, 1, 2]


def test_cosine_similarity_identities():
    assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0


def test_cosine_similarity_rejects_length_mismatch():
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0], [1.0, 0.0])
