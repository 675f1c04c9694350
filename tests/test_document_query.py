import threading
from types import SimpleNamespace

import numpy as np
import pytest

from core.config import QdrantSettings
from services.rag import document_query

from conftest import run


class FakeQdrant:
    def __init__(self, url=None, api_key=None):
        self.url = url
        self.queries = []

    async def query_points(self, **kwargs):
        self.queries.append(kwargs)
        return SimpleNamespace(points=[
            SimpleNamespace(payload={"text": "first chunk"}),
            SimpleNamespace(payload={"source": "no text"}),
            SimpleNamespace(payload=None),
            SimpleNamespace(payload={"text": "second chunk"}),
        ])

    async def close(self):
        pass


class FakeSparse:
    def __init__(self, model_name):
        self.model_name = model_name
        self.threads = []

    def query_embed(self, query):
        self.threads.append(threading.get_ident())
        yield SimpleNamespace(indices=np.array([3, 7]), values=np.array([0.5, 0.25]))


class FakeLLM:
    async def embed(self, texts):
        return [[0.1, 0.2, 0.3]]


@pytest.fixture(autouse=True)
def fake_backends(monkeypatch):
    monkeypatch.setattr(document_query, "AsyncQdrantClient", FakeQdrant)
    monkeypatch.setattr(document_query, "SparseTextEmbedding", FakeSparse)


def test_sparse_retrieve_returns_payload_texts():
    query = document_query.DocumentQuery(QdrantSettings(collection_name="docs", retrieval_mode="sparse", sparse_top_k=5))

    passages = run(query.retrieve("¿qué dice el documento?"))

    assert passages == ["first chunk", "second chunk"]
    sent = query.client.queries[0]
    assert sent["collection_name"] == "docs"
    assert sent["using"] == "sparse"
    assert sent["limit"] == 5
    assert sent["query"].indices == [3, 7]
    assert sent["query"].values == [0.5, 0.25]


def test_dense_retrieve_uses_llm_embeddings():
    query = document_query.DocumentQuery(
        QdrantSettings(retrieval_mode="dense", dense_top_k=3),
        llm_client=FakeLLM(),
    )

    run(query.retrieve("question", top_k=2))

    sent = query.client.queries[0]
    assert sent["using"] == "dense"
    assert sent["query"] == [0.1, 0.2, 0.3]
    assert sent["limit"] == 2
    assert query.sparse_model is None


def test_invalid_configuration():
    with pytest.raises(ValueError):
        document_query.DocumentQuery(QdrantSettings(retrieval_mode="hybrid"))
    with pytest.raises(ValueError):
        document_query.DocumentQuery(QdrantSettings(retrieval_mode="dense"))


def test_sparse_embedding_runs_off_the_event_loop_thread():
    query = document_query.DocumentQuery(QdrantSettings(retrieval_mode="sparse"))

    run(query.retrieve("question"))

    assert len(query.sparse_model.threads) == 1
    assert query.sparse_model.threads[0] != threading.get_ident()
