"""
HTTP API Tests

Runs the FastAPI app through TestClient (as a context manager, so the
startup lifespan runs) with in-memory snapshots and scripted providers.
"""

import logging
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from kb_rag.api import create_app
from kb_rag.config import ServiceConfig
from kb_rag.core.errors import ProviderError
from kb_rag.embeddings import MockEmbeddings
from kb_rag.generation import MockGenerator
from kb_rag.retrieval.snapshot import InMemorySnapshotStore


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def config(tmp_path):
    return ServiceConfig(kb_path=str(tmp_path / "kb.json"))


@pytest.fixture
def stub_embeddings():
    """Every text embeds to [1, 0, 0] unless a test overrides side_effect."""
    embeddings = MagicMock()
    embeddings.embed.return_value = [1.0, 0.0, 0.0]
    return embeddings


@pytest.fixture
def generator():
    return MockGenerator(answer="Grounded answer.")


def _client(config, embeddings, generator, snapshots):
    app = create_app(config, embeddings=embeddings, generator=generator, snapshots=snapshots)
    return TestClient(app)


@pytest.fixture
def empty_client(config, stub_embeddings, generator):
    """App whose snapshot exists but is empty."""
    snapshots = InMemorySnapshotStore([])
    with _client(config, stub_embeddings, generator, snapshots) as client:
        client.snapshots = snapshots
        yield client


@pytest.fixture
def seeded_client(config, generator):
    """App started without a snapshot: seeds d1/d2 and backfills them."""
    snapshots = InMemorySnapshotStore()
    with _client(config, MockEmbeddings(), generator, snapshots) as client:
        client.snapshots = snapshots
        yield client


# ---------------------------------------------------------------------------
# STARTUP
# ---------------------------------------------------------------------------


class TestStartup:
    """Lifespan: load, backfill, serve."""

    def test_seeds_and_backfills(self, seeded_client):
        assert seeded_client.snapshots.save_count == 1
        assert [r["id"] for r in seeded_client.snapshots.records] == ["d1", "d2"]
        assert all("embedding" in r for r in seeded_client.snapshots.records)

    def test_backfill_failure_does_not_prevent_startup(self, config, generator):
        embeddings = MagicMock()
        embeddings.embed.side_effect = ProviderError("ollama unreachable", provider="embeddings")
        snapshots = InMemorySnapshotStore()

        with _client(config, embeddings, generator, snapshots) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["kbSize"] == 2
        assert snapshots.save_count == 0

    def test_uses_file_snapshot_by_default(self, config, generator):
        app = create_app(config, embeddings=MockEmbeddings(), generator=generator)

        with TestClient(app):
            pass

        with open(config.kb_path, encoding="utf-8") as f:
            assert '"id": "d1"' in f.read()

    def test_startup_work_runs_in_threadpool(self, config, generator, monkeypatch):
        """load() and backfill_embeddings() block, so they run off the event loop."""
        from kb_rag.api import app as app_module

        calls = []
        real_run_in_threadpool = app_module.run_in_threadpool

        async def recording_run_in_threadpool(func, *args, **kwargs):
            calls.append(func.__name__)
            return await real_run_in_threadpool(func, *args, **kwargs)

        monkeypatch.setattr(app_module, "run_in_threadpool", recording_run_in_threadpool)

        with _client(config, MockEmbeddings(), generator, InMemorySnapshotStore()):
            pass

        assert calls == ["load", "backfill_embeddings"]

    def test_partial_backfill_logs_progress(self, config, generator, caplog):
        embeddings = MagicMock()
        embeddings.embed.side_effect = [[1.0, 0.0], ProviderError("ollama unreachable", provider="embeddings")]

        with caplog.at_level(logging.ERROR, logger="kb_rag.api.app"):
            with _client(config, embeddings, generator, InMemorySnapshotStore()):
                pass

        assert "stopped after 1/2 documents" in caplog.text


# ---------------------------------------------------------------------------
# GET /health, GET /kb
# ---------------------------------------------------------------------------


class TestReadEndpoints:

    def test_health(self, seeded_client):
        response = seeded_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["kbSize"] == 2
        assert body["timestamp"].endswith("Z")

    def test_kb_lists_without_embeddings(self, seeded_client):
        response = seeded_client.get("/kb")

        assert response.status_code == 200
        body = response.json()
        assert [d["id"] for d in body] == ["d1", "d2"]
        assert body[0]["text"] == "TinyLlama is a small language model optimized for fast inference on modest hardware."
        assert all(set(d) == {"id", "text", "timestamp"} for d in body)

    def test_kb_empty(self, empty_client):
        assert empty_client.get("/kb").json() == []


# ---------------------------------------------------------------------------
# POST /ingest
# ---------------------------------------------------------------------------


class TestIngestEndpoint:

    def test_ingest_single_document(self, empty_client, stub_embeddings):
        response = empty_client.post("/ingest", json={"documents": [{"id": "x", "text": "hello"}]})

        assert response.status_code == 200
        assert response.json() == {"added": 1}
        stub_embeddings.embed.assert_called_with("hello")

        kb = empty_client.get("/kb").json()
        assert len(kb) == 1
        assert kb[0]["id"] == "x"
        assert kb[0]["text"] == "hello"
        assert "embedding" not in kb[0]

        assert empty_client.snapshots.records[-1]["embedding"] == [1.0, 0.0, 0.0]

    def test_added_counts_skipped_items(self, empty_client):
        response = empty_client.post(
            "/ingest",
            json={"documents": [{"id": "a", "text": "one"}, {"id": "b"}, {"text": "orphan"}]},
        )

        assert response.json() == {"added": 3}
        assert [d["id"] for d in empty_client.get("/kb").json()] == ["a"]

    def test_missing_documents_key(self, empty_client):
        response = empty_client.post("/ingest", json={})

        assert response.status_code == 200
        assert response.json() == {"added": 0}

    def test_provider_failure_mid_batch(self, empty_client, stub_embeddings):
        stub_embeddings.embed.side_effect = [
            [1.0, 0.0, 0.0],
            ProviderError("embedding backend down", provider="embeddings"),
        ]
        saves_before = empty_client.snapshots.save_count

        response = empty_client.post(
            "/ingest",
            json={"documents": [
                {"id": "one", "text": "a"},
                {"id": "two", "text": "b"},
                {"id": "three", "text": "c"},
            ]},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "embedding backend down"}
        assert [d["id"] for d in empty_client.get("/kb").json()] == ["one"]
        assert empty_client.snapshots.save_count == saves_before

    def test_partial_failure_logs_batch_progress(self, empty_client, stub_embeddings, caplog):
        stub_embeddings.embed.side_effect = [
            [1.0, 0.0, 0.0],
            ProviderError("embedding backend down", provider="embeddings"),
        ]

        with caplog.at_level(logging.ERROR, logger="kb_rag.api.app"):
            response = empty_client.post(
                "/ingest",
                json={"documents": [{"id": "one", "text": "a"}, {"id": "two", "text": "b"}, {"id": "three", "text": "c"}]},
            )

        assert response.status_code == 500
        assert "Ingest stopped after 1/3 documents" in caplog.text

    @pytest.mark.parametrize("raw_id,stored_id", [(7, "7"), (7.5, "7.5")])
    def test_numeric_id_is_accepted(self, empty_client, raw_id, stored_id):
        response = empty_client.post("/ingest", json={"documents": [{"id": raw_id, "text": "hello"}]})

        assert response.status_code == 200
        assert response.json() == {"added": 1}
        assert [d["id"] for d in empty_client.get("/kb").json()] == [stored_id]
        assert empty_client.snapshots.records[-1]["id"] == stored_id

    def test_numeric_id_does_not_reject_batch(self, empty_client):
        response = empty_client.post(
            "/ingest",
            json={"documents": [{"id": "a", "text": "one"}, {"id": 2, "text": "two"}]},
        )

        assert response.json() == {"added": 2}
        assert [d["id"] for d in empty_client.get("/kb").json()] == ["a", "2"]

    def test_wrong_body_type_is_400(self, empty_client):
        response = empty_client.post("/ingest", json={"documents": "not a list"})

        assert response.status_code == 400
        assert "error" in response.json()


# ---------------------------------------------------------------------------
# POST /chat
# ---------------------------------------------------------------------------


class TestChatEndpoint:

    @pytest.fixture
    def two_doc_client(self, config, generator):
        """Two docs at [1,0] and [0,1]; queries containing 'first' embed to [1,0]."""
        embeddings = MagicMock()
        embeddings.embed.side_effect = lambda text: [1.0, 0.0] if "first" in text else [0.0, 1.0]
        snapshots = InMemorySnapshotStore([
            {"id": "a", "text": "first doc", "embedding": [1.0, 0.0], "timestamp": "2025-01-01T00:00:00.000Z"},
            {"id": "b", "text": "second doc", "embedding": [0.0, 1.0], "timestamp": "2025-01-02T00:00:00.000Z"},
        ])
        with _client(config, embeddings, generator, snapshots) as client:
            yield client

    def test_chat_top_k_one(self, two_doc_client):
        response = two_doc_client.post("/chat", json={"query": "the first one", "topK": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "Grounded answer."
        assert isinstance(body["elapsed"], float)
        assert body["sources"] == [{"id": "a", "score": 1.0, "timestamp": "2025-01-01T00:00:00.000Z"}]

    def test_chat_default_top_k(self, two_doc_client):
        body = two_doc_client.post("/chat", json={"query": "the first one"}).json()
        assert [s["id"] for s in body["sources"]] == ["a", "b"]

    def test_chat_prompt_sent_to_generator(self, two_doc_client, generator):
        two_doc_client.post("/chat", json={"query": "the first one", "topK": 1})

        assert generator.prompts[-1].endswith("CONTEXT:\n[a] first doc\n\nUSER: the first one\nASSISTANT:")

    @pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, {"query": None}])
    def test_blank_query_is_400(self, two_doc_client, body):
        response = two_doc_client.post("/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "query is required"}

    def test_negative_top_k_returns_no_sources(self, two_doc_client):
        body = two_doc_client.post("/chat", json={"query": "x", "topK": -1}).json()
        assert body["sources"] == []

    def test_generation_failure_is_500(self, config, stub_embeddings):
        generator = MagicMock()
        generator.generate.side_effect = ProviderError("model 'tinyllama' not found", provider="generation")

        with _client(config, stub_embeddings, generator, InMemorySnapshotStore([])) as client:
            response = client.post("/chat", json={"query": "hello"})

        assert response.status_code == 500
        assert response.json() == {"error": "model 'tinyllama' not found"}

    def test_embedding_failure_is_500(self, empty_client, stub_embeddings):
        stub_embeddings.embed.side_effect = ProviderError("connection refused", provider="embeddings")

        response = empty_client.post("/chat", json={"query": "hello"})

        assert response.status_code == 500
        assert response.json() == {"error": "connection refused"}

    def test_service_survives_failed_request(self, empty_client, stub_embeddings):
        stub_embeddings.embed.side_effect = ProviderError("down", provider="embeddings")
        assert empty_client.post("/chat", json={"query": "hello"}).status_code == 500

        assert empty_client.get("/health").status_code == 200
