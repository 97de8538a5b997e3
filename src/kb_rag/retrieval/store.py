"""
Knowledge base - the in-memory document list and its lifecycle.

This module contains:
1. KnowledgeBase - owns the documents, embeds them, persists snapshots
2. get_knowledge_base() - Factory function

LIFECYCLE:
----------
- load()                 once at startup: snapshot if present, else seed docs
- backfill_embeddings()  embed anything loaded without an embedding
- ingest()               append new documents (embedded on the way in)
- persist()              rewrite the whole snapshot

Dependencies are INJECTED (embedding provider, snapshot store), so tests
run against MockEmbeddings and InMemorySnapshotStore with no network
and no filesystem.

CONCURRENCY:
------------
Sync FastAPI handlers run on worker threads. Two locks:

- _write_lock  held for a whole load / backfill / ingest / persist, so
               batches run one at a time and persist in order
- _lock        held only to copy, append to or swap the document list

Embedding calls happen under _write_lock alone, so /health, /kb and
/chat keep answering while a slow embedding model works through a batch.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Sequence

from kb_rag.config import ServiceConfig, get_config
from kb_rag.core.errors import PartialBatchFailure, ProviderError, SnapshotError
from kb_rag.core.protocols import EmbeddingProvider, ScoredDocument, SnapshotStore
from kb_rag.retrieval.document import Document, utc_timestamp
from kb_rag.retrieval.ranker import DEFAULT_TOP_K, rank
from kb_rag.retrieval.seeds import get_seed_documents

logger = logging.getLogger(__name__)


def _field(item: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an object (e.g. a request model)."""
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


class KnowledgeBase:
    """
    Ordered, append-only collection of documents with embeddings.

    Document ids are NOT deduplicated: ingesting an existing id appends
    a second entry.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        snapshots: SnapshotStore,
    ):
        """
        Initialize with injected dependencies.

        Args:
            embeddings: Embedding provider used for ingest and backfill
            snapshots: Where the document list is persisted
        """
        self._embeddings = embeddings
        self._snapshots = snapshots
        self._documents: list[Document] = []
        # _write_lock serialises mutations; _lock only guards the list itself
        self._write_lock = threading.Lock()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Populate the store at startup.

        Reads the snapshot when one exists, otherwise seeds the built-in
        documents (no embeddings, timestamped now). Replaces whatever is
        in memory, so only call this before serving requests.

        Raises:
            SnapshotError: the snapshot exists but is unreadable or malformed
        """
        with self._write_lock:
            if self._snapshots.exists():
                records = self._snapshots.load()
                try:
                    documents = [Document.from_record(r) for r in records]
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    raise SnapshotError(f"Malformed snapshot record: {e}") from e
                logger.info(f"Loaded {len(documents)} documents from snapshot")
            else:
                documents = get_seed_documents(utc_timestamp())
                logger.info(f"No snapshot found, seeded {len(documents)} documents")

            with self._lock:
                self._documents = documents

    def backfill_embeddings(self) -> int:
        """
        Embed every document that has no embedding yet, then persist.

        Documents are embedded one at a time. If the provider fails, the
        documents embedded so far keep their vectors in memory but the
        snapshot is NOT rewritten.

        Returns:
            Number of documents that received an embedding

        Raises:
            PartialBatchFailure: the provider failed part way through
        """
        with self._write_lock:
            with self._lock:
                pending = [doc for doc in self._documents if doc.embedding is None]

            completed = 0
            for doc in pending:
                try:
                    embedding = self._embeddings.embed(doc.text)
                except ProviderError as e:
                    logger.error(
                        f"Backfill failed on document '{doc.id}' "
                        f"after {completed}/{len(pending)}: {e}"
                    )
                    raise PartialBatchFailure(str(e), completed=completed, total=len(pending)) from e
                with self._lock:
                    doc.embedding = embedding
                completed += 1

            self._persist_locked()
            if completed:
                logger.info(f"Backfilled embeddings for {completed} documents")
            return completed

    def ingest(self, items: Sequence[Any]) -> int:
        """
        Embed and append a batch of ``{id, text}`` items, then persist once.

        Items with a missing or empty id or text are skipped. Numeric ids
        are stored as strings. A provider failure aborts the rest of the
        batch: items already appended stay in memory, nothing is persisted.

        Readers are never blocked by the embedding calls; a second ingest
        waits until the first has persisted.

        Args:
            items: Mappings or objects exposing ``id`` and ``text``

        Returns:
            ``len(items)`` - the number of items received, skips included

        Raises:
            PartialBatchFailure: the provider failed part way through
        """
        with self._write_lock:
            appended = 0
            for item in items:
                doc_id = _field(item, "id")
                text = _field(item, "text")
                if doc_id is not None:
                    doc_id = str(doc_id)
                if not doc_id or not text:
                    continue
                try:
                    embedding = self._embeddings.embed(text)
                except ProviderError as e:
                    logger.error(f"Ingest failed on document '{doc_id}' after {appended} appended: {e}")
                    raise PartialBatchFailure(str(e), completed=appended, total=len(items)) from e

                document = Document(
                    id=doc_id,
                    text=text,
                    timestamp=utc_timestamp(),
                    embedding=embedding,
                )
                with self._lock:
                    self._documents.append(document)
                appended += 1

            size = self._persist_locked()
            logger.info(f"Ingested {appended} of {len(items)} documents (kb size {size})")
            return len(items)

    def persist(self) -> None:
        """Overwrite the snapshot with the full document list."""
        with self._write_lock:
            self._persist_locked()

    def _persist_locked(self) -> int:
        # caller holds _write_lock; the list lock is released before writing
        with self._lock:
            records = [doc.to_record() for doc in self._documents]
        self._snapshots.save(records)
        return len(records)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def documents(self) -> list[Document]:
        """Shallow copy of the current document list."""
        with self._lock:
            return list(self._documents)

    def list_documents(self) -> list[dict]:
        """Public view of every document: id, text and timestamp only."""
        return [doc.to_public_dict() for doc in self.documents()]

    def search(self, query_vector: Sequence[float], top_k: int = DEFAULT_TOP_K) -> list[ScoredDocument]:
        """Rank the current documents against an already-embedded query."""
        return rank(query_vector, self.documents(), top_k)


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_knowledge_base(
    config: ServiceConfig | None = None,
    embeddings: EmbeddingProvider | None = None,
    snapshots: SnapshotStore | None = None,
) -> KnowledgeBase:
    """
    Factory function to build a KnowledgeBase from configuration.

    Args:
        config: Service configuration (global config if not provided)
        embeddings: Embedding provider (created from config if not provided)
        snapshots: Snapshot store (file at config.kb_path if not provided)

    Returns:
        An unloaded KnowledgeBase; call load() before use
    """
    config = config or get_config()

    if embeddings is None:
        from kb_rag.embeddings import get_embedding_provider

        embeddings = get_embedding_provider(config)

    if snapshots is None:
        from kb_rag.retrieval.snapshot import get_snapshot_store

        snapshots = get_snapshot_store(file_path=config.kb_path)

    return KnowledgeBase(embeddings, snapshots)
