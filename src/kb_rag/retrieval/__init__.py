"""
Retrieval module - the knowledge base and similarity search.

This module provides:
- Document: The document model
- cosine_similarity / rank: Scoring and top-K selection
- KnowledgeBase: In-memory store with snapshot persistence
- FileSnapshotStore / InMemorySnapshotStore: Persistence backends
- get_knowledge_base(), get_snapshot_store(): Factory functions
"""

# Document model
from kb_rag.retrieval.document import Document, utc_timestamp

# Scoring
from kb_rag.retrieval.similarity import EPSILON, cosine_similarity
from kb_rag.retrieval.ranker import DEFAULT_TOP_K, rank

# Persistence
from kb_rag.retrieval.snapshot import (
    FileSnapshotStore,
    InMemorySnapshotStore,
    get_snapshot_store,
)

# Store and factory
from kb_rag.retrieval.store import KnowledgeBase, get_knowledge_base

# Seed data
from kb_rag.retrieval.seeds import get_seed_documents

__all__ = [
    # Document
    "Document",
    "utc_timestamp",
    # Scoring
    "EPSILON",
    "cosine_similarity",
    "DEFAULT_TOP_K",
    "rank",
    # Persistence
    "FileSnapshotStore",
    "InMemorySnapshotStore",
    "get_snapshot_store",
    # Store
    "KnowledgeBase",
    "get_knowledge_base",
    # Seeds
    "get_seed_documents",
]
