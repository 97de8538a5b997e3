"""
Seed data for the knowledge base.

Separating data from infrastructure keeps the store free of
hard-coded content.
"""

from kb_rag.retrieval.seeds.default_documents import (
    SEED_TEXTS,
    get_seed_documents,
)

__all__ = ["SEED_TEXTS", "get_seed_documents"]
