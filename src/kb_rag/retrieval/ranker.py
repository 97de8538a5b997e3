"""
Top-K ranking by cosine similarity (full linear scan).
"""

from __future__ import annotations

from typing import Iterable, Sequence

from kb_rag.core.protocols import ScoredDocument
from kb_rag.retrieval.document import Document
from kb_rag.retrieval.similarity import cosine_similarity

DEFAULT_TOP_K = 3


def rank(
    query_vector: Sequence[float],
    documents: Iterable[Document],
    top_k: int = DEFAULT_TOP_K,
) -> list[ScoredDocument]:
    """
    Score every embedded document against ``query_vector``.

    Documents that have no embedding yet are skipped. Results are sorted
    by descending score; equal scores keep insertion order (sort is stable).

    Args:
        query_vector: Embedding of the query
        documents: Candidate documents, in insertion order
        top_k: Maximum number of results; <= 0 returns nothing

    Returns:
        At most ``top_k`` scored documents, best first
    """
    if top_k <= 0:
        return []

    scored = [
        ScoredDocument(document=doc, score=cosine_similarity(query_vector, doc.embedding))
        for doc in documents
        if doc.embedding is not None
    ]

    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:top_k]
