"""
RAG pipeline - query in, grounded answer plus ranked sources out.

Flow:
    1. Validate the query (non-blank)
    2. Embed the query
    3. Rank the knowledge base (top-K, cosine)
    4. Assemble the prompt from the ranked sources
    5. Generate (this call alone is timed)
    6. Return answer, elapsed seconds, sources

The pipeline holds no state of its own; the knowledge base and both
gateways are injected.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from kb_rag.core.errors import ValidationError
from kb_rag.core.protocols import EmbeddingProvider, GenerationProvider, ScoredDocument
from kb_rag.rag.prompts import build_prompt
from kb_rag.retrieval.ranker import DEFAULT_TOP_K
from kb_rag.retrieval.store import KnowledgeBase

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """Answer from one /chat call."""
    response: str
    elapsed: float
    sources: list[ScoredDocument] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "response": self.response,
            "elapsed": self.elapsed,
            "sources": [s.to_source() for s in self.sources],
        }


class RagPipeline:
    """Retrieve-then-generate over a KnowledgeBase."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        embeddings: EmbeddingProvider,
        generator: GenerationProvider,
    ):
        self.knowledge_base = knowledge_base
        self._embeddings = embeddings
        self._generator = generator

    def retrieve(self, query: str, top_k: int = DEFAULT_TOP_K) -> list[ScoredDocument]:
        """Embed ``query`` and return the best ``top_k`` documents."""
        query_vector = self._embeddings.embed(query)
        return self.knowledge_base.search(query_vector, top_k)

    def chat(self, query: str | None, top_k: int | None = None) -> ChatResult:
        """
        Answer ``query`` from the knowledge base.

        Args:
            query: User question; must contain non-whitespace text
            top_k: Number of sources to retrieve (default 3)

        Raises:
            ValidationError: query missing or blank
            ProviderError: embedding or generation backend failed
        """
        if not query or not query.strip():
            raise ValidationError("query is required")
        if top_k is None:
            top_k = DEFAULT_TOP_K

        sources = self.retrieve(query, top_k)
        prompt = build_prompt(query, sources)

        t0 = time.perf_counter()
        response = self._generator.generate(prompt)
        elapsed = time.perf_counter() - t0

        logger.info(f"Answered query with {len(sources)} sources in {elapsed:.2f}s")
        return ChatResult(response=response, elapsed=elapsed, sources=sources)
