"""
Core protocols defining contracts for the service.

All infrastructure components implement these protocols,
enabling dependency injection and easy testing.

PATTERN:
- Protocol defines the contract
- Production implementation talks to the real backend
- Test double for fast unit tests
- Factory function for instantiation

The HTTP layer and the CLI only ever see these protocols. Which backend
sits behind them is decided once, in the factories.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from kb_rag.retrieval.document import Document


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OllamaEmbeddings (production)
    - MockEmbeddings (testing)
    """

    def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        ...

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts, one call per text."""
        ...


# ---------------------------------------------------------------------------
# GENERATION PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class GenerationProvider(Protocol):
    """
    Contract for text generation.

    Implementations:
    - OllamaGenerator (production)
    - MockGenerator (testing)
    """

    def generate(self, prompt: str) -> str:
        """Return the model's completion for an assembled prompt."""
        ...


# ---------------------------------------------------------------------------
# SNAPSHOT STORE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class SnapshotStore(Protocol):
    """
    Contract for knowledge base persistence.

    A snapshot is the full ordered list of document records. Every save
    replaces the previous snapshot wholesale.

    Implementations:
    - FileSnapshotStore (production, pretty-printed JSON)
    - InMemorySnapshotStore (testing)
    """

    def exists(self) -> bool:
        """True when a snapshot has been saved before."""
        ...

    def load(self) -> list[dict]:
        """Return the stored records. Raises SnapshotError if unreadable."""
        ...

    def save(self, records: list[dict]) -> None:
        """Overwrite the snapshot with ``records``."""
        ...


# ---------------------------------------------------------------------------
# RETRIEVAL RESULT
# ---------------------------------------------------------------------------


@dataclass
class ScoredDocument:
    """A stored document paired with its similarity to one query."""
    document: Document
    score: float

    @property
    def id(self) -> str:
        return self.document.id

    def to_source(self) -> dict:
        """Source entry as returned by /chat (score rounded to 4 places)."""
        return {
            "id": self.document.id,
            "score": round(self.score, 4),
            "timestamp": self.document.timestamp,
        }
