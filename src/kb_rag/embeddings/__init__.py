"""
Embeddings module - text embedding generation.

Pattern:
1. Protocol (EmbeddingProvider) defines the interface
2. Production implementation (OllamaEmbeddings)
3. Test double (MockEmbeddings) for fast testing
4. Factory function (get_embedding_provider)
"""

from kb_rag.core.protocols import EmbeddingProvider
from kb_rag.embeddings.ollama_embeddings import (
    OllamaEmbeddings,
    MockEmbeddings,
    get_embedding_provider,
)

__all__ = [
    "EmbeddingProvider",
    "OllamaEmbeddings",
    "MockEmbeddings",
    "get_embedding_provider",
]
