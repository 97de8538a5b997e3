"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to vector embeddings.

SOLID PRINCIPLE: Single Responsibility
- This module ONLY handles embedding generation
- No storage logic, no ranking
- Easy to swap for different embedding providers
"""

from __future__ import annotations

import hashlib
import logging

import httpx

from kb_rag.config import ServiceConfig, get_config
from kb_rag.core.errors import ProviderError
from kb_rag.core.http import build_client, post_json
from kb_rag.core.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)


class OllamaEmbeddings:
    """
    Ollama-based embedding provider.

    One POST to ``/api/embeddings`` per text. No retries: a failure is
    raised to the caller, which decides what to do with the rest of
    its batch.
    """

    def __init__(
        self,
        base_url: str,
        model: str = "nomic-embed-text",
        timeout: float = 120.0,
        client: httpx.Client | None = None,
    ):
        self.model = model
        self._client = client or build_client(base_url, timeout)

    def embed(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        data = post_json(
            self._client,
            "/api/embeddings",
            {"model": self.model, "input": text},
            provider="embeddings",
        )
        embedding = data.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            raise ProviderError(
                f"embedding model '{self.model}' returned no embedding",
                provider="embeddings",
            )
        try:
            return [float(x) for x in embedding]
        except (TypeError, ValueError) as e:
            raise ProviderError(f"embedding contains non-numeric values: {e}", provider="embeddings") from e

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings sequentially, one request per text."""
        return [self.embed(text) for text in texts]

    def close(self) -> None:
        self._client.close()


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Generates deterministic pseudo-embeddings from text hashes.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = 8):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        """Generate deterministic pseudo-embedding from text hash."""
        h = hashlib.sha256(text.encode()).digest()
        # Repeat hash to fill dimensions
        repeated = h * (self._dimensions // len(h) + 1)
        return [b / 127.5 - 1.0 for b in repeated[: self._dimensions]]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple texts."""
        return [self.embed(text) for text in texts]

    def close(self) -> None:
        pass


def get_embedding_provider(
    config: ServiceConfig | None = None,
    use_mock: bool | None = None,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        config: Service configuration (global config if not provided)
        use_mock: Force MockEmbeddings; defaults to config.use_mock_providers
    """
    config = config or get_config()
    if use_mock is None:
        use_mock = config.use_mock_providers
    if use_mock:
        logger.info("Using mock embeddings")
        return MockEmbeddings()
    return OllamaEmbeddings(
        base_url=config.ollama_host,
        model=config.embed_model,
        timeout=config.request_timeout,
    )
