"""
Generation Module - Single Responsibility: turn a prompt into an answer.

The gateway knows nothing about retrieval or prompt layout; it receives a
fully assembled prompt and returns the model's text.
"""

from __future__ import annotations

import logging

import httpx

from kb_rag.config import ServiceConfig, get_config
from kb_rag.core.errors import ProviderError
from kb_rag.core.http import build_client, post_json
from kb_rag.core.protocols import GenerationProvider

logger = logging.getLogger(__name__)


class OllamaGenerator:
    """Non-streaming completions from Ollama's ``/api/generate``."""

    def __init__(
        self,
        base_url: str,
        model: str = "tinyllama",
        timeout: float = 120.0,
        client: httpx.Client | None = None,
    ):
        self.model = model
        self._client = client or build_client(base_url, timeout)

    def generate(self, prompt: str) -> str:
        data = post_json(
            self._client,
            "/api/generate",
            {"model": self.model, "prompt": prompt, "stream": False},
            provider="generation",
        )
        response = data.get("response")
        if not isinstance(response, str):
            raise ProviderError(
                f"generation model '{self.model}' returned no response",
                provider="generation",
            )
        return response

    def close(self) -> None:
        self._client.close()


class MockGenerator:
    """
    Canned generator for tests and offline development.

    Records every prompt so tests can assert on prompt assembly.
    """

    def __init__(self, answer: str = "This is a mock answer."):
        self.answer = answer
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer

    def close(self) -> None:
        pass


def get_generation_provider(
    config: ServiceConfig | None = None,
    use_mock: bool | None = None,
) -> GenerationProvider:
    """
    Factory function to get the appropriate generation provider.

    Args:
        config: Service configuration (global config if not provided)
        use_mock: Force MockGenerator; defaults to config.use_mock_providers
    """
    config = config or get_config()
    if use_mock is None:
        use_mock = config.use_mock_providers
    if use_mock:
        logger.info("Using mock generator")
        return MockGenerator()
    return OllamaGenerator(
        base_url=config.ollama_host,
        model=config.gen_model,
        timeout=config.request_timeout,
    )
