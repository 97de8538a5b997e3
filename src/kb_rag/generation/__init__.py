"""
Generation module - answer generation from an assembled prompt.

Same shape as the embeddings module: protocol, Ollama implementation,
mock, factory.
"""

from kb_rag.core.protocols import GenerationProvider
from kb_rag.generation.ollama_generation import (
    OllamaGenerator,
    MockGenerator,
    get_generation_provider,
)

__all__ = [
    "GenerationProvider",
    "OllamaGenerator",
    "MockGenerator",
    "get_generation_provider",
]
