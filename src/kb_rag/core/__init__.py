"""
Core module - shared protocols, result types and errors.

This module provides the foundational contracts that enable:
- Dependency injection throughout the codebase
- Easy testing with mock implementations
- Clear separation of concerns

USAGE:
------
from kb_rag.core import EmbeddingProvider, ProviderError

class MyEmbeddings:
    '''Implements EmbeddingProvider protocol.'''
    ...
"""

from kb_rag.core.protocols import (
    # Protocols
    EmbeddingProvider,
    GenerationProvider,
    SnapshotStore,
    # Data classes
    ScoredDocument,
)
from kb_rag.core.errors import (
    RagError,
    ValidationError,
    ProviderError,
    PartialBatchFailure,
    SnapshotError,
)

__all__ = [
    # Protocols
    "EmbeddingProvider",
    "GenerationProvider",
    "SnapshotStore",
    # Data classes
    "ScoredDocument",
    # Errors
    "RagError",
    "ValidationError",
    "ProviderError",
    "PartialBatchFailure",
    "SnapshotError",
]
