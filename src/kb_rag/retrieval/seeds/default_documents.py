"""
Built-in seed documents.

Used only when no snapshot exists yet. The texts are part of the public
contract: clients rely on them being exactly these strings.
"""

from __future__ import annotations

from kb_rag.retrieval.document import Document, utc_timestamp

SEED_TEXTS: list[tuple[str, str]] = [
    (
        "d1",
        "TinyLlama is a small language model optimized for fast inference on modest hardware.",
    ),
    (
        "d2",
        "React Native builds mobile apps using JavaScript and native widgets for iOS and Android.",
    ),
]


def get_seed_documents(timestamp: str | None = None) -> list[Document]:
    """
    Fresh seed documents, without embeddings.

    Args:
        timestamp: Creation time for every seed (defaults to now)
    """
    timestamp = timestamp or utc_timestamp()
    return [Document(id=doc_id, text=text, timestamp=timestamp) for doc_id, text in SEED_TEXTS]
