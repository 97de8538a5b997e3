"""
Document model for the knowledge base.

Single responsibility: Define the structure of documents
stored in the knowledge base and their on-disk record shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-01T12:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Document:
    """
    A knowledge base entry.

    ``id`` is not required to be unique. Only ``embedding`` ever changes
    after creation (absent -> present).
    """
    id: str
    text: str
    timestamp: str
    embedding: list[float] | None = None

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None

    def to_record(self) -> dict:
        """Snapshot record. The embedding key is left out until computed."""
        record: dict = {"id": self.id, "text": self.text}
        if self.embedding is not None:
            record["embedding"] = list(self.embedding)
        record["timestamp"] = self.timestamp
        return record

    def to_public_dict(self) -> dict:
        """What /kb exposes - never the embedding."""
        return {"id": self.id, "text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_record(cls, record: dict) -> "Document":
        embedding = record.get("embedding")
        return cls(
            id=record["id"],
            text=record["text"],
            timestamp=record["timestamp"],
            embedding=[float(x) for x in embedding] if embedding is not None else None,
        )
