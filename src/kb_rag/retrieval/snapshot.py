"""
Snapshot storage - Protocol and implementations for persisting the knowledge base.

Following the same pattern as the gateways:
1. Protocol defines the interface (core.protocols.SnapshotStore)
2. FileSnapshotStore for production (persistent)
3. InMemorySnapshotStore for testing (fast, no I/O)
4. Factory function for convenience

A snapshot is always the complete document list. There is no
incremental write and no log: every save replaces the previous one.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

from kb_rag.core.errors import SnapshotError
from kb_rag.core.protocols import SnapshotStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# FILE-BASED IMPLEMENTATION (Production)
# ---------------------------------------------------------------------------


class FileSnapshotStore:
    """Production snapshot store using a pretty-printed JSON file."""

    def __init__(self, file_path: Path | str = "./kb.json"):
        self._path = Path(file_path)

    @property
    def path(self) -> Path:
        """Get the snapshot file path."""
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> list[dict]:
        """Load records from the JSON file."""
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SnapshotError(f"Could not read snapshot {self._path}: {e}") from e

        if not isinstance(data, list):
            raise SnapshotError(f"Snapshot {self._path} must contain a JSON list")
        return data

    def save(self, records: list[dict]) -> None:
        """Overwrite the JSON file with ``records``."""
        if self._path.parent and not self._path.parent.exists():
            self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote {len(records)} records to {self._path}")


# ---------------------------------------------------------------------------
# IN-MEMORY IMPLEMENTATION (Testing)
# ---------------------------------------------------------------------------


class InMemorySnapshotStore:
    """Test snapshot store - no file I/O.

    Lets unit tests check what was (or was not) persisted
    without touching the filesystem.
    """

    def __init__(self, initial_records: list[dict] | None = None):
        self._records = copy.deepcopy(initial_records) if initial_records is not None else None
        self._save_count = 0

    @property
    def save_count(self) -> int:
        """Number of times save was called (for test assertions)."""
        return self._save_count

    @property
    def records(self) -> list[dict] | None:
        """Last saved records (for test assertions)."""
        return self._records

    def exists(self) -> bool:
        return self._records is not None

    def load(self) -> list[dict]:
        if self._records is None:
            raise SnapshotError("No snapshot saved")
        return copy.deepcopy(self._records)

    def save(self, records: list[dict]) -> None:
        self._records = copy.deepcopy(records)
        self._save_count += 1


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_snapshot_store(
    use_file: bool = True,
    file_path: Path | str = "./kb.json",
    initial_records: list[dict] | None = None,
) -> SnapshotStore:
    """
    Factory function for snapshot stores.

    Args:
        use_file: If True, use FileSnapshotStore. If False, use InMemorySnapshotStore.
        file_path: Path for FileSnapshotStore.
        initial_records: Initial snapshot for InMemorySnapshotStore.

    Example:
        # Production
        store = get_snapshot_store(file_path=config.kb_path)

        # Testing
        store = get_snapshot_store(use_file=False, initial_records=[...])
    """
    if use_file:
        return FileSnapshotStore(file_path)
    return InMemorySnapshotStore(initial_records)
