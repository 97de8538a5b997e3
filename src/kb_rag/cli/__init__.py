"""
CLI module - unified command-line interface.

Provides entry points for:
- Serving the HTTP API
- Backfilling embeddings
- Ingesting and listing documents
"""

from kb_rag.cli.commands import (
    main,
    run_serve_cli,
    run_backfill_cli,
    run_ingest_cli,
    run_list_cli,
)

__all__ = [
    "main",
    "run_serve_cli",
    "run_backfill_cli",
    "run_ingest_cli",
    "run_list_cli",
]
