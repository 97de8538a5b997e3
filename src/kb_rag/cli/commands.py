"""
CLI commands - entry points for running and maintaining the service.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Do the work through the same objects the HTTP API uses
4. Print results
5. Return exit code
"""

from __future__ import annotations

import argparse
import json
import logging
import sys


def _load_env() -> None:
    """Load environment variables from .env file."""
    from dotenv import load_dotenv

    load_dotenv()


def _configure_logging() -> None:
    from kb_rag.config import get_config

    logging.basicConfig(
        level=get_config().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_knowledge_base():
    from kb_rag.retrieval import get_knowledge_base

    kb = get_knowledge_base()
    kb.load()
    return kb


def run_serve_cli() -> int:
    """Start the HTTP server."""
    import uvicorn

    from kb_rag.api import create_app
    from kb_rag.config import get_config

    parser = argparse.ArgumentParser(description="Run the RAG HTTP server")
    parser.add_argument("--host", help="Bind address (default: HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Listening port (default: PORT or 5000)")
    args = parser.parse_args()

    config = get_config()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def run_backfill_cli() -> int:
    """Embed any stored documents that have no embedding yet."""
    parser = argparse.ArgumentParser(description="Backfill missing embeddings")
    parser.parse_args()

    kb = _load_knowledge_base()
    embedded = kb.backfill_embeddings()
    print(f"Embedded {embedded} documents ({len(kb)} in knowledge base)")
    return 0


def run_ingest_cli() -> int:
    """Ingest documents from a JSON file."""
    parser = argparse.ArgumentParser(description="Ingest documents from a JSON file")
    parser.add_argument(
        "file",
        help='JSON file: {"documents": [{"id": ..., "text": ...}]} or a bare list',
    )
    args = parser.parse_args()

    try:
        with open(args.file, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Error: could not read {args.file}: {e}", file=sys.stderr)
        return 1
    documents = (payload.get("documents") or []) if isinstance(payload, dict) else payload
    if not isinstance(documents, list):
        print("Error: expected a list of documents", file=sys.stderr)
        return 1

    kb = _load_knowledge_base()
    added = kb.ingest(documents)
    print(f"Added {added} documents ({len(kb)} in knowledge base)")
    return 0


def run_list_cli() -> int:
    """Print the knowledge base (without embeddings) as JSON."""
    parser = argparse.ArgumentParser(description="List knowledge base documents")
    parser.parse_args()

    kb = _load_knowledge_base()
    print(json.dumps(kb.list_documents(), indent=2, ensure_ascii=False))
    return 0


def main() -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        kb-rag serve              # Run the HTTP server
        kb-rag backfill           # Embed documents missing an embedding
        kb-rag ingest docs.json   # Add documents from a file
        kb-rag list               # Print the knowledge base
    """
    from kb_rag.core.errors import RagError

    _load_env()
    _configure_logging()

    parser = argparse.ArgumentParser(
        description="Minimal RAG service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  serve       Run the HTTP server (/health, /kb, /ingest, /chat)
  backfill    Embed stored documents that have no embedding
  ingest      Embed and append documents from a JSON file
  list        Print stored documents (no embeddings)

Examples:
  kb-rag serve --port 8080
  kb-rag ingest docs.json
        """,
    )

    parser.add_argument(
        "command",
        choices=["serve", "backfill", "ingest", "list"],
        help="Command to run",
    )

    # Parse just the command first
    args, remaining = parser.parse_known_args()

    commands = {
        "serve": run_serve_cli,
        "backfill": run_backfill_cli,
        "ingest": run_ingest_cli,
        "list": run_list_cli,
    }

    # Re-inject remaining args for the subcommand
    sys.argv = [sys.argv[0]] + remaining

    try:
        return commands[args.command]()
    except RagError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
