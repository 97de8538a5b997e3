"""
API module - the FastAPI application exposing /health, /kb, /ingest and /chat.
"""

from kb_rag.api.app import create_app

__all__ = ["create_app"]
