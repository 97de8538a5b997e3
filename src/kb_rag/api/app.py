"""
HTTP API - FastAPI application factory.

Routes are thin: they unpack the request, call the knowledge base or the
pipeline, and shape the JSON reply. All components are created once per
app and kept on ``app.state``; handlers reach them through dependencies.

Startup (lifespan):
    1. load the knowledge base (snapshot or seed documents)
    2. backfill missing embeddings - a failure is logged, not fatal
       (both steps block, so they run in the threadpool)
    3. log the banner with the KB size
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kb_rag.api.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    IngestRequest,
    IngestResponse,
    KbEntry,
)
from kb_rag.config import ServiceConfig, get_config
from kb_rag.core.errors import PartialBatchFailure, RagError, ValidationError
from kb_rag.core.protocols import EmbeddingProvider, GenerationProvider, SnapshotStore
from kb_rag.rag.pipeline import RagPipeline
from kb_rag.retrieval.document import utc_timestamp
from kb_rag.retrieval.store import KnowledgeBase, get_knowledge_base

logger = logging.getLogger(__name__)

# Error replies are documented on every mutating route
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _close(provider: object) -> None:
    close = getattr(provider, "close", None)
    if callable(close):
        close()


# ---------------------------------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------------------------------


def get_kb(request: Request) -> KnowledgeBase:
    return request.app.state.knowledge_base


def get_pipeline(request: Request) -> RagPipeline:
    return request.app.state.pipeline


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: ServiceConfig = app.state.config
    kb: KnowledgeBase = app.state.knowledge_base

    await run_in_threadpool(kb.load)
    try:
        await run_in_threadpool(kb.backfill_embeddings)
    except PartialBatchFailure as e:
        logger.error(
            f"Startup backfill stopped after {e.completed}/{e.total} documents, "
            f"unembedded documents will not be ranked: {e}"
        )
    except RagError as e:
        logger.error(f"Startup backfill failed, unembedded documents will not be ranked: {e}")

    logger.info(f"RAG server running on http://{config.host}:{config.port}  |  KB chunks: {len(kb)}")
    try:
        yield
    finally:
        _close(app.state.embeddings)
        _close(app.state.generator)


# ---------------------------------------------------------------------------
# APP FACTORY
# ---------------------------------------------------------------------------


def create_app(
    config: ServiceConfig | None = None,
    embeddings: EmbeddingProvider | None = None,
    generator: GenerationProvider | None = None,
    snapshots: SnapshotStore | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Service configuration (global config if not provided)
        embeddings: Embedding provider (from config if not provided)
        generator: Generation provider (from config if not provided)
        snapshots: Snapshot store (file at config.kb_path if not provided)
    """
    config = config or get_config()

    if embeddings is None:
        from kb_rag.embeddings import get_embedding_provider

        embeddings = get_embedding_provider(config)
    if generator is None:
        from kb_rag.generation import get_generation_provider

        generator = get_generation_provider(config)

    knowledge_base = get_knowledge_base(config, embeddings=embeddings, snapshots=snapshots)

    app = FastAPI(
        title="kb-rag-service",
        description="Minimal retrieval-augmented generation over a small knowledge base",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.embeddings = embeddings
    app.state.generator = generator
    app.state.knowledge_base = knowledge_base
    app.state.pipeline = RagPipeline(knowledge_base, embeddings, generator)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "invalid request") if errors else "invalid request"
        return _error(400, message)

    @app.get("/health", response_model=HealthResponse)
    def health(kb: KnowledgeBase = Depends(get_kb)) -> dict:
        return {"status": "ok", "timestamp": utc_timestamp(), "kbSize": len(kb)}

    @app.get("/kb", response_model=list[KbEntry])
    def list_kb(kb: KnowledgeBase = Depends(get_kb)) -> list[dict]:
        return kb.list_documents()

    @app.post("/ingest", response_model=IngestResponse, responses=ERROR_RESPONSES)
    def ingest(body: IngestRequest, kb: KnowledgeBase = Depends(get_kb)):
        try:
            added = kb.ingest(body.documents or [])
        except PartialBatchFailure as e:
            logger.error(f"Ingest stopped after {e.completed}/{e.total} documents, snapshot not written: {e}")
            return _error(500, str(e))
        except Exception as e:
            logger.exception(f"Ingest failed: {e}")
            return _error(500, str(e))
        return {"added": added}

    @app.post("/chat", response_model=ChatResponse, responses=ERROR_RESPONSES)
    def chat(body: ChatRequest, pipeline: RagPipeline = Depends(get_pipeline)):
        try:
            result = pipeline.chat(body.query, body.top_k)
        except ValidationError as e:
            return _error(400, str(e))
        except Exception as e:
            logger.exception(f"Chat failed: {e}")
            return _error(500, str(e))
        return result.to_dict()

    return app
