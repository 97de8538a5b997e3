"""
Request and response schemas for the HTTP API.

Request models are deliberately lenient: a missing query or a document
without an id must reach the handlers (400 / skipped item) instead of
being rejected by FastAPI's own validation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# REQUESTS
# ---------------------------------------------------------------------------


class IngestDocument(BaseModel):
    """
    One item of an ingest batch. Items lacking id or text are skipped.

    Numeric ids are accepted and stored as strings: 7 becomes "7".
    """

    id: str | None = None
    text: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def numeric_id_to_str(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class IngestRequest(BaseModel):
    documents: list[IngestDocument] | None = Field(
        default=None,
        description="Documents to embed and append",
    )


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str | None = Field(default=None, description="User question (required, non-blank)")
    top_k: int | None = Field(
        default=None,
        alias="topK",
        description="Number of sources to retrieve (default 3)",
    )


# ---------------------------------------------------------------------------
# RESPONSES
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    kbSize: int


class KbEntry(BaseModel):
    id: str
    text: str
    timestamp: str


class IngestResponse(BaseModel):
    added: int


class Source(BaseModel):
    id: str
    score: float = Field(description="Cosine similarity rounded to 4 decimals")
    timestamp: str


class ChatResponse(BaseModel):
    response: str
    elapsed: float = Field(description="Seconds spent in the generation call")
    sources: list[Source]


class ErrorResponse(BaseModel):
    error: str
