"""
RAG module - prompt assembly and the retrieve-then-generate pipeline.
"""

from kb_rag.rag.prompts import PROMPT_TEMPLATE, build_context, build_prompt
from kb_rag.rag.pipeline import ChatResult, RagPipeline

__all__ = [
    "PROMPT_TEMPLATE",
    "build_context",
    "build_prompt",
    "ChatResult",
    "RagPipeline",
]
