"""
Prompt assembly for grounded answers.

The model only sees the retrieved documents, each tagged with its id,
so answers can be traced back to the sources returned alongside them.
"""

from __future__ import annotations

from kb_rag.core.protocols import ScoredDocument

CONTEXT_SEPARATOR = "\n---\n"

# Template - the answer must stay inside the retrieved context
PROMPT_TEMPLATE = """You are a helpful assistant. Use the CONTEXT to answer clearly.
If the answer is not in the context, say you are not sure.

CONTEXT:
{context}

USER: {query}
ASSISTANT:"""


def build_context(sources: list[ScoredDocument]) -> str:
    """Render sources as ``[id] text`` blocks separated by ``---``."""
    return CONTEXT_SEPARATOR.join(f"[{s.document.id}] {s.document.text}" for s in sources)


def build_prompt(query: str, sources: list[ScoredDocument]) -> str:
    return PROMPT_TEMPLATE.format(context=build_context(sources), query=query)
