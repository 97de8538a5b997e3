"""
kb_rag - minimal retrieval-augmented generation service.

Documents live in a small in-memory knowledge base persisted as a JSON
snapshot. Queries are embedded, ranked against the stored embeddings by
cosine similarity, and the best matches are handed to a generation model
together with the question.
"""

__version__ = "0.1.0"
