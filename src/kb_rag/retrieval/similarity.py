"""
Cosine similarity between two embedding vectors.

The denominator carries a small epsilon so a zero vector scores 0.0
instead of dividing by zero.
"""

from typing import Sequence

import numpy as np

EPSILON = 1e-9


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between ``a`` and ``b``.

    Both vectors must have the same length; a mismatch raises ValueError.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector dimensions differ: {va.shape[0]} vs {vb.shape[0]}")
    return float(np.dot(va, vb) / (np.linalg.norm(va) * np.linalg.norm(vb) + EPSILON))
