"""Cosine similarity between query and stored embeddings."""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray


def cosine_similarity(
    vec_a: Sequence[float] | NDArray[np.floating],
    vec_b: Sequence[float] | NDArray[np.floating],
) -> float:
    """Return the cosine of the angle between two vectors, in [-1, 1].

    Vectors of different length (stored and query embeddings produced by
    different model versions) and zero-norm vectors score 0.0 rather than
    raising or producing NaN.
    """
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.shape != b.shape:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))
