from typing import List, Sequence, Tuple

import numpy as np


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of `query` against each row of `matrix`.

    Equals `1 - cosine_distance`. Rows (or a query) with zero norm get
    similarity 0 instead of NaN.
    """
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)

    if m.ndim != 2 or m.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)

    if m.shape[1] != q.shape[0]:
        raise ValueError(f"Query has {q.shape[0]} dimensions, matrix has {m.shape[1]}")

    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    dots = m @ q

    sims = np.zeros(m.shape[0], dtype=np.float64)
    nonzero = norms > 0
    sims[nonzero] = dots[nonzero] / norms[nonzero]
    return sims


def rank_by_cosine(query: Sequence[float], matrix: np.ndarray, k: int) -> List[Tuple[int, float]]:
    """
    Return up to `k` (row index, similarity) pairs, most similar first.

    Equal similarities keep row order, so earlier-inserted rows win ties.
    """
    if k <= 0:
        raise ValueError("k must be positive")

    sims = cosine_similarities(query, matrix)
    if sims.size == 0:
        return []

    order = np.argsort(-sims, kind="stable")[:k]
    return [(int(i), float(sims[i])) for i in order]
