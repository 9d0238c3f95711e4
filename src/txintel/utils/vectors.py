"""Vector similarity utilities."""

from collections.abc import Sequence

import numpy as np


def cosine_similarities(query: Sequence[float], candidates: Sequence[Sequence[float]]) -> np.ndarray:
    """Compute cosine similarity between ``query`` and each candidate vector.

    Candidates whose length differs from the query, or zero vectors, score 0.

    Args:
        query: Query vector
        candidates: Candidate vectors

    Returns:
        Array of similarities, one per candidate, in candidate order
    """
    q = np.asarray(query, dtype=float)
    scores = np.zeros(len(candidates), dtype=float)
    q_norm = np.linalg.norm(q)
    if q_norm == 0 or len(candidates) == 0:
        return scores

    same_dim = [i for i, c in enumerate(candidates) if len(c) == len(q)]
    if not same_dim:
        return scores

    matrix = np.asarray([candidates[i] for i in same_dim], dtype=float)
    norms = np.linalg.norm(matrix, axis=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = matrix @ q / (norms * q_norm)
    scores[same_dim] = np.nan_to_num(sims, nan=0.0, posinf=0.0, neginf=0.0)
    return scores
