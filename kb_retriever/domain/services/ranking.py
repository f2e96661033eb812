# kb_retriever/domain/services/ranking.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

from collections.abc import Sequence

from kb_retriever.domain.models import Chunk, ScoredCandidate
from kb_retriever.domain.similarity import clamp01, max_normalized_overlap

TOKEN_SIMILARITY_WEIGHT = 0.55
NGRAM_SIMILARITY_WEIGHT = 0.45


def chunk_similarity(left: Chunk, right: Chunk) -> float:
    """
    Redundancy between two chunks in [0, 1].
    Blend of token-set and n-gram-set overlap, each normalised by the larger set.
    """
    token_overlap = max_normalized_overlap(left.token_set, right.token_set)
    ngram_overlap = max_normalized_overlap(left.ngram_set, right.ngram_set)
    return clamp01(
        token_overlap * TOKEN_SIMILARITY_WEIGHT + ngram_overlap * NGRAM_SIMILARITY_WEIGHT
    )


def mmr(
    candidates: Sequence[ScoredCandidate],
    top_k: int,
    lambda_mult: float = 0.78,
) -> list[ScoredCandidate]:
    """
    Maximal Marginal Relevance (MMR) selection over lexical similarity.

    - Pools that already fit into top_k are returned unchanged (relevance order).
    - Relevance is normalised by max(best score, 1).
    - Ties go to the earliest candidate in pool order.
    - The selection is returned sorted by relevance, not by selection order.
    """
    if len(candidates) <= top_k:
        return list(candidates)
    if top_k <= 0:
        return []

    max_relevance = max(max(c.score for c in candidates), 1.0)
    selected: list[ScoredCandidate] = []
    remaining: list[ScoredCandidate] = list(candidates)

    while remaining and len(selected) < top_k:
        best_idx = 0
        best_score = float("-inf")

        for idx, cand in enumerate(remaining):
            relevance = cand.score / max_relevance
            redundancy = 0.0
            for chosen in selected:
                redundancy = max(redundancy, chunk_similarity(cand.chunk, chosen.chunk))
            score = lambda_mult * relevance - (1.0 - lambda_mult) * redundancy
            if score > best_score:
                best_score = score
                best_idx = idx

        selected.append(remaining.pop(best_idx))

    return sorted(selected, key=lambda c: c.score, reverse=True)
