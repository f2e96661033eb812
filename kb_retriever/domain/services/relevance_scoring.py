# kb_retriever/domain/services/relevance_scoring.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

import math
from dataclasses import dataclass

from kb_retriever.domain.models import (
    Chunk,
    IndexSnapshot,
    QueryFeatures,
    ScoreBreakdown,
    ScoredCandidate,
)
from kb_retriever.domain.services.tokenization import MIN_WHOLE_QUERY_PHRASE, token_weight
from kb_retriever.domain.similarity import cosine_set_similarity

NGRAM_WEIGHT = 2.2
COVERAGE_WEIGHT = 1.2

LONG_PHRASE_BONUS = 1.5
SHORT_PHRASE_BONUS = 0.7
WHOLE_QUERY_BONUS = 2.0
LONG_PHRASE_MIN = 8
SHORT_PHRASE_MIN = 3


@dataclass(frozen=True)
class Bm25Params:
    k1: float = 1.2
    b: float = 0.75


def bm25_term(tf: int, df: int, total_docs: int, doc_len: int, avg_len: float, p: Bm25Params) -> float:
    """Unweighted BM25 contribution of one term.

    Args:
        tf: Term frequency in the chunk (0 contributes nothing)
        df: Number of chunks containing the term
        total_docs: Number of chunks in the snapshot
        doc_len: Token count of the chunk
        avg_len: Mean token count over the snapshot
        p: k1/b parameters

    Returns:
        idf * tf*(k1+1) / (tf + k1*(1 - b + b*doc_len/avg_len))
    """
    if tf <= 0:
        return 0.0
    idf = math.log(1 + (total_docs - df + 0.5) / (df + 0.5))
    numerator = tf * (p.k1 + 1)
    denominator = tf + p.k1 * (1 - p.b + p.b * doc_len / avg_len)
    return idf * numerator / max(denominator, 1e-9)


def bm25_score(
    chunk: Chunk, features: QueryFeatures, snapshot: IndexSnapshot, p: Bm25Params
) -> float:
    total_docs = max(1, len(snapshot.chunks))
    avg_len = max(1.0, snapshot.average_chunk_tokens)
    score = 0.0
    for token in features.unique_tokens:
        tf = chunk.token_freq.get(token, 0)
        if tf <= 0:
            continue
        df = snapshot.document_frequency.get(token, 0)
        score += bm25_term(tf, df, total_docs, chunk.token_count, avg_len, p) * token_weight(token)
    return score


def phrase_score(chunk: Chunk, features: QueryFeatures) -> float:
    score = 0.0
    for phrase in features.phrases:
        if len(phrase) < SHORT_PHRASE_MIN:
            continue
        if phrase in chunk.lower_text:
            score += LONG_PHRASE_BONUS if len(phrase) >= LONG_PHRASE_MIN else SHORT_PHRASE_BONUS
    if len(features.text) >= MIN_WHOLE_QUERY_PHRASE and features.text in chunk.lower_text:
        score += WHOLE_QUERY_BONUS
    return score


def ngram_similarity(chunk: Chunk, features: QueryFeatures) -> float:
    return cosine_set_similarity(features.ngrams, chunk.ngram_set)


def query_coverage(chunk: Chunk, features: QueryFeatures) -> float:
    """Fraction of distinct query tokens that occur anywhere in the chunk."""
    if not features.unique_tokens:
        return 0.0
    matched = sum(1 for token in features.unique_tokens if token in chunk.token_set)
    return matched / len(features.unique_tokens)


def score_chunk(
    chunk: Chunk, features: QueryFeatures, snapshot: IndexSnapshot, p: Bm25Params
) -> tuple[float, ScoreBreakdown]:
    """Combine the four signals: bm25 + phrase + 2.2*ngram + 1.2*coverage."""
    metrics = ScoreBreakdown(
        bm25=bm25_score(chunk, features, snapshot, p),
        phrase=phrase_score(chunk, features),
        ngram=ngram_similarity(chunk, features),
        coverage=query_coverage(chunk, features),
    )
    score = (
        metrics.bm25
        + metrics.phrase
        + metrics.ngram * NGRAM_WEIGHT
        + metrics.coverage * COVERAGE_WEIGHT
    )
    return score, metrics


def candidate_limit(total_chunks: int, top_k: int, multiplier: float) -> int:
    """Size of the pool handed to diversification."""
    return min(total_chunks, int(max(top_k, top_k * multiplier)))


def score_candidates(
    snapshot: IndexSnapshot,
    features: QueryFeatures,
    p: Bm25Params,
    min_score: float,
    limit: int,
) -> list[ScoredCandidate]:
    """Score every chunk, drop those under `min_score`, keep the best `limit`.

    Sorting is stable, so equal scores keep index order.
    """
    scored: list[ScoredCandidate] = []
    for chunk in snapshot.chunks:
        score, metrics = score_chunk(chunk, features, snapshot, p)
        if score >= min_score:
            scored.append(ScoredCandidate(chunk=chunk, score=score, metrics=metrics.rounded()))
    scored.sort(key=lambda c: c.score, reverse=True)
    return scored[:limit]
