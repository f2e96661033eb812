# kb_retriever/application/dto/retrieval_dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetrieverParams:
    """
    Tunables of the retrieval pipeline (already clamped by the settings layer).

    - top_k:                final number of matches
    - min_score:            combined score below which a chunk is not a candidate
    - chunk_size:           max characters per chunk
    - context_max_chars:    budget of the rendered context message (preamble excluded)
    - cache_ttl_ms:         age after which the index snapshot is rebuilt
    - bm25_k1, bm25_b:      BM25 saturation and length normalisation
    - candidate_multiplier: candidate pool = top_k * multiplier before MMR
    - mmr_lambda:           1.0 = pure relevance, 0.0 = pure anti-redundancy
    - ngram_size:           character n-gram length for fuzzy matching
    - serve_stale_on_error: keep the previous chunks when a rebuild fails
    """

    enabled: bool = True
    knowledge_dir: str = "knowledge"
    top_k: int = 4
    min_score: float = 0.8
    chunk_size: int = 800
    context_max_chars: int = 4000
    cache_ttl_ms: int = 15000
    bm25_k1: float = 1.2
    bm25_b: float = 0.75
    candidate_multiplier: float = 8
    mmr_lambda: float = 0.78
    ngram_size: int = 3
    serve_stale_on_error: bool = False


@dataclass(frozen=True)
class RetrieverStatus:
    """Health/introspection view of the retriever."""

    enabled: bool
    retriever: str
    knowledge_dir: str
    files: int
    chunks: int
    average_chunk_tokens: float
    top_k: int
    min_score: float
    mmr_lambda: float
    last_error: str | None
    loaded_at: str | None
