# kb_retriever/application/use_cases/retrieve_knowledge.py
from __future__ import annotations

import time

from kb_retriever.application.dto.retrieval_dto import RetrieverParams, RetrieverStatus
from kb_retriever.application.ports.telemetry_port import TelemetryPort
from kb_retriever.application.use_cases.index_cache import IndexCache
from kb_retriever.domain.models import RetrievalResult
from kb_retriever.domain.services.context import (
    build_context_message,
    collect_citations,
    to_matches,
)
from kb_retriever.domain.services.ranking import mmr
from kb_retriever.domain.services.relevance_scoring import (
    Bm25Params,
    candidate_limit,
    score_candidates,
)
from kb_retriever.domain.services.tokenization import build_query_features

RETRIEVER_NAME = "hybrid-bm25-mmr"


class RetrieveKnowledge:
    """
    Application use case answering one free-text query per call.

    Pipeline: query features → score every chunk of the cached snapshot →
    candidate pool → MMR → citations + context message.
    Never raises for data-quality issues; degraded states yield an empty result.
    """

    def __init__(
        self,
        cache: IndexCache,
        params: RetrieverParams,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.cache = cache
        self.params = params
        self.telemetry = telemetry

    def retrieve(self, query: str) -> RetrievalResult:
        started = time.perf_counter()
        result = self._retrieve(query)
        if self.telemetry is not None:
            tags = {"matched": str(bool(result.matches)).lower()}
            self.telemetry.incr("rag.queries.total", tags)
            self.telemetry.observe(
                "rag.query.latency_ms", (time.perf_counter() - started) * 1000, tags
            )
            self.telemetry.observe("rag.query.matches", len(result.matches), tags)
        return result

    def status(self) -> RetrieverStatus:
        snapshot = self.cache.ensure_fresh()
        return RetrieverStatus(
            enabled=self.params.enabled,
            retriever=RETRIEVER_NAME,
            knowledge_dir=self.params.knowledge_dir,
            files=snapshot.file_count,
            chunks=len(snapshot.chunks),
            average_chunk_tokens=round(snapshot.average_chunk_tokens, 2),
            top_k=self.params.top_k,
            min_score=self.params.min_score,
            mmr_lambda=self.params.mmr_lambda,
            last_error=snapshot.last_error,
            loaded_at=snapshot.built_at.isoformat() if snapshot.built_at else None,
        )

    def _retrieve(self, query: str) -> RetrievalResult:
        # 1) Validate
        safe_query = (query or "").strip()
        if not self.params.enabled or not safe_query:
            return RetrievalResult.empty()

        # 2) Snapshot (rebuilds on expiry, never raises)
        snapshot = self.cache.ensure_fresh()
        if snapshot.is_empty:
            return RetrievalResult.empty()

        # 3) Query features
        features = build_query_features(safe_query, self.params.ngram_size)
        if not features.unique_tokens:
            return RetrievalResult.empty()

        # 4) Score & bound the candidate pool
        limit = candidate_limit(
            len(snapshot.chunks), self.params.top_k, self.params.candidate_multiplier
        )
        pool = score_candidates(
            snapshot,
            features,
            Bm25Params(k1=self.params.bm25_k1, b=self.params.bm25_b),
            min_score=self.params.min_score,
            limit=limit,
        )

        # 5) Diversify
        ranked = mmr(pool, self.params.top_k, self.params.mmr_lambda)

        # 6) Render
        return RetrievalResult(
            matches=to_matches(ranked),
            citations=collect_citations(ranked),
            context_message=build_context_message(ranked, self.params.context_max_chars),
        )
