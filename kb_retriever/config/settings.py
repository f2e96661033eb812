"""Application settings with environment-driven configuration.

Why: Single place that reads the environment; every numeric knob is clamped
to a sane range here so the domain never sees nonsense values.
"""

import math
import os
from dataclasses import dataclass, field

from kb_retriever.application.dto.retrieval_dto import RetrieverParams
from kb_retriever.domain.errors import ConfigurationError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _env_enabled(name: str) -> bool:
    # Opt-out flag: anything except "false" keeps the feature on
    return os.getenv(name, "true").strip().lower() != "false"


def _env_number(name: str, default: float, lo: float | None = None, hi: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        value = default
    else:
        try:
            value = float(raw)
        except ValueError as ex:
            raise ConfigurationError(f"{name} must be a number, got {raw!r}") from ex
        if not math.isfinite(value):
            raise ConfigurationError(f"{name} must be a finite number, got {raw!r}")
    if lo is not None:
        value = max(lo, value)
    if hi is not None:
        value = min(hi, value)
    return value


def _env_int(name: str, default: int, lo: int | None = None) -> int:
    return int(_env_number(name, default, lo))


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.

    Feature Flags:
    - enabled: turn the retriever off entirely (every query yields no matches)
    - serve_stale_on_error: keep serving the previous chunks when a rebuild fails
    - telemetry_enabled: export metrics through OpenTelemetry
    """

    # ===== Retriever =====
    enabled: bool = field(default_factory=lambda: _env_enabled("RAG_ENABLED"))
    knowledge_dir: str = field(default_factory=lambda: os.getenv("RAG_KNOWLEDGE_DIR", "knowledge"))

    top_k: int = field(default_factory=lambda: _env_int("RAG_TOP_K", 4, lo=1))
    min_score: float = field(default_factory=lambda: _env_number("RAG_MIN_SCORE", 0.8, lo=0))

    # ===== Indexing =====
    chunk_size: int = field(default_factory=lambda: _env_int("RAG_CHUNK_SIZE", 800, lo=200))
    cache_ttl_ms: int = field(default_factory=lambda: _env_int("RAG_CACHE_TTL_MS", 15000, lo=1000))
    ngram_size: int = field(default_factory=lambda: _env_int("RAG_NGRAM_SIZE", 3, lo=2))
    serve_stale_on_error: bool = field(
        default_factory=lambda: _env_bool("RAG_SERVE_STALE_ON_ERROR", "false")
    )

    # ===== Ranking =====
    bm25_k1: float = field(default_factory=lambda: _env_number("RAG_BM25_K1", 1.2, lo=0.2))
    bm25_b: float = field(default_factory=lambda: _env_number("RAG_BM25_B", 0.75, lo=0, hi=1))
    candidate_multiplier: float = field(
        default_factory=lambda: _env_number("RAG_CANDIDATE_MULTIPLIER", 8, lo=2)
    )
    mmr_lambda: float = field(default_factory=lambda: _env_number("RAG_MMR_LAMBDA", 0.78, lo=0, hi=1))

    # ===== Context =====
    context_max_chars: int = field(
        default_factory=lambda: _env_int("RAG_CONTEXT_MAX_CHARS", 4000, lo=800)
    )

    # ===== Telemetry Configuration =====
    telemetry_enabled: bool = field(default_factory=lambda: _env_bool("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export

    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )

    # ===== Logging =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    def __post_init__(self) -> None:
        if not self.knowledge_dir or not self.knowledge_dir.strip():
            raise ConfigurationError("RAG_KNOWLEDGE_DIR must not be empty")

    def retriever_params(self) -> RetrieverParams:
        return RetrieverParams(
            enabled=self.enabled,
            knowledge_dir=self.knowledge_dir,
            top_k=self.top_k,
            min_score=self.min_score,
            chunk_size=self.chunk_size,
            context_max_chars=self.context_max_chars,
            cache_ttl_ms=self.cache_ttl_ms,
            bm25_k1=self.bm25_k1,
            bm25_b=self.bm25_b,
            candidate_multiplier=self.candidate_multiplier,
            mmr_lambda=self.mmr_lambda,
            ngram_size=self.ngram_size,
            serve_stale_on_error=self.serve_stale_on_error,
        )
