# kb_retriever/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from kb_retriever.domain.types import Score, Token


@dataclass(frozen=True)
class Chunk:
    """
    Immutable indexed span of one knowledge document.

    - id:          "<source>#<ordinal>" (ordinal = position inside the source file)
    - source:      document identity (path relative to the knowledge root, "/"-separated)
    - text:        whitespace-collapsed chunk text
    - lower_text:  lower-cased `text`, used for literal phrase lookups
    - token_freq:  token -> occurrences inside the chunk
    - token_set:   distinct tokens
    - ngram_set:   character n-grams of the whitespace-stripped text
    - token_count: total number of tokens (always >= 1)
    """

    id: str
    source: str
    text: str
    lower_text: str
    token_freq: Mapping[Token, int]
    token_set: frozenset[Token]
    ngram_set: frozenset[str]
    token_count: int


@dataclass(frozen=True)
class IndexSnapshot:
    """
    Immutable index built from one pass over the document source.

    The cache swaps whole snapshots; a snapshot is never mutated after construction,
    so queries holding a reference keep a consistent view during a rebuild.
    """

    chunks: tuple[Chunk, ...] = ()
    document_frequency: Mapping[Token, int] = field(default_factory=dict)
    average_chunk_tokens: float = 0.0
    file_count: int = 0
    built_at: datetime | None = None
    last_error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.chunks


@dataclass(frozen=True)
class QueryFeatures:
    """Per-request features derived from the raw query text."""

    text: str
    unique_tokens: tuple[Token, ...]
    ngrams: frozenset[str]
    phrases: tuple[str, ...]


@dataclass(frozen=True)
class ScoreBreakdown:
    """The four relevance signals of one (query, chunk) pair."""

    bm25: Score
    phrase: Score
    ngram: Score
    coverage: Score

    def rounded(self, digits: int = 4) -> "ScoreBreakdown":
        return ScoreBreakdown(
            bm25=round(self.bm25, digits),
            phrase=round(self.phrase, digits),
            ngram=round(self.ngram, digits),
            coverage=round(self.coverage, digits),
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "bm25": self.bm25,
            "phrase": self.phrase,
            "ngram": self.ngram,
            "coverage": self.coverage,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """A chunk with its combined score; lives for one retrieval call."""

    chunk: Chunk
    score: Score
    metrics: ScoreBreakdown


@dataclass(frozen=True)
class RetrievalMatch:
    source: str
    text: str
    score: Score
    metrics: ScoreBreakdown


@dataclass(frozen=True)
class Citation:
    """Citation reference for an injected snippet."""

    source: str


@dataclass(frozen=True)
class RetrievalResult:
    matches: tuple[RetrievalMatch, ...] = ()
    citations: tuple[Citation, ...] = ()
    context_message: str | None = None

    @staticmethod
    def empty() -> "RetrievalResult":
        return RetrievalResult()
