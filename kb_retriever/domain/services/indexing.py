"""Pure index construction: chunk records plus corpus-wide BM25 statistics.

Why (SAM): Building a snapshot from already-loaded text is deterministic and
free of I/O; the cache use case feeds it whatever the document source returned.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from kb_retriever.domain.models import Chunk, IndexSnapshot
from kb_retriever.domain.services.chunking import ChunkingParams, split_into_chunks
from kb_retriever.domain.services.tokenization import (
    build_char_ngrams,
    normalize_whitespace,
    tokenize,
)


@dataclass(frozen=True)
class SourceDocument:
    """Loaded document: identity (relative path) and its UTF-8 text."""

    source: str
    text: str


def create_chunk(source: str, text: str, ordinal: int, ngram_size: int) -> Chunk | None:
    """Build an immutable chunk, or None when the span is empty or token-less."""
    normalized = normalize_whitespace(text)
    if not normalized:
        return None
    tokens = tokenize(normalized)
    if not tokens:
        return None
    token_freq = Counter(tokens)
    return Chunk(
        id=f"{source}#{ordinal}",
        source=source,
        text=normalized,
        lower_text=normalized.lower(),
        token_freq=dict(token_freq),
        token_set=frozenset(token_freq),
        ngram_set=build_char_ngrams(normalized, ngram_size),
        token_count=len(tokens),
    )


def chunk_document(doc: SourceDocument, chunk_size: int, ngram_size: int) -> list[Chunk]:
    chunks: list[Chunk] = []
    parts = split_into_chunks(doc.text, ChunkingParams(max_chars=chunk_size))
    for ordinal, part in enumerate(parts):
        chunk = create_chunk(doc.source, part, ordinal, ngram_size)
        if chunk is not None:
            chunks.append(chunk)
    return chunks


def build_index_stats(chunks: Sequence[Chunk]) -> tuple[dict[str, int], float]:
    """Document frequency per token and mean token count per chunk.

    Returns:
        (document_frequency, average_chunk_tokens); average is 0.0 for no chunks
    """
    df: Counter[str] = Counter()
    total_tokens = 0
    for chunk in chunks:
        total_tokens += chunk.token_count
        df.update(chunk.token_set)
    average = total_tokens / len(chunks) if chunks else 0.0
    return dict(df), average


def build_snapshot(
    documents: Iterable[SourceDocument],
    chunk_size: int,
    ngram_size: int,
    file_count: int,
    built_at: datetime,
) -> IndexSnapshot:
    chunks: list[Chunk] = []
    for doc in documents:
        chunks.extend(chunk_document(doc, chunk_size, ngram_size))
    df, average = build_index_stats(chunks)
    return IndexSnapshot(
        chunks=tuple(chunks),
        document_frequency=df,
        average_chunk_tokens=average,
        file_count=file_count,
        built_at=built_at,
        last_error=None,
    )


def empty_snapshot(built_at: datetime, last_error: str | None = None) -> IndexSnapshot:
    return IndexSnapshot(built_at=built_at, last_error=last_error)
