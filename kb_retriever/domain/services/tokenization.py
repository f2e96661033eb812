# kb_retriever/domain/services/tokenization.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

import re

from kb_retriever.domain.models import QueryFeatures

_LATIN_TOKEN = re.compile(r"[a-z0-9_]{2,}")
_CJK_CHAR = re.compile(r"[\u4e00-\u9fff]")
_CJK_RUN = re.compile(r"[\u4e00-\u9fff]{2,}")
_CJK_ONLY = re.compile(r"^[\u4e00-\u9fff]+$")
_WHITESPACE = re.compile(r"\s+")

# Query phrase candidates
_CJK_PHRASE = re.compile(r"[\u4e00-\u9fff]{3,}")
_LONG_WORD = re.compile(r"[a-z0-9_]{5,}")

MAX_CJK_BLOCK_TOKEN = 8
MAX_QUERY_PHRASES = 10
MIN_WHOLE_QUERY_PHRASE = 8


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run into one space and trim the ends."""
    return _WHITESPACE.sub(" ", text or "").strip()


def tokenize(text: str) -> list[str]:
    """Multi-granularity token stream.

    ASCII words (length >= 2) first, then every CJK ideograph on its own, then
    each CJK run as a whole (up to 8 chars) followed by its overlapping bigrams.

    Examples:
        >>> tokenize("BM25 scoring")
        ['bm25', 'scoring']
        >>> tokenize("知识库")
        ['知', '识', '库', '知识库', '知识', '识库']
    """
    lowered = (text or "").lower()
    tokens: list[str] = _LATIN_TOKEN.findall(lowered)
    tokens.extend(_CJK_CHAR.findall(lowered))
    for block in _CJK_RUN.findall(lowered):
        if len(block) <= MAX_CJK_BLOCK_TOKEN:
            tokens.append(block)
        tokens.extend(block[i : i + 2] for i in range(len(block) - 1))
    return tokens


def token_weight(token: str) -> float:
    """Bias towards specific terms: CJK words and long Latin words weigh more."""
    if _CJK_ONLY.match(token):
        return 1.35 if len(token) >= 2 else 0.8
    if len(token) >= 6:
        return 1.25
    return 1.0


def build_char_ngrams(text: str, size: int) -> frozenset[str]:
    """Character n-grams of the lower-cased text with all whitespace removed.

    Strings not longer than `size` yield themselves as the only n-gram.
    """
    normalized = _WHITESPACE.sub("", (text or "").lower())
    if not normalized:
        return frozenset()
    if len(normalized) <= size:
        return frozenset({normalized})
    return frozenset(normalized[i : i + size] for i in range(len(normalized) - size + 1))


def extract_phrases(normalized_query: str) -> tuple[str, ...]:
    """Literal substrings worth a phrase bonus, first-seen order, at most 10."""
    phrases: list[str] = []
    if len(normalized_query) >= MIN_WHOLE_QUERY_PHRASE:
        phrases.append(normalized_query)
    phrases.extend(_CJK_PHRASE.findall(normalized_query))
    phrases.extend(_LONG_WORD.findall(normalized_query))
    return tuple(dict.fromkeys(phrases))[:MAX_QUERY_PHRASES]


def build_query_features(query: str, ngram_size: int) -> QueryFeatures:
    normalized = normalize_whitespace(query).lower()
    return QueryFeatures(
        text=normalized,
        unique_tokens=tuple(dict.fromkeys(tokenize(normalized))),
        ngrams=build_char_ngrams(normalized, ngram_size),
        phrases=extract_phrases(normalized),
    )
