from __future__ import annotations

import re
from dataclasses import dataclass

# ---------- Structure heuristics ----------

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
# Sentence ends: Latin and CJK terminators; the split keeps the terminator on the left
_SENT_END = re.compile(r"(?<=[。！？.!?])\s*")

PARAGRAPH_JOINER = "\n\n"
SENTENCE_JOINER = " "


@dataclass(frozen=True)
class ChunkingParams:
    max_chars: int = 800


def split_into_paragraphs(text: str) -> list[str]:
    """Paragraph split: blank lines separate paragraphs (CRLF tolerated)."""
    normalized = (text or "").replace("\r\n", "\n")
    return [p.strip() for p in _PARAGRAPH_BREAK.split(normalized) if p.strip()]


def split_into_sentences(paragraph: str) -> list[str]:
    """Split after every sentence terminator, dropping the whitespace in between."""
    return [s for s in _SENT_END.split(paragraph) if s]


def hard_slice(text: str, width: int) -> list[str]:
    """Last resort for a single sentence longer than the budget: fixed windows.

    Windows are stripped and blank ones dropped, so each slice re-chunks to itself.
    """
    windows = (text[i : i + width].strip() for i in range(0, len(text), width))
    return [w for w in windows if w]


class _ChunkPacker:
    """Running buffer shared by paragraph and sentence packing."""

    def __init__(self, max_chars: int) -> None:
        self.max_chars = max_chars
        self.current = ""
        self.chunks: list[str] = []

    def fits(self, piece: str, joiner: str) -> bool:
        return len((self.current + joiner + piece).strip()) <= self.max_chars

    def append(self, piece: str, joiner: str) -> None:
        self.current = (self.current + joiner + piece).strip()

    def flush(self) -> None:
        trimmed = self.current.strip()
        if trimmed:
            self.chunks.append(trimmed)
        self.current = ""

    def emit(self, piece: str) -> None:
        self.chunks.append(piece)


def split_into_chunks(text: str, params: ChunkingParams | None = None) -> list[str]:
    """Pipeline: paragraphs → (oversized) sentences → (oversized) hard slices.

    Paragraphs are packed into a buffer while it stays within `max_chars`.
    Oversized paragraphs are packed sentence by sentence into the same buffer;
    a sentence longer than `max_chars` is flushed out as fixed-width slices.
    """
    p = params or ChunkingParams()
    packer = _ChunkPacker(p.max_chars)

    for paragraph in split_into_paragraphs(text):
        if len(paragraph) > p.max_chars:
            for sentence in split_into_sentences(paragraph):
                if packer.fits(sentence, SENTENCE_JOINER):
                    packer.append(sentence, SENTENCE_JOINER)
                    continue
                packer.flush()
                if len(sentence) <= p.max_chars:
                    packer.current = sentence
                    continue
                for piece in hard_slice(sentence, p.max_chars):
                    packer.emit(piece)
            continue

        if packer.fits(paragraph, PARAGRAPH_JOINER):
            packer.append(paragraph, PARAGRAPH_JOINER)
        else:
            packer.flush()
            packer.current = paragraph

    packer.flush()
    return packer.chunks


# Properties:
#
# - No I/O, no globals, no external NLP libs.
# - Deterministic: identical text and max_chars always give identical chunks.
# - Idempotent: a text that already fits max_chars comes back as a single chunk.
