"""Pure rendering of ranked chunks for the caller.

Functions:
- build_context_message: numbered, source-annotated snippets within a char budget
- collect_citations: unique sources in match order
- to_matches: public match records
"""

from __future__ import annotations

from collections.abc import Sequence

from kb_retriever.domain.models import Citation, RetrievalMatch, ScoredCandidate

CONTEXT_PREAMBLE = (
    "You have access to internal knowledge snippets below.",
    "Use them when relevant. If used, cite the source path in plain text like [path/to/file.md].",
    "",
)
CONTEXT_HEADER = "\n".join(CONTEXT_PREAMBLE) + "\n"


def render_block(position: int, candidate: ScoredCandidate) -> str:
    return f"[{position}] Source: {candidate.chunk.source}\n{candidate.chunk.text}\n"


def build_context_message(ranked: Sequence[ScoredCandidate], max_chars: int) -> str | None:
    """Render snippets until the next block would exceed `max_chars`.

    The budget covers the blocks and the newlines joining them; the fixed
    instruction header comes on top.

    Returns:
        Header plus the blocks that fit, or None if nothing fits.
    """
    if not ranked:
        return None

    sections: list[str] = []
    consumed = 0
    for position, candidate in enumerate(ranked, 1):
        block = render_block(position, candidate)
        cost = len(block) + (1 if sections else 0)
        if consumed + cost > max_chars:
            break
        sections.append(block)
        consumed += cost

    if not sections:
        return None
    return CONTEXT_HEADER + "\n".join(sections)


def collect_citations(ranked: Sequence[ScoredCandidate]) -> tuple[Citation, ...]:
    seen: dict[str, Citation] = {}
    for candidate in ranked:
        seen.setdefault(candidate.chunk.source, Citation(source=candidate.chunk.source))
    return tuple(seen.values())


def to_matches(ranked: Sequence[ScoredCandidate]) -> tuple[RetrievalMatch, ...]:
    return tuple(
        RetrievalMatch(
            source=c.chunk.source,
            text=c.chunk.text,
            score=round(c.score, 4),
            metrics=c.metrics,
        )
        for c in ranked
    )
