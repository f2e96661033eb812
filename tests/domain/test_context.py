from kb_retriever.domain.models import Citation
from kb_retriever.domain.services.context import (
    CONTEXT_HEADER,
    build_context_message,
    collect_citations,
    render_block,
    to_matches,
)


def test_empty_ranking_has_no_context():
    assert build_context_message([], 4000) is None


def test_blocks_are_numbered_with_sources(candidate):
    ranked = [candidate("Alpha text.", 3.0, source="a.md"), candidate("Beta text.", 2.0, source="b.md")]
    msg = build_context_message(ranked, 4000)

    assert msg is not None
    assert msg.startswith(CONTEXT_HEADER)
    assert "cite" in CONTEXT_HEADER
    assert "[1] Source: a.md\nAlpha text.\n" in msg
    assert "[2] Source: b.md\nBeta text.\n" in msg


def test_budget_stops_at_first_block_that_does_not_fit(candidate):
    ranked = [
        candidate("short one", 3.0, source="a.md"),
        candidate("xy " * 400, 2.0, source="b.md"),
        candidate("short two", 1.0, source="c.md"),
    ]
    msg = build_context_message(ranked, 100)

    assert msg is not None
    assert "a.md" in msg
    assert "b.md" not in msg
    assert "c.md" not in msg


def test_nothing_fits_returns_none(candidate):
    assert build_context_message([candidate("word " * 100, 1.0)], 50) is None


def test_message_never_exceeds_budget_plus_header(candidate):
    ranked = [candidate(f"snippet number {i} " * 5, 10.0 - i, source=f"{i}.md") for i in range(10)]
    for budget in (60, 150, 333, 800):
        msg = build_context_message(ranked, budget)
        if msg is not None:
            assert len(msg) - len(CONTEXT_HEADER) <= budget


def test_render_block_format(candidate):
    assert render_block(3, candidate("Text.", 1.0, source="k/x.md")) == "[3] Source: k/x.md\nText.\n"


def test_citations_unique_in_match_order(candidate):
    ranked = [
        candidate("one", 3.0, source="b.md"),
        candidate("two", 2.0, source="a.md", ordinal=1),
        candidate("three", 1.0, source="b.md", ordinal=2),
    ]
    assert collect_citations(ranked) == (Citation("b.md"), Citation("a.md"))


def test_matches_round_scores(candidate):
    (match,) = to_matches([candidate("Alpha text.", 1.234567, source="a.md")])
    assert match.source == "a.md"
    assert match.text == "Alpha text."
    assert match.score == 1.2346
