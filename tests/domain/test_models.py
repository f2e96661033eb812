from dataclasses import FrozenInstanceError

import pytest

from kb_retriever.domain.models import IndexSnapshot, RetrievalResult, ScoreBreakdown
from kb_retriever.domain.services.indexing import create_chunk
from kb_retriever.domain.types import Result


def test_chunk_is_immutable():
    chunk = create_chunk("a.md", "alpha beta", 0, 3)
    with pytest.raises(FrozenInstanceError):
        chunk.text = "changed"  # type: ignore[misc]


def test_default_snapshot_is_empty_and_never_built():
    snapshot = IndexSnapshot()
    assert snapshot.is_empty
    assert snapshot.built_at is None
    assert snapshot.average_chunk_tokens == 0.0


def test_empty_result():
    result = RetrievalResult.empty()
    assert result.matches == ()
    assert result.citations == ()
    assert result.context_message is None


def test_score_breakdown_rounding():
    m = ScoreBreakdown(bm25=1.234567, phrase=0.7, ngram=0.333333, coverage=0.5)
    assert m.rounded().as_dict() == {"bm25": 1.2346, "phrase": 0.7, "ngram": 0.3333, "coverage": 0.5}


def test_result_success_and_failure():
    ok = Result.success([1, 2])
    assert ok.ok and ok.value == [1, 2] and ok.error is None
    err = Result.failure(ValueError("boom"))
    assert not err.ok and err.value is None
    assert isinstance(err.error, ValueError)
