"""Shared test doubles for ports (clock, document source, telemetry)."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from kb_retriever.application.dto.retrieval_dto import RetrieverParams
from kb_retriever.application.ports.clock_port import ClockPort
from kb_retriever.domain.errors import DocumentError
from kb_retriever.domain.models import ScoreBreakdown, ScoredCandidate
from kb_retriever.domain.services.indexing import create_chunk
from kb_retriever.domain.types import Result


class FakeClock(ClockPort):
    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += timedelta(milliseconds=ms)


class FakeDocumentSource:
    def __init__(
        self,
        files: dict[str, str] | None = None,
        unreadable: set[str] | None = None,
        missing: bool = False,
    ) -> None:
        self.files = dict(files or {})
        self.unreadable = set(unreadable or ())
        self.missing = missing
        self.list_calls = 0

    @property
    def location(self) -> str:
        return "memory://knowledge"

    def list_documents(self) -> Result[list[str], DocumentError]:
        self.list_calls += 1
        if self.missing:
            return Result.failure(DocumentError("knowledge directory not found", self.location))
        return Result.success(sorted(set(self.files) | self.unreadable))

    def read_text(self, source: str) -> Result[str, DocumentError]:
        if source in self.unreadable:
            return Result.failure(DocumentError("read failed (PermissionError)", source))
        return Result.success(self.files[source])


class FakeTelemetry:
    def __init__(self) -> None:
        self.counters: list[tuple[str, dict[str, Any] | None]] = []
        self.observations: list[tuple[str, float, dict[str, Any] | None]] = []

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        self.counters.append((name, tags))

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.observations.append((name, value, tags))


def make_candidate(text: str, score: float, source: str = "doc.md", ordinal: int = 0) -> ScoredCandidate:
    chunk = create_chunk(source, text, ordinal, ngram_size=3)
    assert chunk is not None
    return ScoredCandidate(
        chunk=chunk,
        score=score,
        metrics=ScoreBreakdown(bm25=score, phrase=0.0, ngram=0.0, coverage=0.0),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def telemetry() -> FakeTelemetry:
    return FakeTelemetry()


@pytest.fixture
def params() -> RetrieverParams:
    return RetrieverParams()


@pytest.fixture
def policy_source() -> FakeDocumentSource:
    return FakeDocumentSource(
        {
            "policy.md": (
                "Vacation requests must be submitted 2 weeks in advance.\n\n"
                "Sick leave does not require advance notice.\n"
            )
        }
    )


@pytest.fixture
def candidate():
    """Factory: candidate(text, score, source="doc.md", ordinal=0) -> ScoredCandidate."""
    return make_candidate


@pytest.fixture
def make_source():
    """Factory for FakeDocumentSource."""
    return FakeDocumentSource
