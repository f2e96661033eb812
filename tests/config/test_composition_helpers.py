"""Tests for the composition root (wiring of adapters into use cases)."""

from pathlib import Path

from kb_retriever.application.use_cases.retrieve_knowledge import RetrieveKnowledge
from kb_retriever.config.composition import (
    build_document_source,
    build_index_cache,
    build_retriever,
    build_telemetry,
)
from kb_retriever.config.settings import AppSettings
from kb_retriever.infrastructure.documents.filesystem_source import FilesystemDocumentSource
from kb_retriever.infrastructure.telemetry.otel_adapter import NoopTelemetry, OpenTelemetryAdapter


def test_disabled_telemetry_builds_noop(monkeypatch):
    monkeypatch.delenv("TELEMETRY_ENABLED", raising=False)
    assert isinstance(build_telemetry(AppSettings()), NoopTelemetry)


def test_enabled_telemetry_builds_otel_adapter(monkeypatch):
    monkeypatch.setenv("TELEMETRY_ENABLED", "true")
    monkeypatch.delenv("OTLP_ENDPOINT", raising=False)
    assert isinstance(build_telemetry(AppSettings()), OpenTelemetryAdapter)


def test_document_source_is_resolved_against_cwd(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RAG_KNOWLEDGE_DIR", "kb")

    source = build_document_source(AppSettings())

    assert isinstance(source, FilesystemDocumentSource)
    assert source.root == (tmp_path / "kb").resolve()


def test_index_cache_accepts_injected_adapters(clock, policy_source, telemetry, monkeypatch):
    monkeypatch.delenv("RAG_KNOWLEDGE_DIR", raising=False)
    cache = build_index_cache(AppSettings(), source=policy_source, clock=clock, telemetry=telemetry)

    snapshot = cache.ensure_fresh()

    assert snapshot.built_at == clock.now()
    assert telemetry.counters


def test_build_retriever_end_to_end(monkeypatch, tmp_path: Path):
    kb = tmp_path / "knowledge"
    (kb / "hr").mkdir(parents=True)
    (kb / "hr" / "policy.md").write_text(
        "Vacation requests must be submitted 2 weeks in advance.\n\n"
        "Sick leave does not require advance notice.\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RAG_KNOWLEDGE_DIR", raising=False)
    monkeypatch.delenv("RAG_ENABLED", raising=False)
    monkeypatch.delenv("TELEMETRY_ENABLED", raising=False)

    retriever = build_retriever()
    result = retriever.retrieve("how many weeks notice for vacation")

    assert isinstance(retriever, RetrieveKnowledge)
    assert [c.source for c in result.citations] == ["hr/policy.md"]
    assert retriever.status().files == 1
