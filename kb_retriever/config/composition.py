"""Composition root: the only place that instantiates concrete adapters."""

from pathlib import Path

from kb_retriever.application.ports.clock_port import ClockPort
from kb_retriever.application.ports.document_source_port import DocumentSourcePort
from kb_retriever.application.ports.telemetry_port import TelemetryPort
from kb_retriever.application.use_cases.index_cache import IndexCache
from kb_retriever.application.use_cases.retrieve_knowledge import RetrieveKnowledge
from kb_retriever.config.settings import AppSettings
from kb_retriever.infrastructure.documents.filesystem_source import FilesystemDocumentSource
from kb_retriever.infrastructure.telemetry.otel_adapter import (
    NoopTelemetry,
    OpenTelemetryAdapter,
    OtelConfig,
)
from kb_retriever.infrastructure.time.system_clock import SystemClock


def build_document_source(settings: AppSettings) -> DocumentSourcePort:
    """Knowledge directory, resolved against the current working directory."""
    return FilesystemDocumentSource(root=Path.cwd() / settings.knowledge_dir)


def build_clock() -> ClockPort:
    """Build clock adapter for time operations.

    Note:
        Tests should inject a fake clock instead.
    """
    return SystemClock()


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    """Build telemetry adapter based on settings.telemetry_enabled.

    Returns:
        OpenTelemetryAdapter, or NoopTelemetry if disabled
    """
    if not settings.telemetry_enabled:
        return NoopTelemetry()
    cfg = OtelConfig(
        service_name="kb-retriever",
        otlp_endpoint=settings.otlp_endpoint or None,
        environment=settings.telemetry_environment,
        enable_console=False,
    )
    return OpenTelemetryAdapter(cfg)


def build_index_cache(
    settings: AppSettings,
    source: DocumentSourcePort | None = None,
    clock: ClockPort | None = None,
    telemetry: TelemetryPort | None = None,
) -> IndexCache:
    return IndexCache(
        source=source or build_document_source(settings),
        clock=clock or build_clock(),
        params=settings.retriever_params(),
        telemetry=telemetry or build_telemetry(settings),
    )


def build_retriever(settings: AppSettings | None = None) -> RetrieveKnowledge:
    """Build the retrieval use case with one shared telemetry adapter.

    Args:
        settings: Application settings (default: load from environment)
    """
    settings = settings or AppSettings()
    telemetry = build_telemetry(settings)
    return RetrieveKnowledge(
        cache=build_index_cache(settings, telemetry=telemetry),
        params=settings.retriever_params(),
        telemetry=telemetry,
    )
