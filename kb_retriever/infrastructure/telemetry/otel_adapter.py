"""OpenTelemetry metrics for index rebuilds and retrieval queries.

Why: Rebuild duration, chunk counts and query latency are the numbers that
tell whether the knowledge directory is healthy.
"""

import logging
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from kb_retriever.application.ports.telemetry_port import TelemetryPort

logger = logging.getLogger(__name__)

_OTLP_EXPORTER_MODULE = "opentelemetry.exporter.otlp.proto.grpc.metric_exporter"


@dataclass
class OtelConfig:
    """Where and under which resource attributes metrics are exported."""

    service_name: str = "kb-retriever"
    otlp_endpoint: str | None = None  # gRPC collector, e.g. "http://localhost:4317"
    environment: str = "production"
    enable_console: bool = False  # dump metrics to stdout


class OpenTelemetryAdapter(TelemetryPort):
    """TelemetryPort backed by an OpenTelemetry MeterProvider.

    incr() feeds counters, observe() feeds histograms. Instruments are
    created on first use and cached per (kind, name). The SDK is imported
    lazily; when it cannot be set up every call is a no-op.
    """

    def __init__(self, cfg: OtelConfig) -> None:
        self._cfg = cfg
        self._instruments: dict[tuple[str, str], Any] = {}
        self._meter: Any | None = self._create_meter()

    @property
    def enabled(self) -> bool:
        return self._meter is not None

    def _create_meter(self) -> Any | None:
        try:
            metrics_sdk = import_module("opentelemetry.sdk.metrics")
            resources = import_module("opentelemetry.sdk.resources")
            resource = resources.Resource.create(
                {
                    "service.name": self._cfg.service_name,
                    "deployment.environment": self._cfg.environment,
                }
            )
            provider = metrics_sdk.MeterProvider(
                resource=resource, metric_readers=self._build_readers()
            )
            return provider.get_meter(__name__)
        except Exception as ex:
            # Retrieval must keep working without metrics
            logger.warning("telemetry disabled, OpenTelemetry setup failed: %s", ex)
            return None

    def _build_readers(self) -> list[Any]:
        export = import_module("opentelemetry.sdk.metrics.export")
        exporters = []
        if self._cfg.otlp_endpoint:
            otlp = import_module(_OTLP_EXPORTER_MODULE)
            exporters.append(otlp.OTLPMetricExporter(endpoint=self._cfg.otlp_endpoint))
        if self._cfg.enable_console:
            exporters.append(export.ConsoleMetricExporter())
        return [export.PeriodicExportingMetricReader(e) for e in exporters]

    def _instrument(self, kind: str, name: str) -> Any:
        key = (kind, name)
        if key not in self._instruments:
            assert self._meter is not None
            if kind == "counter":
                self._instruments[key] = self._meter.create_counter(name=name, description=name)
            else:
                self._instruments[key] = self._meter.create_histogram(name=name, description=name)
        return self._instruments[key]

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        """Add one to counter `name`, e.g. incr("rag.index.rebuilds", {"status": "error"})."""
        if self._meter is None:
            return
        try:
            self._instrument("counter", name).add(1, attributes=tags or {})
        except Exception:
            # Never fail a query on a metric error
            logger.debug("counter %s not recorded", name, exc_info=True)

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Record `value` in histogram `name`, e.g. observe("rag.query.latency_ms", 3.2)."""
        if self._meter is None:
            return
        try:
            self._instrument("histogram", name).record(value, attributes=tags or {})
        except Exception:
            logger.debug("histogram %s not recorded", name, exc_info=True)


class NoopTelemetry(TelemetryPort):
    """Telemetry adapter used when telemetry is disabled."""

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        pass

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        pass
