"""Application ports package.

Re-exports the ports the use cases depend on.
"""

from kb_retriever.application.ports.clock_port import ClockPort
from kb_retriever.application.ports.document_source_port import DocumentSourcePort
from kb_retriever.application.ports.telemetry_port import TelemetryPort

__all__ = [
    "ClockPort",
    "DocumentSourcePort",
    "TelemetryPort",
]
