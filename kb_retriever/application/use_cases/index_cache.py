"""Index cache use case: owns the current snapshot and rebuilds it on a TTL.

Why: Queries must never see a half-built index and must never fail because
the knowledge directory is broken; every failure becomes `last_error` data.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from collections.abc import Iterator
from datetime import datetime, timedelta

from kb_retriever.application.dto.retrieval_dto import RetrieverParams
from kb_retriever.application.ports.clock_port import ClockPort
from kb_retriever.application.ports.document_source_port import DocumentSourcePort
from kb_retriever.application.ports.telemetry_port import TelemetryPort
from kb_retriever.domain.errors import DomainError, IndexBuildError
from kb_retriever.domain.models import IndexSnapshot
from kb_retriever.domain.services.indexing import SourceDocument, build_snapshot, empty_snapshot

logger = logging.getLogger(__name__)


class IndexCache:
    """Single state cell holding the current IndexSnapshot.

    Lifecycle:
    1. Constructed with an empty, never-built snapshot (always stale)
    2. `ensure_fresh()` rebuilds once the snapshot is older than the TTL
    3. A rebuild swaps the reference in one assignment; readers holding the
       previous snapshot keep using it untouched

    Concurrent expirations are collapsed into one rebuild (single-flight):
    late callers wait on the rebuild lock and then reuse the fresh snapshot.
    """

    def __init__(
        self,
        source: DocumentSourcePort,
        clock: ClockPort,
        params: RetrieverParams,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.source = source
        self.clock = clock
        self.params = params
        self.telemetry = telemetry
        self._snapshot = IndexSnapshot()
        self._rebuild_lock = threading.Lock()

    @property
    def snapshot(self) -> IndexSnapshot:
        """Current snapshot, without any freshness check."""
        return self._snapshot

    def is_stale(self, snapshot: IndexSnapshot, now: datetime) -> bool:
        if snapshot.built_at is None:
            return True
        return now - snapshot.built_at >= timedelta(milliseconds=self.params.cache_ttl_ms)

    def ensure_fresh(self) -> IndexSnapshot:
        snapshot = self._snapshot
        if not self.is_stale(snapshot, self.clock.now()):
            return snapshot
        with self._rebuild_lock:
            # Another caller may have finished a rebuild while we waited
            snapshot = self._snapshot
            if not self.is_stale(snapshot, self.clock.now()):
                return snapshot
            return self._rebuild()

    def rebuild(self) -> IndexSnapshot:
        """Force a rebuild regardless of the snapshot age."""
        with self._rebuild_lock:
            return self._rebuild()

    # ===== Private =====

    def _rebuild(self) -> IndexSnapshot:
        started = time.perf_counter()
        now = self.clock.now()

        if not self.params.enabled:
            snapshot = empty_snapshot(now)
        else:
            try:
                snapshot = self._build(now)
            except DomainError as ex:
                snapshot = self._failed_snapshot(now, str(ex))
            except Exception as ex:  # noqa: BLE001
                logger.exception("Unexpected failure while rebuilding the knowledge index")
                snapshot = self._failed_snapshot(now, f"index rebuild failed: {ex}")

        self._snapshot = snapshot
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Knowledge index rebuilt from %s: files=%d chunks=%d in %.1f ms",
            self.source.location,
            snapshot.file_count,
            len(snapshot.chunks),
            elapsed_ms,
        )
        if self.telemetry is not None:
            status = "error" if snapshot.last_error else "success"
            self.telemetry.incr("rag.index.rebuilds", {"status": status})
            self.telemetry.observe("rag.index.chunks", len(snapshot.chunks), {"status": status})
            self.telemetry.observe("rag.index.rebuild_ms", elapsed_ms, {"status": status})
        return snapshot

    def _build(self, now: datetime) -> IndexSnapshot:
        listed = self.source.list_documents()
        if not listed.ok:
            raise IndexBuildError(str(listed.error))
        paths = listed.value or []
        return build_snapshot(
            self._load(paths),
            chunk_size=self.params.chunk_size,
            ngram_size=self.params.ngram_size,
            file_count=len(paths),
            built_at=now,
        )

    def _load(self, paths: list[str]) -> Iterator[SourceDocument]:
        for path in paths:
            read = self.source.read_text(path)
            if not read.ok:
                # Unreadable file contributes zero chunks
                logger.warning("Skipping unreadable knowledge file: %s", read.error)
                yield SourceDocument(source=path, text="")
                continue
            yield SourceDocument(source=path, text=read.value or "")

    def _failed_snapshot(self, now: datetime, error: str) -> IndexSnapshot:
        previous = self._snapshot
        if self.params.serve_stale_on_error and not previous.is_empty:
            logger.warning("Knowledge index rebuild failed, serving previous chunks: %s", error)
            return dataclasses.replace(previous, built_at=now, last_error=error)
        logger.warning("Knowledge index rebuild failed: %s", error)
        return empty_snapshot(now, error)
