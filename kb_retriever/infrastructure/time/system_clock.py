"""Wall-clock adapter used by the index cache to age snapshots."""

from __future__ import annotations

from datetime import UTC, datetime

from kb_retriever.application.ports.clock_port import ClockPort


class SystemClock(ClockPort):
    """Timezone-aware UTC time; snapshot `built_at` values come from here."""

    def now(self) -> datetime:  # pragma: no cover - trivial
        return datetime.now(UTC)
