from __future__ import annotations

from typing import Protocol

from kb_retriever.domain.errors import DocumentError
from kb_retriever.domain.types import Result


class DocumentSourcePort(Protocol):
    """Port for the knowledge document tree (read-only)."""

    @property
    def location(self) -> str:
        """Human-readable location of the source (e.g. the knowledge directory)."""
        ...

    def list_documents(self) -> Result[list[str], DocumentError]:
        """List identities (relative paths) of all supported documents."""
        ...

    def read_text(self, source: str) -> Result[str, DocumentError]:
        """Read one document as UTF-8 text."""
        ...
