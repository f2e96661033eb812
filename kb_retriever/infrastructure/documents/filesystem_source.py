"""Filesystem adapter for the knowledge document tree.

Only text formats are indexed; everything is read as UTF-8.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from kb_retriever.application.ports.document_source_port import DocumentSourcePort
from kb_retriever.domain.errors import DocumentError
from kb_retriever.domain.types import Result

SUPPORTED_EXTENSIONS = frozenset({".txt", ".md", ".markdown"})


@dataclass
class FilesystemDocumentSource(DocumentSourcePort):
    root: Path
    extensions: frozenset[str] = field(default=SUPPORTED_EXTENSIONS)

    def __post_init__(self) -> None:
        self.root = Path(self.root).resolve()

    @property
    def location(self) -> str:
        return str(self.root)

    def list_documents(self) -> Result[list[str], DocumentError]:
        if not self.root.is_dir():
            return Result.failure(DocumentError("knowledge directory not found", str(self.root)))

        found: list[str] = []
        for dirpath, _dirnames, filenames in os.walk(self.root):
            for filename in filenames:
                path = Path(dirpath) / filename
                if path.suffix.lower() in self.extensions:
                    found.append(path.relative_to(self.root).as_posix())
        # One total order over relative paths keeps chunk ordinals stable across rebuilds
        return Result.success(sorted(found))

    def read_text(self, source: str) -> Result[str, DocumentError]:
        try:
            return Result.success((self.root / source).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as ex:
            return Result.failure(DocumentError(f"read failed ({ex.__class__.__name__})", source))
