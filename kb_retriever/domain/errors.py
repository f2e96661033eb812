"""Domain errors (typed) for the knowledge retriever.

Why: One error family for every layer; infrastructure failures are mapped
onto these before they reach the application layer.
"""

from dataclasses import dataclass


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ConfigurationError(DomainError):
    """Settings are missing or cannot be parsed (fatal at startup)."""


@dataclass(frozen=True)
class DocumentError(DomainError):
    """Document source could not be listed or a document could not be read."""

    message: str
    path: str | None = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}: {self.path}"
        return self.message


class IndexBuildError(DomainError):
    """Index snapshot could not be built from the document source."""
