"""Small value types shared across layers."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Outcome of a port call that may fail for data reasons.

    Document sources return these instead of raising, so one unreadable
    file never aborts a whole index rebuild.
    """

    ok: bool
    value: T | None = None
    error: E | None = None

    @staticmethod
    def success(v: T) -> "Result[T, E]":
        return Result(ok=True, value=v)

    @staticmethod
    def failure(e: E) -> "Result[T, E]":
        return Result(ok=False, error=e)


Token = str  # lowercase ASCII word, CJK char, CJK bigram or short CJK run
Score = float
