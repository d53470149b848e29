from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
import threading


class Disposition(str, Enum):
    CONVERTED = "converted"
    ALREADY_CORRECT = "already_correct"
    HALF_SUITABLE = "half_suitable"
    UNSUITABLE = "unsuitable"
    ERROR = "error"


@dataclass(frozen=True)
class FileResult:
    """
    Outcome of processing a single image.

    Immutable so workers can hand it back to the dispatcher without copies.
    """
    src_path: Path
    disposition: Disposition
    out_path: Optional[Path] = None  # None on error
    src_size: Optional[tuple[int, int]] = None  # None if decoding failed
    out_size: Optional[tuple[int, int]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.disposition is not Disposition.ERROR


class _Counter:
    # Each counter owns its lock so unrelated outcomes never contend.
    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


@dataclass(frozen=True)
class StatusSnapshot:
    total: int
    converted: int
    already_correct: int
    unsuitable: int
    half: int
    errors: int

    @property
    def finished(self) -> int:
        return self.converted + self.already_correct + self.unsuitable + self.half + self.errors


_DISPOSITION_COUNTERS = {
    Disposition.CONVERTED: "converted",
    Disposition.ALREADY_CORRECT: "already_correct",
    Disposition.HALF_SUITABLE: "half",
    Disposition.UNSUITABLE: "unsuitable",
    Disposition.ERROR: "errors",
}


class RunStatus:
    """
    Six counters shared by every worker of a run.

    Workers bump ``total`` when they pick up a file and exactly one of the
    outcome counters when they finish it. Read it through snapshot() once
    the dispatcher has drained.
    """

    def __init__(self) -> None:
        self.total = _Counter()
        self.converted = _Counter()
        self.already_correct = _Counter()
        self.unsuitable = _Counter()
        self.half = _Counter()
        self.errors = _Counter()

    def record(self, disposition: Disposition) -> None:
        getattr(self, _DISPOSITION_COUNTERS[disposition]).increment()

    def snapshot(self) -> StatusSnapshot:
        return StatusSnapshot(
            total=self.total.value,
            converted=self.converted.value,
            already_correct=self.already_correct.value,
            unsuitable=self.unsuitable.value,
            half=self.half.value,
            errors=self.errors.value,
        )
