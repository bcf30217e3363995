"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Progress and cancellation plumbing shared by all engines.

ProgressReporter   : clamps to 0..100, truncates to int, drops regressions
WeightedProgress   : two-level (file / record) aggregation for batch operations
CancellationToken  : thread-safe cancellation flag (threading.Event)
as_stopped_flag    : normalizes a CancellationSignal or plain callable to `() -> bool`
"""

import threading
import logging
from typing import Callable, Optional

from mameutility.core.interfaces import ProgressLike, CancellationLike

logger = logging.getLogger(__name__)


class CancellationToken:
    """Default CancellationSignal. Safe to set from any thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_requested(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self.is_requested()


def as_stopped_flag(signal: CancellationLike) -> Callable[[], bool]:
    """Returns a `() -> bool` view of a cancellation signal (never-cancelled when None)."""
    if signal is None:
        return lambda: False
    if hasattr(signal, "is_requested"):
        return signal.is_requested
    return signal


class ProgressReporter:
    """
    Forwards integer percentages to a progress sink while keeping the
    sequence non-decreasing for one logical operation.
    """

    def __init__(self, sink: ProgressLike = None):
        if sink is None:
            self._emit: Optional[Callable[[int], None]] = None
        elif callable(sink):
            self._emit = sink
        else:
            self._emit = sink.report
        self._last = -1

    @property
    def last(self) -> int:
        return self._last

    def report(self, percent: float) -> None:
        value = int(max(0.0, min(100.0, percent)))
        if value <= self._last:
            return
        self._last = value
        if self._emit:
            self._emit(value)

    def complete(self) -> None:
        """Emits exactly 100 unless it was already the last value reported."""
        self.report(100)


class WeightedProgress:
    """
    Two-level progress: `files_completed / total_files * 100 + inner / total_files`,
    where `inner` is the 0..100 progress within the file currently being processed.
    """

    def __init__(self, total_files: int, reporter: ProgressReporter):
        self.total_files = max(0, total_files)
        self.files_completed = 0
        self.reporter = reporter

    def overall(self, inner_percent: float = 0.0) -> float:
        if self.total_files == 0:
            return 100.0
        inner = max(0.0, min(100.0, inner_percent))
        return self.files_completed / self.total_files * 100 + inner / self.total_files

    def update_inner(self, inner_percent: float) -> None:
        self.reporter.report(self.overall(inner_percent))

    def complete_file(self) -> None:
        self.files_completed += 1
        if self.files_completed >= self.total_files:
            # Rounding must never leave the bar short of 100 on the last file
            self.reporter.complete()
        else:
            self.reporter.report(self.overall())
