"""Helpers for reporting per-file extraction progress."""

from __future__ import annotations

from typing import Callable, Optional


ProgressCallback = Callable[[int, int], None]


class ExtractionProgressTracker:
    """Count finished files and forward ``(processed, total)`` to a callback.

    Only the scheduling process advances the tracker; worker processes report
    completion through their futures.
    """

    def __init__(self, total: int, send: Optional[ProgressCallback] = None) -> None:
        self._send = send
        self._total = total
        self._processed = 0

    @property
    def processed(self) -> int:
        return self._processed

    @property
    def total(self) -> int:
        return self._total

    def start(self) -> None:
        if self._send:
            self._send(self._processed, self._total)

    def advance(self, count: int = 1) -> None:
        self._processed = min(self._processed + count, self._total)
        if self._send:
            self._send(self._processed, self._total)
