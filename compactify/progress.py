"""A terminal progress bar whose redraw rate adapts to the batch size."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import TextIO

_BAR_WIDTH = 40
_DEFAULT_THROTTLE = timedelta(milliseconds=40)
_MIN_THROTTLE = timedelta(milliseconds=40)
_MAX_THROTTLE = timedelta(milliseconds=1000)

_CYAN = "\x1b[36m"
_GREEN = "\x1b[32m"
_RESET = "\x1b[0m"


def calculate_throttle(total: int, concurrency: int) -> timedelta:
    """Redraw interval: the default scaled by whole files per worker, clamped."""
    factor = int(total / concurrency) if concurrency > 0 else 0
    throttle = _DEFAULT_THROTTLE * factor
    if throttle < _MIN_THROTTLE:
        return _MIN_THROTTLE
    if throttle > _MAX_THROTTLE:
        return _MAX_THROTTLE
    return throttle


class ProgressBar:
    """Counts finished items and draws ``desc pct% [bar] (n/total)`` on one line."""

    def __init__(self, writer: TextIO, total: int, concurrency: int, description: str) -> None:
        self.total = total
        self.description = description
        self.current = 0
        self.throttle = calculate_throttle(total, concurrency)
        self._writer = writer
        self._last_render: float | None = None
        self._finished = False
        self._lock = threading.Lock()

    def increment(self) -> None:
        with self._lock:
            if self._finished:
                return
            self.current = min(self.current + 1, self.total)
            if self.current >= self.total:
                self._render()
                self._complete()
                return
            now = time.monotonic()
            if (
                self._last_render is None
                or now - self._last_render >= self.throttle.total_seconds()
            ):
                self._render()

    def finish(self) -> None:
        with self._lock:
            if self._finished:
                return
            self.current = self.total
            self._render()
            self._complete()

    def _render(self) -> None:
        if self.total > 0:
            percent = self.current * 100 // self.total
            filled = self.current * _BAR_WIDTH // self.total
        else:
            percent, filled = 100, _BAR_WIDTH
        bar = f"{_GREEN}{'█' * filled}{_RESET}" + "░" * (_BAR_WIDTH - filled)
        line = (
            f"\r\x1b[K{_CYAN}{self.description}{_RESET} {percent:3d}% "
            f"[{bar}] ({self.current}/{self.total})"
        )
        self._writer.write(line)
        self._flush()
        self._last_render = time.monotonic()

    def _complete(self) -> None:
        self._finished = True
        self._writer.write("\n")
        self._flush()

    def _flush(self) -> None:
        flush = getattr(self._writer, "flush", None)
        if flush is not None:
            flush()