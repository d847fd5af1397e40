"""Small helpers: image-name checks, output paths, run statistics and results."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

_CONFIG_DIR_NAME = ".config"
_APP_NAME = "compactify"

_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})


def _extension(name: str) -> str:
    """Return the suffix after the last dot of the final path element, dot included."""
    dot = name.rfind(".")
    if dot < 0:
        return ""
    suffix = name[dot:]
    if "/" in suffix or os.sep in suffix:
        return ""
    return suffix


def _join(*parts: str) -> str:
    """Join non-empty path elements and clean the result."""
    present = [part for part in parts if part]
    if not present:
        return ""
    return os.path.normpath(os.sep.join(present))


def is_valid_image(name: str) -> bool:
    """Tell whether a file name carries one of the supported image extensions."""
    return _extension(name) in _IMAGE_EXTENSIONS


def build_output_path(output_dir: str, relative_path: str) -> str:
    """Place a path relative to the input directory under the output directory."""
    return _join(output_dir, relative_path)


def get_config_dir(home: str) -> str:
    """Return the per-user configuration directory below a home directory."""
    return _join(home, _CONFIG_DIR_NAME, _APP_NAME)


class _TimeProvider(Protocol):
    def now(self) -> datetime: ...

    def since(self, start: datetime) -> timedelta: ...


class RealTimeProvider:
    """Time source backed by the system clock."""

    def now(self) -> datetime:
        return datetime.now()

    def since(self, start: datetime) -> timedelta:
        return datetime.now() - start


@dataclass(frozen=True)
class Result:
    """Summary of a finished batch operation."""

    elapsed_time: timedelta
    total_images: int
    skipped_images: int
    processed_images: int
    original_bytes: int
    processed_bytes: int
    saved_bytes: int
    reduction_ratio: float
    output_directory: str
    errors: list = field(default_factory=list)


@dataclass
class ResultBuilder:
    """Collects the figures of a run; the clock starts when the builder is made."""

    time_provider: _TimeProvider = field(default_factory=RealTimeProvider)
    total_images: int = 0
    skipped_images: int = 0
    processed_images: int = 0
    original_bytes: int = 0
    processed_bytes: int = 0
    output_directory: str = ""
    errors: list = field(default_factory=list)
    start_time: datetime = field(init=False)

    def __post_init__(self) -> None:
        self.start_time = self.time_provider.now()

    def build(self) -> Result:
        elapsed = self.time_provider.since(self.start_time)
        saved = self.original_bytes - self.processed_bytes
        ratio = 0.0
        if self.original_bytes > 0:
            ratio = saved / self.original_bytes * 100
        return Result(
            elapsed_time=elapsed,
            total_images=self.total_images,
            skipped_images=self.skipped_images,
            processed_images=self.processed_images,
            original_bytes=self.original_bytes,
            processed_bytes=self.processed_bytes,
            saved_bytes=saved,
            reduction_ratio=ratio,
            output_directory=self.output_directory,
            errors=list(self.errors),
        )


@dataclass
class ImageProcessingStats:
    """Thread-safe counters shared by the workers of one run."""

    initial_size: int = 0
    final_size: int = 0
    skipped_images: int = 0
    processed_images: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def add_initial_size(self, size: int) -> None:
        with self._lock:
            self.initial_size += size

    def add_final_size(self, size: int) -> None:
        with self._lock:
            self.final_size += size

    def mark_skipped(self) -> None:
        with self._lock:
            self.skipped_images += 1

    def mark_processed(self) -> None:
        with self._lock:
            self.processed_images += 1