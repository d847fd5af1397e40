"""Runs a per-file processor over a batch of files with bounded concurrency."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol

from compactify.filesystem import FileInfo


class _Progress(Protocol):
    def increment(self) -> None: ...

    def finish(self) -> None: ...


@dataclass(frozen=True)
class FileProcessingParams:
    """Everything a processor needs to handle one file."""

    file: FileInfo
    fs: Any
    input_dir: str = ""
    output_dir: str = ""
    progress: _Progress | None = None
    extra_params: Any = None


class FileProcessingError(Exception):
    """A single file could not be processed; the original error is in ``cause``."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"error processing file '{path}': {cause}")
        self.path = path
        self.cause = cause


def process_files(
    files: Iterable[FileInfo],
    fs: Any,
    processor: Callable[[FileProcessingParams], object],
    input_dir: str = "",
    output_dir: str = "",
    progress: _Progress | None = None,
    extra_params: Any = None,
    concurrency: int = 1,
) -> list[FileProcessingError]:
    """Process every file, at most ``concurrency`` at a time, and return the failures.

    The progress bar is advanced once per file whether it succeeded or not.
    A concurrency below one is treated as one.
    """
    workers = max(concurrency, 1)

    def work(file: FileInfo) -> FileProcessingError | None:
        failure = None
        try:
            processor(
                FileProcessingParams(
                    file=file,
                    fs=fs,
                    input_dir=input_dir,
                    output_dir=output_dir,
                    progress=progress,
                    extra_params=extra_params,
                )
            )
        except Exception as exc:
            failure = FileProcessingError(file.path, exc)
        if progress is not None:
            progress.increment()
        return failure

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(work, files))
    return [failure for failure in outcomes if failure is not None]