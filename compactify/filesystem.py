"""File access for batch operations, with a dry-run variant that writes nothing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO

from compactify.utils import build_output_path, is_valid_image


class FileSystemError(OSError):
    """Base of all file access failures; the original error is in ``cause``."""

    def __init__(self, message: str, cause: BaseException, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.path = path

    def __str__(self) -> str:
        return self.message


class OpenDirError(FileSystemError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"failed to open directory -> {cause}", cause)


class ReadDirError(FileSystemError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"failed to read directory '{path}': {cause}", cause, path)


class CreateDirError(FileSystemError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"failed to create directory '{path}': {cause}", cause, path)


class CreateSiblingDirError(FileSystemError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"failed to create sibling directory -> {cause}", cause)


class ReadFileError(FileSystemError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"failed to read file '{path}': {cause}", cause, path)


class WriteFileError(FileSystemError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"failed to write file '{path}': {cause}", cause, path)


@dataclass(frozen=True)
class FileInfo:
    path: str
    size: int


def _sibling_path(path: str, suffix: str) -> str:
    parent = os.path.dirname(path) or "."
    base = os.path.basename(path.rstrip(os.sep)) or os.sep
    return build_output_path(parent, base + suffix)


class FileSystem:
    """Reads and writes files on the local disk."""

    def read_dir(self, path: str) -> list[FileInfo]:
        """List the supported images directly inside a directory, by name."""
        try:
            scanner = os.scandir(path)
        except OSError as exc:
            raise OpenDirError(exc) from exc
        with scanner:
            try:
                entries = [
                    (entry.name, entry.stat().st_size)
                    for entry in scanner
                    if not entry.is_dir() and is_valid_image(entry.name)
                ]
            except OSError as exc:
                raise ReadDirError(path, exc) from exc
        return [
            FileInfo(path=build_output_path(path, name), size=size)
            for name, size in sorted(entries)
        ]

    def create_dir(self, name: str) -> None:
        try:
            os.makedirs(name, mode=0o777, exist_ok=True)
        except OSError as exc:
            raise CreateDirError(name, exc) from exc

    def create_sibling_dir(self, path: str, suffix: str) -> str:
        """Create ``<path><suffix>`` next to ``path`` and return it."""
        new_dir = _sibling_path(path, suffix)
        try:
            os.mkdir(new_dir, 0o777)
        except OSError as exc:
            raise CreateSiblingDirError(exc) from exc
        return new_dir

    def read_file(self, path: str) -> bytes:
        try:
            with open(path, "rb") as handle:
                return handle.read()
        except OSError as exc:
            raise ReadFileError(path, exc) from exc

    def open_file(self, path: str) -> BinaryIO:
        try:
            return open(path, "rb")
        except OSError as exc:
            raise ReadFileError(path, exc) from exc

    def write_file(self, path: str, data: bytes) -> None:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except OSError as exc:
            raise WriteFileError(path, exc) from exc


class DryRunFileSystem:
    """Reads through another file system but never creates or writes anything.

    Directories and writes that would have happened are recorded in
    ``planned_dirs`` and ``planned_writes`` (path and byte count).
    """

    def __init__(self, original) -> None:
        self.original = original
        self.planned_dirs: list[str] = []
        self.planned_writes: list[tuple[str, int]] = []

    def read_dir(self, path: str) -> list[FileInfo]:
        return self.original.read_dir(path)

    def create_dir(self, name: str) -> None:
        self.planned_dirs.append(name)

    def create_sibling_dir(self, path: str, suffix: str) -> str:
        new_dir = _sibling_path(path, suffix)
        self.planned_dirs.append(new_dir)
        return new_dir

    def read_file(self, path: str) -> bytes:
        return self.original.read_file(path)

    def open_file(self, path: str) -> BinaryIO:
        return self.original.open_file(path)

    def write_file(self, path: str, data: bytes) -> None:
        self.planned_writes.append((path, len(data)))