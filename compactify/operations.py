"""Shared driver for batch image commands: read, process, write, summarise."""

from __future__ import annotations

import os
import sys
import threading
from concurrent.futures import CancelledError
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Callable, TextIO

from compactify.filesystem import DryRunFileSystem
from compactify.imaging import ImageProcessor
from compactify.processing import FileProcessingParams, process_files
from compactify.progress import ProgressBar
from compactify.ui import Item, Panel, render_dashboard, render_error_list, warn
from compactify.utils import (
    ImageProcessingStats,
    Result,
    ResultBuilder,
    build_output_path,
)

_BYTES_IN_MB = 1024 * 1024


@dataclass
class GlobalConfig:
    """Settings shared by every batch command."""

    concurrency: int = field(default_factory=lambda: os.cpu_count() or 1)
    input_dir: str = ""
    output_dir: str = ""
    dry_run: bool = False


@dataclass(frozen=True)
class ConvertParams:
    format: str


Processor = Callable[[FileProcessingParams, ImageProcessingStats, "threading.Event | None"], object]


@dataclass
class OperationConfig:
    """What one command does to each image and how its output is named."""

    file_system: Any
    output_suffix: str
    progress_bar_message: str
    processor: Processor
    result_verb: str = ""
    extra_params: Any = None
    cancel: threading.Event | None = None
    out: TextIO | None = None


def run_operation(global_config: GlobalConfig, config: OperationConfig) -> Result | None:
    """Process every image of the input directory and print a summary.

    Returns the summary, or None when the directory holds no images.
    """
    out = config.out or sys.stdout
    if global_config.dry_run:
        config = replace(config, file_system=DryRunFileSystem(config.file_system))
        print(warn("DRY-RUN MODE: No files will be modified or created on disk."), file=out)

    files = config.file_system.read_dir(global_config.input_dir)
    if not files:
        print(warn(f"No files found in directory: {global_config.input_dir}"), file=out)
        return None

    output_dir = resolve_output_dir(global_config, config)

    stats = ImageProcessingStats()
    builder = ResultBuilder()
    progress = ProgressBar(out, len(files), global_config.concurrency, config.progress_bar_message)
    try:
        errors = process_files(
            files,
            config.file_system,
            lambda params: config.processor(params, stats, config.cancel),
            input_dir=global_config.input_dir,
            output_dir=output_dir,
            progress=progress,
            extra_params=config.extra_params,
            concurrency=global_config.concurrency,
        )
    finally:
        progress.finish()

    builder.total_images = len(files)
    builder.skipped_images = stats.skipped_images
    builder.processed_images = stats.processed_images
    builder.output_directory = output_dir
    builder.original_bytes = stats.initial_size
    builder.processed_bytes = stats.final_size
    builder.errors = list(errors)
    result = builder.build()
    print(render_process_summary(result), file=out)
    return result


def handle_image_processing(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    process: Callable[[ImageProcessor], bytes],
    cancel: threading.Event | None = None,
) -> None:
    """Read one image, apply ``process`` and write the result, counting as it goes."""
    if cancel is not None and cancel.is_set():
        stats.mark_skipped()
        raise CancelledError("operation cancelled")

    try:
        with params.fs.open_file(params.file.path) as handle:
            data = handle.read()
    except Exception:
        stats.mark_skipped()
        raise
    stats.add_initial_size(len(data))

    try:
        new_image = process(ImageProcessor(data))
        params.fs.write_file(determine_output_path(params), new_image)
    except Exception:
        stats.mark_skipped()
        raise

    stats.add_final_size(len(new_image))
    stats.mark_processed()


def resolve_output_dir(global_config: GlobalConfig, config: OperationConfig) -> str:
    """Use the configured output directory, or create a suffixed sibling of the input."""
    if global_config.output_dir:
        config.file_system.create_dir(global_config.output_dir)
        return global_config.output_dir
    return config.file_system.create_sibling_dir(global_config.input_dir, config.output_suffix)


def determine_output_path(params: FileProcessingParams) -> str:
    """Where the processed version of ``params.file`` goes."""
    extra = params.extra_params
    if isinstance(extra, ConvertParams) and extra.format:
        base = os.path.basename(params.file.path)
        dot = base.rfind(".")
        stem = base[:dot] if dot >= 0 else base
        return build_output_path(params.output_dir, f"{stem}.{extra.format}")
    try:
        relative = os.path.relpath(params.file.path, params.input_dir or ".")
    except ValueError:
        relative = os.path.basename(params.file.path)
    return build_output_path(params.output_dir, relative)


def _format_duration(elapsed: timedelta) -> str:
    """Round to milliseconds and spell like ``1m2.5s``, ``150ms`` or ``0s``."""
    micros = (elapsed.days * 86_400 + elapsed.seconds) * 1_000_000 + elapsed.microseconds
    sign = "-" if micros < 0 else ""
    millis = (abs(micros) + 500) // 1000
    if millis == 0:
        return "0s"
    if millis < 1000:
        return f"{sign}{millis}ms"
    minutes, rest = divmod(millis, 60_000)
    hours, minutes = divmod(minutes, 60)
    seconds = str(rest // 1000)
    if rest % 1000:
        seconds += f".{rest % 1000:03d}".rstrip("0")
    text = f"{seconds}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return sign + text


def _mb(size: int) -> str:
    return f"{size / _BYTES_IN_MB:.2f} MB"


def render_process_summary(result: Result) -> str:
    """The dashboard printed after a batch, followed by any errors."""
    items = [
        Item("Time", _format_duration(result.elapsed_time)),
        Item("Total", f"{result.total_images} images"),
    ]
    if result.skipped_images > 0:
        items.append(Item("Skipped", str(result.skipped_images)))
    items.append(Item("Processed", str(result.processed_images)))
    left = Panel("OPERATION", items)

    right = Panel(
        "IMPACT",
        [
            Item("Original", _mb(result.original_bytes)),
            Item("After", _mb(result.processed_bytes)),
            Item("", ""),
            Item("Saved", _mb(result.saved_bytes), True),
            Item("Reduction", f"{result.reduction_ratio:.2f}%", True),
        ],
    )

    dashboard = render_dashboard(left, right, "OUTPUT DIRECTORY", f"📂 {result.output_directory}")
    return "\n" + dashboard + render_error_list(result.errors) + "\n"