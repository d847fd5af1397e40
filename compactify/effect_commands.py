"""Commands that change how an image looks or how it is encoded, not its size."""

from __future__ import annotations

import threading

from compactify.filesystem import FileSystem
from compactify.operations import (
    GlobalConfig,
    OperationConfig,
    handle_image_processing,
    run_operation,
)
from compactify.processing import FileProcessingParams
from compactify.utils import ImageProcessingStats, Result


def _process_flip(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    handle_image_processing(params, stats, lambda proc: proc.flip(), cancel)


def _process_grayscale(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    handle_image_processing(params, stats, lambda proc: proc.grayscale(), cancel)


def _process_lossless(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    handle_image_processing(params, stats, lambda proc: proc.lossless_compress(), cancel)


def _process_palette(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    handle_image_processing(params, stats, lambda proc: proc.enable_palette(), cancel)


def run_flip(config: GlobalConfig, cancel: threading.Event | None = None) -> Result | None:
    """Flip every image of the input directory upside down."""
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix="-flipped",
            progress_bar_message="Flipping images",
            processor=_process_flip,
            result_verb="flipped",
            cancel=cancel,
        ),
    )


def run_grayscale(config: GlobalConfig, cancel: threading.Event | None = None) -> Result | None:
    """Turn every image of the input directory into shades of grey."""
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix="-grayscale",
            progress_bar_message="Creating grayscale images",
            processor=_process_grayscale,
            result_verb="grayscale images created",
            cancel=cancel,
        ),
    )


def run_lossless(config: GlobalConfig, cancel: threading.Event | None = None) -> Result | None:
    """Re-encode every image of the input directory without losing quality."""
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix="-lossless",
            progress_bar_message="Applying lossless compression",
            processor=_process_lossless,
            result_verb="lossless compressed",
            cancel=cancel,
        ),
    )


def run_palette(config: GlobalConfig, cancel: threading.Event | None = None) -> Result | None:
    """Store every image of the input directory with a limited colour palette."""
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix="-palette",
            progress_bar_message="Enabling palette on images",
            processor=_process_palette,
            result_verb="palette enabled",
            cancel=cancel,
        ),
    )