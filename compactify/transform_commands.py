"""Commands that change an image's format or dimensions."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from compactify.filesystem import FileSystem
from compactify.imaging import Gravity
from compactify.operations import (
    ConvertParams,
    GlobalConfig,
    OperationConfig,
    handle_image_processing,
    run_operation,
)
from compactify.processing import FileProcessingParams
from compactify.utils import ImageProcessingStats, Result
from compactify.validation import (
    DimensionsValidation,
    FormatValidation,
    GravityValidation,
    ValidationComposite,
    WidthValidation,
)

_THUMBNAIL_MIN_WIDTH = 50
_THUMBNAIL_MAX_WIDTH = 1024


@dataclass(frozen=True)
class CropParams:
    width: int
    height: int
    gravity: int = Gravity.CENTRE


@dataclass(frozen=True)
class EnlargeParams:
    width: int
    height: int


@dataclass(frozen=True)
class ResizeParams:
    width: int
    height: int


@dataclass(frozen=True)
class ThumbnailParams:
    width: int


def _process_convert(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    extra: ConvertParams = params.extra_params
    handle_image_processing(params, stats, lambda proc: proc.convert(extra.format), cancel)


def _process_crop(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    extra: CropParams = params.extra_params
    handle_image_processing(
        params,
        stats,
        lambda proc: proc.crop(extra.width, extra.height, extra.gravity),
        cancel,
    )


def _process_enlarge(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    extra: EnlargeParams = params.extra_params
    handle_image_processing(
        params, stats, lambda proc: proc.enlarge(extra.width, extra.height), cancel
    )


def _process_resize(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    extra: ResizeParams = params.extra_params
    handle_image_processing(
        params, stats, lambda proc: proc.resize(extra.width, extra.height), cancel
    )


def _process_thumbnail(
    params: FileProcessingParams,
    stats: ImageProcessingStats,
    cancel: threading.Event | None,
) -> None:
    extra: ThumbnailParams = params.extra_params
    handle_image_processing(params, stats, lambda proc: proc.thumbnail(extra.width), cancel)


def run_convert(
    config: GlobalConfig, format_name: str, cancel: threading.Event | None = None
) -> Result | None:
    """Convert every image of the input directory to ``format_name``."""
    FormatValidation(format_name).validate()
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix=f"-converted.{format_name}",
            progress_bar_message="Converting images",
            processor=_process_convert,
            result_verb="converted",
            extra_params=ConvertParams(format=format_name),
            cancel=cancel,
        ),
    )


def run_crop(
    config: GlobalConfig,
    width: int,
    height: int,
    gravity: int = Gravity.CENTRE,
    cancel: threading.Event | None = None,
) -> Result | None:
    """Crop every image to ``width`` x ``height``, keeping the part at ``gravity``."""
    ValidationComposite(
        [DimensionsValidation(width, height), GravityValidation(gravity)]
    ).validate()
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix=f"-cropped_{width}x{height}",
            progress_bar_message="Cropping images",
            processor=_process_crop,
            result_verb="cropped",
            extra_params=CropParams(width=width, height=height, gravity=gravity),
            cancel=cancel,
        ),
    )


def run_enlarge(
    config: GlobalConfig, width: int, height: int, cancel: threading.Event | None = None
) -> Result | None:
    """Enlarge every image to ``width`` x ``height``."""
    DimensionsValidation(width, height).validate()
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix=f"-enlarged-{width}x{height}",
            progress_bar_message="Enlarging images",
            processor=_process_enlarge,
            result_verb="enlarged",
            extra_params=EnlargeParams(width=width, height=height),
            cancel=cancel,
        ),
    )


def run_resize(
    config: GlobalConfig, width: int, height: int, cancel: threading.Event | None = None
) -> Result | None:
    """Resize every image to ``width`` x ``height``."""
    DimensionsValidation(width, height).validate()
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix="-resized",
            progress_bar_message="Resizing images",
            processor=_process_resize,
            result_verb="resized",
            extra_params=ResizeParams(width=width, height=height),
            cancel=cancel,
        ),
    )


def run_thumbnail(
    config: GlobalConfig, width: int, cancel: threading.Event | None = None
) -> Result | None:
    """Make a square thumbnail ``width`` pixels wide of every image."""
    WidthValidation(
        width, min_width=_THUMBNAIL_MIN_WIDTH, max_width=_THUMBNAIL_MAX_WIDTH
    ).validate()
    return run_operation(
        config,
        OperationConfig(
            file_system=FileSystem(),
            output_suffix="-thumbnail",
            progress_bar_message="Creating thumbnails",
            processor=_process_thumbnail,
            result_verb="thumbnails created",
            extra_params=ThumbnailParams(width=width),
            cancel=cancel,
        ),
    )