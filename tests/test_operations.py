import io
import os
import threading
from concurrent.futures import CancelledError
from datetime import datetime, timedelta

import pytest
from PIL import Image

from compactify.filesystem import FileInfo, FileSystem
from compactify.operations import (
    ConvertParams,
    GlobalConfig,
    OperationConfig,
    determine_output_path,
    handle_image_processing,
    render_process_summary,
    resolve_output_dir,
    run_operation,
)
from compactify.processing import FileProcessingParams
from compactify.ui import strip_ansi
from compactify.utils import ImageProcessingStats, ResultBuilder


class FixedClock:
    def __init__(self, elapsed):
        self.elapsed = elapsed
        self.start = datetime(2024, 1, 1)

    def now(self):
        return self.start

    def since(self, start):
        return self.elapsed


def make_result(skipped, processed, errors=None, elapsed=timedelta(seconds=1)):
    builder = ResultBuilder(time_provider=FixedClock(elapsed))
    builder.original_bytes = 10485760
    builder.processed_bytes = 5242880
    builder.total_images = 10
    builder.skipped_images = skipped
    builder.processed_images = processed
    builder.output_directory = "output"
    if errors is not None:
        builder.errors = errors
    return builder.build()


def test_summary_hides_skipped_row_when_zero():
    text = strip_ansi(render_process_summary(make_result(0, 10)))
    for expected in ["OPERATION", "IMPACT", "OUTPUT DIRECTORY", "10 images", "0", "10",
                     "10.00 MB", "5.00 MB", "50.00%", "output"]:
        assert expected in text
    assert "ERRORS DETECTED" not in text
    assert "Skipped" not in text


def test_summary_renders_error_info():
    errors = [ValueError("file 'fake.jpg': read error"), ValueError("permission denied")]
    text = strip_ansi(render_process_summary(make_result(3, 7, errors)))
    for expected in ["2 ERRORS DETECTED", "fake.jpg", "read error", "permission denied"]:
        assert expected in text


def test_summary_shows_skipped_row_when_positive():
    text = strip_ansi(render_process_summary(make_result(2, 5)))
    for expected in ["OPERATION", "Skipped", "2", "5"]:
        assert expected in text


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (timedelta(seconds=1), "1s"),
        (timedelta(milliseconds=1500), "1.5s"),
        (timedelta(milliseconds=250), "250ms"),
        (timedelta(seconds=61), "1m1s"),
        (timedelta(0), "0s"),
    ],
)
def test_summary_time_format(elapsed, expected):
    text = strip_ansi(render_process_summary(make_result(0, 1, elapsed=elapsed)))
    time_line = next(line for line in text.split("\n") if "Time" in line)
    assert expected in time_line.split("Time", 1)[1].split()[0:1]


def test_output_path_for_convert_replaces_extension():
    params = FileProcessingParams(
        file=FileInfo(path=os.path.join("in", "photo.jpeg"), size=1), fs=None,
        input_dir="in", output_dir="out", extra_params=ConvertParams("webp"),
    )
    assert determine_output_path(params) == os.path.join("out", "photo.webp")


def test_output_path_keeps_relative_location():
    params = FileProcessingParams(
        file=FileInfo(path=os.path.join("in", "sub", "a.png"), size=1), fs=None,
        input_dir="in", output_dir="out",
    )
    assert determine_output_path(params) == os.path.join("out", "sub", "a.png")


def test_resolve_output_dir_creates_given_directory(tmp_path):
    target = tmp_path / "custom" / "nested"
    global_config = GlobalConfig(input_dir=str(tmp_path / "in"), output_dir=str(target))
    config = OperationConfig(FileSystem(), "-x", "msg", processor=lambda *a: None)
    assert resolve_output_dir(global_config, config) == str(target)
    assert target.is_dir()


def test_resolve_output_dir_creates_sibling(tmp_path):
    source = tmp_path / "images"
    source.mkdir()
    global_config = GlobalConfig(input_dir=str(source))
    config = OperationConfig(FileSystem(), "-resized", "msg", processor=lambda *a: None)
    result = resolve_output_dir(global_config, config)
    assert result == str(tmp_path / "images-resized")
    assert (tmp_path / "images-resized").is_dir()


@pytest.fixture
def single_file(tmp_path):
    source = tmp_path / "in"
    source.mkdir()
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    path = source / "sample.png"
    path.write_bytes(b"0123456789")
    params = FileProcessingParams(
        file=FileInfo(path=str(path), size=10), fs=FileSystem(),
        input_dir=str(source), output_dir=str(out_dir),
    )
    return params, out_dir


def test_handle_image_processing_writes_and_counts(single_file):
    params, out_dir = single_file
    stats = ImageProcessingStats()
    lengths = []

    def process(proc):
        lengths.append(len(proc))
        return b"xy"

    handle_image_processing(params, stats, process)
    assert lengths == [10]
    assert (out_dir / "sample.png").read_bytes() == b"xy"
    assert (stats.initial_size, stats.final_size) == (10, 2)
    assert (stats.processed_images, stats.skipped_images) == (1, 0)


def test_handle_image_processing_skips_when_cancelled(single_file):
    params, out_dir = single_file
    stats = ImageProcessingStats()
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(CancelledError):
        handle_image_processing(params, stats, lambda proc: b"xy", cancel)
    assert stats.skipped_images == 1
    assert not (out_dir / "sample.png").exists()


def test_handle_image_processing_skips_when_process_fails(single_file):
    params, _ = single_file
    stats = ImageProcessingStats()

    def process(proc):
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        handle_image_processing(params, stats, process)
    assert (stats.skipped_images, stats.processed_images) == (1, 0)
    assert stats.initial_size == 10


def flip_processor(params, stats, cancel):
    handle_image_processing(params, stats, lambda proc: proc.flip(), cancel)


@pytest.fixture
def image_dir(tmp_path):
    source = tmp_path / "images"
    source.mkdir()
    for name in ("a.png", "b.png"):
        Image.new("RGB", (20, 10), (200, 10, 10)).save(source / name)
    (source / "notes.txt").write_text("ignored")
    return source


def test_run_operation_processes_all_images(image_dir, tmp_path):
    out = io.StringIO()
    config = OperationConfig(FileSystem(), "-flipped", "Flipping images",
                             processor=flip_processor, out=out)
    result = run_operation(GlobalConfig(concurrency=2, input_dir=str(image_dir)), config)
    target = tmp_path / "images-flipped"
    assert result.processed_images == 2
    assert result.total_images == 2
    assert result.errors == []
    assert sorted(p.name for p in target.iterdir()) == ["a.png", "b.png"]
    with Image.open(target / "a.png") as img:
        assert img.size == (20, 10)
    assert "OPERATION" in strip_ansi(out.getvalue())


def test_run_operation_dry_run_writes_nothing(image_dir, tmp_path):
    out = io.StringIO()
    config = OperationConfig(FileSystem(), "-flipped", "Flipping images",
                             processor=flip_processor, out=out)
    result = run_operation(GlobalConfig(input_dir=str(image_dir), dry_run=True), config)
    assert result.processed_images == 2
    assert not (tmp_path / "images-flipped").exists()
    assert "DRY-RUN MODE" in strip_ansi(out.getvalue())


def test_run_operation_reports_failures(image_dir, tmp_path):
    (image_dir / "bad.png").write_bytes(b"not an image")
    out = io.StringIO()
    config = OperationConfig(FileSystem(), "-flipped", "Flipping images",
                             processor=flip_processor, out=out)
    result = run_operation(GlobalConfig(input_dir=str(image_dir)), config)
    assert result.processed_images == 2
    assert result.skipped_images == 1
    assert len(result.errors) == 1
    assert "bad.png" in str(result.errors[0])
    assert "1 ERRORS DETECTED" in strip_ansi(out.getvalue())


def test_run_operation_without_images_warns(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    out = io.StringIO()
    config = OperationConfig(FileSystem(), "-flipped", "Flipping images",
                             processor=flip_processor, out=out)
    assert run_operation(GlobalConfig(input_dir=str(empty)), config) is None
    assert f"No files found in directory: {empty}" in strip_ansi(out.getvalue())
    assert not (tmp_path / "empty-flipped").exists()