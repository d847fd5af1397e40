import io

import pytest
from PIL import Image, ImageDraw

from compactify.imaging import (
    Gravity,
    ImageMetadata,
    ImageProcessor,
    ImageSize,
    UnsupportedImageTypeError,
    image_format_for,
    is_valid_gravity,
)


def _encode(img, fmt):
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def sample_jpeg():
    img = Image.new("RGB", (640, 480), (240, 240, 240))
    draw = ImageDraw.Draw(img)
    draw.rectangle((50, 50, 300, 250), fill=(200, 30, 30))
    draw.ellipse((350, 200, 600, 450), fill=(30, 60, 200))
    draw.line((0, 479, 639, 0), fill=(20, 160, 40), width=8)
    return _encode(img, "JPEG")


@pytest.fixture
def two_band_png():
    img = Image.new("RGB", (100, 200), (255, 0, 0))
    ImageDraw.Draw(img).rectangle((0, 100, 99, 199), fill=(0, 0, 255))
    return _encode(img, "PNG")


def _open(data):
    return Image.open(io.BytesIO(data))


def test_size_reports_dimensions(sample_jpeg):
    assert ImageProcessor(sample_jpeg).size() == ImageSize(640, 480)


def test_length_is_byte_count(sample_jpeg):
    proc = ImageProcessor(sample_jpeg)
    assert len(proc) == len(sample_jpeg)
    assert len(proc) > 0


@pytest.mark.parametrize(
    "operation, expected",
    [
        (lambda p: p.resize(300, 200), (300, 200)),
        (lambda p: p.crop(300, 200, Gravity.SMART), (300, 200)),
        (lambda p: p.enlarge(1200, 800), (1200, 800)),
        (lambda p: p.thumbnail(300), (300, 300)),
    ],
)
def test_sizing_operations(sample_jpeg, operation, expected):
    out = operation(ImageProcessor(sample_jpeg))
    assert len(out) > 0
    size = ImageProcessor(out).size()
    assert (size.width, size.height) == expected


def test_sizing_keeps_source_format(sample_jpeg):
    out = ImageProcessor(sample_jpeg).resize(100, 80)
    assert ImageProcessor(out).image_type() == "jpeg"


def test_convert_changes_type(sample_jpeg):
    out = ImageProcessor(sample_jpeg).convert("png")
    assert ImageProcessor(out).image_type() == "png"


def test_convert_rejects_unknown_format(sample_jpeg):
    with pytest.raises(UnsupportedImageTypeError):
        ImageProcessor(sample_jpeg).convert("invalid_format")


@pytest.mark.parametrize(
    "name, expected",
    [("jpeg", "JPEG"), ("jpg", "JPEG"), ("webp", "WEBP"), ("png", "PNG")],
)
def test_image_format_for(name, expected):
    assert image_format_for(name) == expected


def test_image_format_for_unknown():
    with pytest.raises(UnsupportedImageTypeError, match="unsupported image type"):
        image_format_for("unknown")


@pytest.mark.parametrize(
    "gravity, colour",
    [(Gravity.NORTH, (255, 0, 0)), (Gravity.SOUTH, (0, 0, 255))],
)
def test_crop_follows_gravity(two_band_png, gravity, colour):
    out = ImageProcessor(two_band_png).crop(100, 100, gravity)
    img = _open(out).convert("RGB")
    assert img.size == (100, 100)
    assert img.getpixel((50, 50)) == colour


def test_unknown_gravity_falls_back_to_smart(two_band_png):
    out = ImageProcessor(two_band_png).crop(100, 100, 999)
    assert _open(out).size == (100, 100)


def test_invalid_buffer_raises():
    proc = ImageProcessor(b"not an image")
    with pytest.raises(UnsupportedImageTypeError):
        proc.size()
    with pytest.raises(UnsupportedImageTypeError):
        proc.metadata()
    assert proc.image_type() == "unknown"


def test_flip_keeps_dimensions_and_swaps_rows(two_band_png):
    out = ImageProcessor(two_band_png).flip()
    img = _open(out).convert("RGB")
    assert img.size == (100, 200)
    assert img.getpixel((10, 10)) == (0, 0, 255)
    assert img.getpixel((10, 190)) == (255, 0, 0)


def test_grayscale_removes_colour(two_band_png):
    out = ImageProcessor(two_band_png).grayscale()
    assert _open(out).mode == "L"


def test_enable_palette_changes_data(sample_jpeg):
    out = ImageProcessor(sample_jpeg).enable_palette()
    assert len(ImageProcessor(out)) > 0
    assert out != sample_jpeg


def test_enable_palette_on_png_uses_palette_mode(two_band_png):
    out = ImageProcessor(two_band_png).enable_palette()
    assert _open(out).mode == "P"


def test_lossless_compress_preserves_dimensions(sample_jpeg):
    out = ImageProcessor(sample_jpeg).lossless_compress()
    metadata = ImageProcessor(out).metadata()
    assert metadata.size == ImageSize(640, 480)


def test_lossless_png_keeps_pixels(two_band_png):
    out = ImageProcessor(two_band_png).lossless_compress()
    original = _open(two_band_png).convert("RGB")
    result = _open(out).convert("RGB")
    assert list(result.getdata()) == list(original.getdata())


def test_metadata(sample_jpeg):
    assert ImageProcessor(sample_jpeg).metadata() == ImageMetadata(
        size=ImageSize(640, 480), type="jpeg"
    )


@pytest.mark.parametrize(
    "value, expected",
    [
        (Gravity.CENTRE, True),
        (Gravity.SMART, True),
        (Gravity.EAST, True),
        (-1, False),
        (6, False),
        (99, False),
    ],
)
def test_is_valid_gravity(value, expected):
    assert is_valid_gravity(value) is expected