"""Image operations on encoded image bytes."""

from __future__ import annotations

import io
import math
from dataclasses import dataclass
from enum import IntEnum

from PIL import Image, ImageOps


class UnsupportedImageTypeError(ValueError):
    """Raised for an unknown target format or data that is not a readable image."""

    def __init__(self, message: str = "unsupported image type") -> None:
        super().__init__(message)


class Gravity(IntEnum):
    """Where a crop keeps the image."""

    CENTRE = 0
    NORTH = 1
    EAST = 2
    SOUTH = 3
    WEST = 4
    SMART = 5


def is_valid_gravity(value: int) -> bool:
    """Tell whether a number names one of the gravities."""
    return 0 <= int(value) <= Gravity.SMART


_FORMATS = {"jpeg": "JPEG", "jpg": "JPEG", "webp": "WEBP", "png": "PNG"}

_ANCHORS = {
    Gravity.CENTRE: (0.5, 0.5),
    Gravity.NORTH: (0.5, 0.0),
    Gravity.EAST: (1.0, 0.5),
    Gravity.SOUTH: (0.5, 1.0),
    Gravity.WEST: (0.0, 0.5),
}

_SMART_STEPS = 8


def image_format_for(format_name: str) -> str:
    """Map a user-facing format name to the encoder's format name."""
    try:
        return _FORMATS[format_name]
    except KeyError:
        raise UnsupportedImageTypeError() from None


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int


@dataclass(frozen=True)
class ImageMetadata:
    size: ImageSize
    type: str


def _to_gravity(value: int) -> Gravity:
    try:
        return Gravity(value)
    except ValueError:
        return Gravity.SMART


def _has_alpha(img: Image.Image) -> bool:
    return "A" in img.mode or "transparency" in img.info


def _entropy(img: Image.Image) -> float:
    histogram = img.convert("L").histogram()
    total = sum(histogram)
    if not total:
        return 0.0
    return -sum(
        (count / total) * math.log2(count / total) for count in histogram if count
    )


def _smart_offset(img: Image.Image, width: int, height: int) -> tuple[int, int]:
    dx = img.width - width
    dy = img.height - height
    best = (0, 0)
    best_score = -1.0
    for step in range(_SMART_STEPS + 1):
        left = round(dx * step / _SMART_STEPS)
        top = round(dy * step / _SMART_STEPS)
        score = _entropy(img.crop((left, top, left + width, top + height)))
        if score > best_score:
            best, best_score = (left, top), score
    return best


def _cover_crop(img: Image.Image, width: int, height: int, gravity: Gravity) -> Image.Image:
    scale = max(width / img.width, height / img.height)
    scaled_size = (
        max(width, round(img.width * scale)),
        max(height, round(img.height * scale)),
    )
    if scaled_size != img.size:
        img = img.resize(scaled_size, Image.Resampling.LANCZOS)
    if gravity is Gravity.SMART:
        left, top = _smart_offset(img, width, height)
    else:
        fx, fy = _ANCHORS[gravity]
        left = round((img.width - width) * fx)
        top = round((img.height - height) * fy)
    return img.crop((left, top, left + width, top + height))


def _encode(img: Image.Image, fmt: str, **options) -> bytes:
    if fmt == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
        img = img.convert("RGB")
    elif fmt == "WEBP" and img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if _has_alpha(img) else "RGB")
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **options)
    return buffer.getvalue()


class ImageProcessor:
    """Applies one operation at a time to an encoded image, keeping its format."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def __len__(self) -> int:
        return len(self.data)

    def _open(self) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(self.data))
            img.load()
        except (OSError, SyntaxError, ValueError) as exc:
            raise UnsupportedImageTypeError() from exc
        return img

    def _save(self, img: Image.Image, source_format: str | None, **options) -> bytes:
        return _encode(img, source_format or "PNG", **options)

    def size(self) -> ImageSize:
        img = self._open()
        return ImageSize(width=img.width, height=img.height)

    def image_type(self) -> str:
        try:
            img = self._open()
        except UnsupportedImageTypeError:
            return "unknown"
        return (img.format or "unknown").lower()

    def metadata(self) -> ImageMetadata:
        return ImageMetadata(size=self.size(), type=self.image_type())

    def resize(self, width: int, height: int) -> bytes:
        img = self._open()
        return self._save(img.resize((width, height), Image.Resampling.LANCZOS), img.format)

    def convert(self, format_name: str) -> bytes:
        target = image_format_for(format_name)
        return _encode(self._open(), target)

    def crop(self, width: int, height: int, gravity: int) -> bytes:
        img = self._open()
        cropped = _cover_crop(img, width, height, _to_gravity(gravity))
        return self._save(cropped, img.format)

    def flip(self) -> bytes:
        img = self._open()
        return self._save(ImageOps.flip(img), img.format)

    def enlarge(self, width: int, height: int) -> bytes:
        img = self._open()
        return self._save(img.resize((width, height), Image.Resampling.LANCZOS), img.format)

    def thumbnail(self, width: int) -> bytes:
        img = self._open()
        square = _cover_crop(img, width, width, Gravity.CENTRE)
        options = {"quality": 95} if img.format in ("JPEG", "WEBP") else {}
        return self._save(square, img.format, **options)

    def grayscale(self) -> bytes:
        img = self._open()
        keep_alpha = _has_alpha(img) and img.format != "JPEG"
        return self._save(img.convert("LA" if keep_alpha else "L"), img.format)

    def enable_palette(self) -> bytes:
        img = self._open()
        mode = "RGBA" if _has_alpha(img) else "RGB"
        return self._save(img.convert(mode).quantize(colors=256), img.format)

    def lossless_compress(self) -> bytes:
        img = self._open()
        fmt = img.format or "PNG"
        if fmt == "PNG":
            options = {"optimize": True}
        elif fmt == "WEBP":
            options = {"lossless": True}
        elif fmt == "JPEG":
            options = {"quality": 100, "subsampling": 0, "optimize": True}
        else:
            options = {}
        return _encode(img, fmt, **options)