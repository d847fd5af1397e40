"""Checks on command arguments before any image is touched."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from compactify.imaging import is_valid_gravity


class ValidationError(ValueError):
    """An argument failed validation."""


class InvalidDimensionsError(ValidationError):
    def __init__(self, message: str = "invalid dimensions") -> None:
        super().__init__(message)


class FormatRequiredError(ValidationError):
    def __init__(self, message: str = "format is required") -> None:
        super().__init__(message)


class InvalidFormatError(ValidationError):
    def __init__(self, message: str = "invalid format") -> None:
        super().__init__(message)


class InvalidGravityError(ValidationError):
    def __init__(self, message: str = "invalid gravity") -> None:
        super().__init__(message)


class WidthTooSmallError(ValidationError):
    def __init__(self, message: str = "width is below the minimum allowed value") -> None:
        super().__init__(message)


class WidthTooLargeError(ValidationError):
    def __init__(self, message: str = "width exceeds the maximum allowed value") -> None:
        super().__init__(message)


_SUPPORTED_FORMATS = frozenset({"jpg", "jpeg", "png", "webp"})


class _Validation(Protocol):
    def validate(self) -> None: ...


@dataclass(frozen=True)
class DimensionsValidation:
    width: int
    height: int

    def validate(self) -> None:
        if self.width < 1 or self.height < 1:
            raise InvalidDimensionsError()


@dataclass(frozen=True)
class FormatValidation:
    format: str

    def validate(self) -> None:
        if not self.format:
            raise FormatRequiredError()
        if self.format not in _SUPPORTED_FORMATS:
            raise InvalidFormatError()


@dataclass(frozen=True)
class GravityValidation:
    gravity: int

    def validate(self) -> None:
        if not is_valid_gravity(self.gravity):
            raise InvalidGravityError()


@dataclass(frozen=True)
class WidthValidation:
    width: int
    min_width: int = 0
    max_width: int = 0

    def validate(self) -> None:
        if self.width < self.min_width:
            raise WidthTooSmallError()
        if self.max_width > 0 and self.width > self.max_width:
            raise WidthTooLargeError()


@dataclass(frozen=True)
class ValidationComposite:
    """Runs every validation and reports all failures at once, one per line."""

    validations: list[_Validation] = field(default_factory=list)

    def validate(self) -> None:
        messages = []
        for validation in self.validations:
            try:
                validation.validate()
            except ValidationError as exc:
                messages.append(str(exc))
        if messages:
            raise ValidationError("\n".join(messages))