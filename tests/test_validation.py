import pytest

from compactify.imaging import Gravity
from compactify.validation import (
    DimensionsValidation,
    FormatRequiredError,
    FormatValidation,
    GravityValidation,
    InvalidDimensionsError,
    InvalidFormatError,
    InvalidGravityError,
    ValidationComposite,
    ValidationError,
    WidthTooLargeError,
    WidthTooSmallError,
    WidthValidation,
)


@pytest.mark.parametrize("width, height", [(0, 100), (100, 0), (-10, -10)])
def test_dimensions_invalid(width, height):
    with pytest.raises(InvalidDimensionsError, match="invalid dimensions"):
        DimensionsValidation(width, height).validate()


def test_dimensions_valid():
    assert DimensionsValidation(1, 1).validate() is None


def test_format_required():
    with pytest.raises(FormatRequiredError, match="format is required"):
        FormatValidation("").validate()


def test_format_unsupported():
    with pytest.raises(InvalidFormatError, match="invalid format"):
        FormatValidation("gif").validate()


@pytest.mark.parametrize("fmt", ["webp", "jpg", "jpeg", "png"])
def test_format_supported(fmt):
    assert FormatValidation(fmt).validate() is None


@pytest.mark.parametrize("gravity", [Gravity.CENTRE, Gravity.SMART, Gravity.EAST])
def test_gravity_valid(gravity):
    assert GravityValidation(gravity).validate() is None


@pytest.mark.parametrize("gravity", [Gravity.CENTRE - 1, Gravity.SMART + 1])
def test_gravity_invalid(gravity):
    with pytest.raises(InvalidGravityError, match="invalid gravity"):
        GravityValidation(gravity).validate()


def test_width_too_small():
    with pytest.raises(WidthTooSmallError):
        WidthValidation(width=10, min_width=20).validate()


def test_width_too_large():
    with pytest.raises(WidthTooLargeError):
        WidthValidation(width=100, max_width=50).validate()


def test_width_within_bounds():
    assert WidthValidation(width=30, min_width=20, max_width=50).validate() is None


class _Stub:
    def __init__(self, error=None):
        self.error = error

    def validate(self):
        if self.error is not None:
            raise self.error


def test_composite_single_failure():
    composite = ValidationComposite([_Stub(ValidationError("mocked error"))])
    with pytest.raises(ValidationError) as info:
        composite.validate()
    assert "mocked error" in str(info.value)


def test_composite_combines_failures():
    composite = ValidationComposite(
        [_Stub(ValidationError("error_one")), _Stub(ValidationError("error_two"))]
    )
    with pytest.raises(ValidationError) as info:
        composite.validate()
    assert str(info.value) == "error_one\nerror_two"


def test_composite_all_pass():
    assert ValidationComposite([_Stub()]).validate() is None


def test_composite_with_real_validations():
    composite = ValidationComposite(
        [DimensionsValidation(0, 10), GravityValidation(9)]
    )
    with pytest.raises(ValidationError) as info:
        composite.validate()
    assert str(info.value) == "invalid dimensions\ninvalid gravity"