from __future__ import annotations

from hypothesis import given
from hypothesis.strategies import integers
from pytest import raises

from asmexpr.types import mask_for_width, parse_width, to_signed, unlimited


def test_mask_for_width() -> None:
    assert mask_for_width(1) == 0x001
    assert mask_for_width(8) == 0x0FF
    assert mask_for_width(16) == 0xFFFF
    assert mask_for_width(unlimited) == -1


def test_to_signed() -> None:
    assert to_signed(0x7F, 8) == 127
    assert to_signed(0x80, 8) == -128
    assert to_signed(0xFF, 8) == -1
    assert to_signed(0x100, 8) == 0
    assert to_signed(-1, 16) == -1
    assert to_signed(0x12345, 16) == 0x2345
    assert to_signed(1 << 100, unlimited) == 1 << 100


@given(integers(), integers(min_value=1, max_value=64))
def test_to_signed_range(value: int, width: int) -> None:
    """Wrapped values are in range and keep the low bits."""
    wrapped = to_signed(value, width)
    assert -(1 << (width - 1)) <= wrapped < (1 << (width - 1))
    assert (wrapped - value) & mask_for_width(width) == 0


def test_unlimited_compare() -> None:
    assert unlimited > 1000
    assert unlimited >= 0
    assert not unlimited < 1000
    assert str(unlimited) == "unlimited"


def test_parse_width() -> None:
    assert parse_width("16") == 16
    assert parse_width("Unlimited") is unlimited
    with raises(ValueError):
        parse_width("0")
    with raises(ValueError):
        parse_width("wide")
