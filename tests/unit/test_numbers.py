from __future__ import annotations

from hypothesis import given
from hypothesis.strategies import integers, text

from asmexpr.numbers import (
    pack_chars,
    parse_binary,
    parse_decimal,
    parse_hexadecimal,
    parse_octal,
)


def test_parse_decimal() -> None:
    assert parse_decimal("0") == 0
    assert parse_decimal("12345") == 12345
    assert parse_decimal("-42") == -42
    assert parse_decimal("+42") == 42
    assert parse_decimal("  7") == 7


def test_parse_decimal_garbage() -> None:
    """Parsing stops at the first non-digit; no digits gives 0."""
    assert parse_decimal("12AB5") == 12
    assert parse_decimal("ABC") == 0
    assert parse_decimal("") == 0
    assert parse_decimal("-") == 0


def test_parse_hexadecimal() -> None:
    assert parse_hexadecimal("1234H") == 0x1234
    assert parse_hexadecimal("0FFH") == 0xFF
    assert parse_hexadecimal("ABCDEF") == 0xABCDEF


def test_parse_hexadecimal_lower_case() -> None:
    """Lower case letters are not hexadecimal digits."""
    assert parse_hexadecimal("0ffH") == 0
    assert parse_hexadecimal("1aH") == 1


def test_parse_octal() -> None:
    assert parse_octal("17O") == 15
    assert parse_octal("777O") == 0o777
    assert parse_octal("78O") == 7


def test_parse_binary() -> None:
    assert parse_binary("101B") == 5
    assert parse_binary("11111111B") == 255
    assert parse_binary("1021B") == 2


def test_pack_chars() -> None:
    assert pack_chars("") == 0
    assert pack_chars("A") == 65
    assert pack_chars("AB") == (ord("A") << 8) + ord("B")
    assert pack_chars("ABC") == 0x414243


@given(integers(min_value=0))
def test_parse_radix_matches_int(value: int) -> None:
    """The converters agree with Python's own formatting."""
    assert parse_decimal(f"{value:d}") == value
    assert parse_hexadecimal(f"{value:X}H") == value
    assert parse_octal(f"{value:o}O") == value
    assert parse_binary(f"{value:b}B") == value


@given(text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", max_size=8))
def test_pack_chars_bytes(chars: str) -> None:
    """Packing ASCII text matches big endian byte order."""
    assert pack_chars(chars) == int.from_bytes(chars.encode("ascii"), "big")
