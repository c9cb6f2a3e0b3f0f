"""
Conversion of numeric and character literals to integers.

The converters are lenient: they consume digits from the start of the text
and stop at the first character that is not a valid digit, without
reporting anything. This means a radix suffix (or any other trailing
garbage) is simply ignored.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

_HEX_DIGITS = "0123456789ABCDEF"


def _parse_radix(text: str, digits: str) -> int:
    radix = len(digits)
    num = 0
    for char in text:
        value = digits.find(char)
        if value < 0:
            break
        num = num * radix + value
    return num


def parse_decimal(text: str) -> int:
    """
    Parse a decimal number, with optional leading whitespace and sign.
    Returns 0 if no digits are found.
    """
    text = text.lstrip()
    sign = 1
    if text[:1] in ("-", "+"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    return sign * _parse_radix(text, _HEX_DIGITS[:10])


def parse_hexadecimal(text: str) -> int:
    """Parse a hexadecimal number; only upper case letters are digits."""
    return _parse_radix(text, _HEX_DIGITS)


def parse_octal(text: str) -> int:
    return _parse_radix(text, _HEX_DIGITS[:8])


def parse_binary(text: str) -> int:
    return _parse_radix(text, _HEX_DIGITS[:2])


def pack_chars(text: str) -> int:
    """
    Convert a character string to an integer by packing the character codes,
    first character in the most significant position.
    """
    num = 0
    for char in text:
        num = (num << 8) + ord(char)
    return num


Converter: TypeAlias = Callable[[str], int]
