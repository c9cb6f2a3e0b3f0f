from __future__ import annotations

from enum import Enum
from typing import TypeAlias

from typing_extensions import override


class Unlimited(Enum):
    """
    Width value for arbitrary-width integers.
    Compares as infinity: larger than any integer.
    """

    instance = "unlimited"
    """Singleton instance."""

    @override
    def __repr__(self) -> str:
        return "unlimited"

    @override
    def __str__(self) -> str:
        return "unlimited"

    def __lt__(self, other: int | Unlimited) -> bool:
        if self is other or isinstance(other, int):
            return False
        else:
            return NotImplemented  # type: ignore[unreachable]

    def __le__(self, other: int | Unlimited) -> bool:
        if self is other:
            return True
        elif isinstance(other, int):
            return False
        else:
            return NotImplemented  # type: ignore[unreachable]

    def __gt__(self, other: int | Unlimited) -> bool:
        if self is other:
            return False
        elif isinstance(other, int):
            return True
        else:
            return NotImplemented  # type: ignore[unreachable]

    def __ge__(self, other: int | Unlimited) -> bool:
        if self is other or isinstance(other, int):
            return True
        else:
            return NotImplemented  # type: ignore[unreachable]


unlimited = Unlimited.instance

Width: TypeAlias = int | Unlimited


def mask_for_width(width: Width) -> int:
    return -1 if width is unlimited else (1 << width) - 1


def to_signed(value: int, width: Width) -> int:
    """
    Wrap the given value to a two's complement signed integer of the given
    width, the way a native machine integer of that width would hold it.
    """
    if width is unlimited:
        return value
    value &= mask_for_width(width)
    if width > 0 and value >> (width - 1):
        value -= 1 << width
    return value


def parse_width(text: str) -> Width:
    """
    Parse a width given as a decimal number or the word "unlimited".
    Raise `ValueError` if the text is neither.
    """
    if text.casefold() == "unlimited":
        return unlimited
    width = int(text)
    if width <= 0:
        raise ValueError(f"width must be positive, got {width:d}")
    return width
