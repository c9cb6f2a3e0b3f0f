"""
Range checks for computed operand values.

These are not applied by the evaluator itself: which check is appropriate
depends on the instruction that the operand belongs to.
"""

from __future__ import annotations

from .input import ErrorCollector, ErrorKind, InputLocation


def _check_range(
    value: int,
    low: int,
    high: int,
    collector: ErrorCollector,
    location: InputLocation | None,
) -> int:
    if low <= value <= high:
        return value
    collector.report(
        ErrorKind.value_out_of_range,
        location=location,
        detail=f"{value:d} not in range {low:d}..{high:d}",
    )
    return 0


def check_byte_signed(
    value: int, collector: ErrorCollector, location: InputLocation | None = None
) -> int:
    """
    Check that a value fits in a byte, allowing for either signedness:
    -255 up to and including 255.
    Returns the value if it fits, otherwise reports an error and returns 0.
    """
    return _check_range(value, -255, 255, collector, location)


def check_byte_strict(
    value: int, collector: ErrorCollector, location: InputLocation | None = None
) -> int:
    """
    Check that a value fits in a signed byte, excluding -128:
    -127 up to and including 127.
    Returns the value if it fits, otherwise reports an error and returns 0.
    """
    return _check_range(value, -127, 127, collector, location)
