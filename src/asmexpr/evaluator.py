"""
Evaluation of assembler operand expressions.

The evaluator makes a single left-to-right pass over the operand text,
collecting values and operators as it goes; no syntax tree is built.
There is no operator precedence: an operator combines the value computed
so far with the value of the entire remainder of the operand. Operators
are combined from the right once the whole operand has been scanned.
As a result, "10-3-2" evaluates as 10 - (3 - 2).

Problems are reported to an `ErrorCollector` and evaluation continues with
a substitute value, so a caller always gets an integer back.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from logging import getLogger
from operator import add, and_, mul, or_, sub, xor

from .input import ErrorCollector, ErrorKind, InputLocation
from .numbers import (
    Converter,
    pack_chars,
    parse_binary,
    parse_decimal,
    parse_hexadecimal,
    parse_octal,
)
from .tokens import TokenKind, classify, is_operator, operator_char
from .types import Width, to_signed, unlimited

logger = getLogger("eval-expr")


@dataclass(frozen=True, slots=True)
class EvaluatorSettings:
    """Constants of the host assembler that affect operand evaluation."""

    symbol_size: int = 8
    """Symbol names are truncated to this many characters before lookup."""

    max_token_length: int = 128
    """
    Maximum length of a single token, parenthesized group or quoted string.
    Longer ones are reported and truncated.
    """

    string_delimiter: str = "'"
    """Character that opens and closes a character-pack literal."""

    width: Width = 32
    """
    Width in bits of the signed integers that values are wrapped to,
    or `unlimited` to disable wrapping.
    """

    nested_parentheses: bool = False
    """
    If enabled, parenthesized groups are closed by the matching ")".
    Otherwise the first ")" closes the group, even if another group
    was opened inside it.
    """

    def __post_init__(self) -> None:
        if self.symbol_size <= 0:
            raise ValueError(f"symbol size must be positive, got {self.symbol_size:d}")
        if self.max_token_length <= 0:
            raise ValueError(
                f"maximum token length must be positive, got {self.max_token_length:d}"
            )
        if len(self.string_delimiter) != 1:
            raise ValueError(
                f'string delimiter must be a single character, got "{self.string_delimiter}"'
            )
        if self.string_delimiter == "(" or is_operator(self.string_delimiter):
            raise ValueError(
                f'string delimiter "{self.string_delimiter}" conflicts with expression syntax'
            )

    @property
    def max_unlimited_shift(self) -> int:
        """
        Largest left shift count accepted when the width is unlimited:
        the number of bits in a character-pack literal of maximum length.
        """
        return self.max_token_length * 8


DEFAULT_SETTINGS = EvaluatorSettings()

_converters: Mapping[TokenKind, Converter] = {
    TokenKind.decimal: parse_decimal,
    TokenKind.hexadecimal: parse_hexadecimal,
    TokenKind.octal: parse_octal,
    TokenKind.binary: parse_binary,
}

_operations: Mapping[TokenKind, Callable[[int, int], int]] = {
    TokenKind.sub: sub,
    TokenKind.add: add,
    TokenKind.multiply: mul,
    TokenKind.bitwise_or: or_,
    TokenKind.bitwise_and: and_,
    TokenKind.bitwise_xor: xor,
}


def divide(lhs: int, rhs: int) -> int:
    """Integer division that truncates towards zero."""
    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs < 0) == (rhs < 0) else -quotient


def modulo(lhs: int, rhs: int) -> int:
    """Remainder of `divide`; it has the same sign as the dividend."""
    return lhs - rhs * divide(lhs, rhs)


class Evaluator:
    """
    Computes the values of operand expressions.

    Symbols are looked up in the given mapping, which is only read.
    The value of the "$" marker is taken from `current_address`, which can
    be a fixed number or a function returning the current location counter.
    """

    def __init__(
        self,
        symbols: Mapping[str, int],
        collector: ErrorCollector,
        current_address: int | Callable[[], int] = 0,
        settings: EvaluatorSettings = DEFAULT_SETTINGS,
    ):
        self._symbols = symbols
        self._collector = collector
        self._current_address = current_address
        self._settings = settings

    @property
    def settings(self) -> EvaluatorSettings:
        return self._settings

    @property
    def current_address(self) -> int:
        address = self._current_address
        return address if isinstance(address, int) else address()

    def evaluate(self, operand: str | InputLocation) -> int:
        """
        Compute the value of the given operand.
        Problems are reported to the collector; this method does not raise
        exceptions on bad input.
        """
        if isinstance(operand, str):
            operand = InputLocation.from_string(operand)
        return self._evaluate(operand)

    def _evaluate(self, location: InputLocation) -> int:
        text = location.text
        end = len(text)
        delimiter = self._settings.string_delimiter
        # Operators waiting for the value of everything to their right,
        # each with the value computed to its left.
        pending: list[tuple[TokenKind, int, InputLocation]] = []
        value = 0
        idx = 0
        while idx < end:
            char = text[idx]

            if char.isspace():
                idx += 1
                continue

            if char == "(":
                close = self._find_group_end(text, idx + 1)
                if close < 0:
                    self._collector.report(
                        ErrorKind.mismatched_parenthesis, location=location[idx:]
                    )
                    break
                value = self._evaluate(self._bounded(location[idx + 1 : close]))
                idx = close + 1
                continue

            if char == delimiter:
                start = idx + 1
                close = start
                while close < end and text[close] not in (delimiter, "\n"):
                    close += 1
                if close < end and text[close] == delimiter:
                    idx = close + 1
                else:
                    self._collector.report(
                        ErrorKind.mismatched_quote, location=location[idx:close]
                    )
                    # Scanning resumes at the newline or end of input.
                    idx = close
                value = self._wrap(pack_chars(self._bounded(location[start:close]).text))
                continue

            token_end = idx + 1
            if not is_operator(char):
                while (
                    token_end < end
                    and not text[token_end].isspace()
                    and not is_operator(text[token_end])
                ):
                    token_end += 1
            token = self._bounded(location[idx:token_end])
            kind = classify(token.text)

            if kind.is_operator:
                # The remainder is scanned with a fresh accumulator.
                pending.append((kind, value, token))
                value = 0
            elif kind.is_number:
                value = self._wrap(_converters[kind](token.text))
            elif token.text == "$":
                value = self._wrap(self.current_address)
            else:
                value = self._lookup(token, value)

            idx = token_end

        for kind, lhs, token in reversed(pending):
            value = self._combine(kind, lhs, value, token)
        return value

    def _find_group_end(self, text: str, start: int) -> int:
        """
        Return the index of the ")" that closes a group of which the contents
        start at the given index, or -1 if the group is not closed.
        """
        nested = self._settings.nested_parentheses
        depth = 0
        for idx in range(start, len(text)):
            char = text[idx]
            if char == ")":
                if depth == 0:
                    return idx
                depth -= 1
            elif char == "(" and nested:
                depth += 1
        return -1

    def _bounded(self, location: InputLocation) -> InputLocation:
        max_length = self._settings.max_token_length
        if len(location) <= max_length:
            return location
        self._collector.report(
            ErrorKind.token_too_long,
            location=location,
            detail=f"{len(location):d} characters, maximum is {max_length:d}",
        )
        return location[:max_length]

    def _lookup(self, token: InputLocation, value: int) -> int:
        name = token.text[: self._settings.symbol_size]
        try:
            found = self._symbols[name]
        except KeyError:
            self._collector.report(
                ErrorKind.undefined_symbol, location=token, detail=name
            )
            return value
        else:
            return self._wrap(found)

    def _combine(
        self, kind: TokenKind, lhs: int, rhs: int, location: InputLocation
    ) -> int:
        logger.debug("%d %s %d", lhs, operator_char(kind), rhs)
        match kind:
            case TokenKind.complement:
                return self._wrap(~rhs)
            case TokenKind.divide | TokenKind.modulo:
                if rhs == 0:
                    self._collector.report(ErrorKind.division_by_zero, location=location)
                    return 0
                operation = divide if kind is TokenKind.divide else modulo
                return self._wrap(operation(lhs, rhs))
            case TokenKind.shift_left | TokenKind.shift_right:
                return self._shift(kind, lhs, rhs, location)
            case _:
                return self._wrap(_operations[kind](lhs, rhs))

    def _shift(
        self, kind: TokenKind, lhs: int, count: int, location: InputLocation
    ) -> int:
        if count < 0:
            self._collector.report(
                ErrorKind.value_out_of_range,
                location=location,
                detail=f"negative shift count {count:d}",
            )
            return 0
        width = self._settings.width
        if kind is TokenKind.shift_right:
            # Arithmetic shift: the sign is kept.
            return lhs >> count
        if width is unlimited:
            max_shift = self._settings.max_unlimited_shift
            if count > max_shift:
                self._collector.report(
                    ErrorKind.value_out_of_range,
                    location=location,
                    detail=f"shift count {count:d} exceeds {max_shift:d}",
                )
                return 0
        elif count >= width:
            return 0
        return self._wrap(lhs << count)

    def _wrap(self, value: int) -> int:
        return to_signed(value, self._settings.width)


def evaluate(
    operand: str | InputLocation,
    symbols: Mapping[str, int] | None = None,
    current_address: int | Callable[[], int] = 0,
    collector: ErrorCollector | None = None,
    settings: EvaluatorSettings = DEFAULT_SETTINGS,
) -> int:
    """
    Compute the value of a single operand.

    If no collector is given, problems are logged but not otherwise made
    available to the caller.
    """
    evaluator = Evaluator(
        {} if symbols is None else symbols,
        ErrorCollector(logger) if collector is None else collector,
        current_address,
        settings,
    )
    return evaluator.evaluate(operand)
