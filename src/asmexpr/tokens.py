from __future__ import annotations

from enum import Enum, auto

DECIMAL_DIGITS = "0123456789"


class TokenKind(Enum):
    decimal = auto()
    hexadecimal = auto()
    octal = auto()
    binary = auto()
    sub = auto()
    add = auto()
    multiply = auto()
    divide = auto()
    modulo = auto()
    shift_left = auto()
    shift_right = auto()
    bitwise_or = auto()
    bitwise_and = auto()
    bitwise_xor = auto()
    complement = auto()
    symbol = auto()

    @property
    def is_number(self) -> bool:
        return self in _number_kinds

    @property
    def is_operator(self) -> bool:
        return self in _operator_chars


_number_kinds = frozenset(
    (TokenKind.decimal, TokenKind.hexadecimal, TokenKind.octal, TokenKind.binary)
)

_operator_kinds = {
    "-": TokenKind.sub,
    "+": TokenKind.add,
    "*": TokenKind.multiply,
    "/": TokenKind.divide,
    "%": TokenKind.modulo,
    "<": TokenKind.shift_left,
    ">": TokenKind.shift_right,
    "|": TokenKind.bitwise_or,
    "&": TokenKind.bitwise_and,
    "^": TokenKind.bitwise_xor,
    "~": TokenKind.complement,
}

_operator_chars = {kind: char for char, kind in _operator_kinds.items()}

_suffix_kinds = {
    "H": TokenKind.hexadecimal,
    "B": TokenKind.binary,
    "O": TokenKind.octal,
}


def is_operator(char: str) -> bool:
    """Is the given character one of the single-character operators?"""
    return char in _operator_kinds


def operator_char(kind: TokenKind) -> str:
    """Return the character for an operator token kind."""
    return _operator_chars[kind]


def classify(token: str) -> TokenKind:
    """
    Determine the kind of a token.

    A token that starts with a digit is a number, with its radix determined
    by the last character: a digit means decimal, otherwise it must be one
    of the radix suffixes. A token starting with a digit that has an unknown
    suffix is treated as a symbol name, which will then fail to resolve.
    """
    if not token:
        return TokenKind.symbol
    first = token[0]
    if first in DECIMAL_DIGITS:
        last = token[-1]
        if last in DECIMAL_DIGITS:
            return TokenKind.decimal
        return _suffix_kinds.get(last, TokenKind.symbol)
    return _operator_kinds.get(first, TokenKind.symbol)
