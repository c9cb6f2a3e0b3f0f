"""
Symbol table for use with the operand evaluator.

A symbol is a name which can be used in expressions: a label holding an
address or a constant defined by the host assembler. Names are significant
only up to a fixed number of characters; longer names are truncated both
when they are defined and when they are looked up.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing_extensions import override

from .evaluator import Evaluator
from .input import BadInput, ErrorCollector, InputLocation
from .tokens import DECIMAL_DIGITS, is_operator


class SymbolTable(Mapping[str, int]):
    """
    Mapping from symbol names to their values.
    Storing symbols is done by calling define().
    When a symbol is looked up that was not stored in this table,
    it is looked up in the parent table (if any).
    """

    def __init__(self, symbol_size: int = 8, parent: Mapping[str, int] | None = None):
        self.symbol_size = symbol_size
        self.parent = parent
        self.elements: dict[str, int] = {}
        self.locations: dict[str, InputLocation | None] = {}

    @override
    def __str__(self) -> str:
        args = ", ".join(f"{name}={value:d}" for name, value in self.elements.items())
        return f"{self.__class__.__name__}({args})"

    def _truncate(self, name: str) -> str:
        return name[: self.symbol_size]

    @override
    def __len__(self) -> int:
        return sum(1 for _ in self)

    @override
    def __iter__(self) -> Iterator[str]:
        yield from self.elements
        parent = self.parent
        if parent is not None:
            for name in parent:
                if name not in self.elements:
                    yield name

    @override
    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        name = self._truncate(key)
        return name in self.elements or (
            (parent := self.parent) is not None and name in parent
        )

    @override
    def __getitem__(self, key: str) -> int:
        name = self._truncate(key)
        try:
            return self.elements[name]
        except KeyError:
            parent = self.parent
            if parent is None:
                raise
            return parent[name]

    def define(
        self, name: str, value: int, location: InputLocation | None = None
    ) -> str:
        """
        Define a symbol with the given name and value.
        Returns the name under which the symbol is stored, which is shorter
        than the given name if truncation was necessary.
        Raises BadInput if the (truncated) name is already defined in this
        table or its parent.
        """
        name = self._truncate(name)
        if name in self:
            msg = f'multiply defined symbol "{name}"'
            old_location = self.locations.get(name)
            raise BadInput(msg, location, old_location)
        self.elements[name] = value
        self.locations[name] = location
        return name


def is_valid_name(name: str, delimiter: str = "'") -> bool:
    """
    Return True iff the given name can be referenced from an expression.
    Such a name does not start with a digit or a group or string opener
    and does not contain operator characters. "$" is reserved for the
    current address.
    """
    if not name or name == "$":
        return False
    if name[0] in DECIMAL_DIGITS or name[0] in ("(", delimiter):
        return False
    return not any(is_operator(char) for char in name)


def define_symbols(
    lines: Iterable[InputLocation],
    table: SymbolTable,
    evaluator: Evaluator,
    collector: ErrorCollector,
) -> None:
    """
    Define symbols from lines of the form "NAME EXPR".

    The expression is evaluated by the given evaluator, which should look
    up symbols in the same table, so definitions can use symbols defined
    on earlier lines. Problems are reported to the collector and the
    offending line is skipped.
    """
    for line in lines:
        text = line.text
        name_end = 0
        while name_end < len(text) and not text[name_end].isspace():
            name_end += 1
        name_location = line[:name_end]
        expr_location = line[name_end:]
        if not expr_location.text.strip():
            collector.error(
                f'missing value for symbol "{name_location.text}"',
                location=line.end_location,
            )
            continue
        name = name_location.text
        if not is_valid_name(name, evaluator.settings.string_delimiter):
            collector.error(f'bad symbol name "{name}"', location=name_location)
            continue
        value = evaluator.evaluate(expr_location)
        try:
            name = table.define(name, value, name_location)
        except BadInput as ex:
            collector.error(f"{ex}", location=ex.locations)
        else:
            collector.info(f"{name} = {value:d}", location=name_location)
