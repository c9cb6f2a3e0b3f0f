from __future__ import annotations

from logging import DEBUG, INFO, WARNING, Logger, StreamHandler, getLogger
from pathlib import Path
from typing_extensions import override

from click import (
    Choice,
    Context,
    IntRange,
    Parameter,
    ParamType,
    argument,
    command,
    echo,
    get_current_context,
    group,
    option,
    version_option,
)
from click import Path as PathArg

from .evaluator import Evaluator, EvaluatorSettings
from .input import DelayedError, ErrorCollector, InputLocation, LocationFormatter
from .linereader import DefLineReader
from .ranges import check_byte_signed, check_byte_strict
from .symbol import SymbolTable, define_symbols
from .types import Width, mask_for_width, parse_width, unlimited


def setup_logging(root_level: int) -> Logger:
    handler = StreamHandler()
    formatter = LocationFormatter()
    handler.setFormatter(formatter)
    logger = getLogger()
    logger.addHandler(handler)
    logger.setLevel(root_level)
    return logger


def format_hex(value: int, width: Width) -> str:
    """
    Format a value as a hexadecimal literal with "H" suffix, which the
    evaluator will parse back to the same bit pattern.
    """
    if width is unlimited:
        digits = f"{abs(value):X}"
        sign = "-" if value < 0 else ""
    else:
        digits = f"{value & mask_for_width(width):0{(width + 3) // 4}X}"
        sign = ""
    if not digits[0].isdigit():
        # A leading letter would make the literal look like a symbol.
        digits = "0" + digits
    return f"{sign}{digits}H"


class SymbolDefinitionParamType(ParamType):
    name = "definition"

    @override
    def get_metavar(self, param: Parameter, ctx: Context) -> str:
        return "NAME=EXPR"

    @override
    def convert(
        self, value: str, param: Parameter | None, ctx: Context | None
    ) -> tuple[str, str]:
        name, sep, expr = value.partition("=")
        name = name.strip()
        if not sep or not name:
            self.fail(f'expected NAME=EXPR, got "{value}"', param, ctx)
        return name, expr


class WidthParamType(ParamType):
    name = "width"

    @override
    def get_metavar(self, param: Parameter, ctx: Context) -> str:
        return "BITS|unlimited"

    @override
    def convert(
        self, value: str | Width, param: Parameter | None, ctx: Context | None
    ) -> Width:
        if not isinstance(value, str):
            return value
        try:
            return parse_width(value)
        except ValueError as ex:
            self.fail(f"{ex}", param, ctx)


_range_checks = {
    "byte": check_byte_signed,
    "sbyte": check_byte_strict,
}


@command(name="eval")
@option(
    "-D",
    "--define",
    "definitions",
    multiple=True,
    type=SymbolDefinitionParamType(),
    help="Define a symbol. Can be passed multiple times.",
)
@option(
    "-s",
    "--symbols",
    "symbol_files",
    multiple=True,
    type=PathArg(exists=True, dir_okay=False, path_type=Path),
    help='File with symbol definitions, one "NAME EXPR" per line.',
)
@option("--pc", default="0", help="Value of the location counter ($).")
@option(
    "--width",
    type=WidthParamType(),
    default="32",
    show_default=True,
    help="Width of the integers that values are wrapped to.",
)
@option(
    "--symbol-size",
    type=IntRange(min=1),
    default=8,
    show_default=True,
    help="Number of significant characters in symbol names.",
)
@option(
    "--nested-parens",
    is_flag=True,
    help="Match parentheses by nesting depth instead of closing at the first ).",
)
@option(
    "--check",
    type=Choice(sorted(_range_checks)),
    help="Check the values against a byte operand range.",
)
@option(
    "-v",
    "--verbose",
    count=True,
    help="Increase amount of logging. Can be passed multiple times.",
)
@argument("operands", nargs=-1, required=True)
def evaluate_cmd(
    definitions: tuple[tuple[str, str], ...],
    symbol_files: tuple[Path, ...],
    pc: str,
    width: Width,
    symbol_size: int,
    nested_parens: bool,
    check: str | None,
    verbose: int,
    operands: tuple[str, ...],
) -> None:
    """
    Evaluate assembler operand expressions.

    Each OPERAND is evaluated and its value is printed in decimal and
    hexadecimal. The exit status is 1 if any problems were found.
    """

    logger = setup_logging((WARNING, INFO, DEBUG)[min(verbose, 2)])
    collector = ErrorCollector(logger)
    settings = EvaluatorSettings(
        symbol_size=symbol_size, width=width, nested_parentheses=nested_parens
    )
    symbols = SymbolTable(symbol_size)
    evaluator = Evaluator(symbols, collector, 0, settings)

    try:
        with collector.check():
            for path in symbol_files:
                try:
                    with DefLineReader.open(path, settings.string_delimiter) as reader:
                        define_symbols(reader, symbols, evaluator, collector)
                except OSError as ex:
                    collector.error(f"Error reading symbols: {ex.strerror}", location=str(path))
            for num, (name, expr) in enumerate(definitions, start=1):
                line = f"{name} {expr}"
                location = InputLocation(f"<define {num:d}>", -1, line, (0, len(line)))
                define_symbols((location,), symbols, evaluator, collector)
            pc_location = InputLocation("<pc>", -1, pc, (0, len(pc)))
            current_address = evaluator.evaluate(pc_location)
    except DelayedError:
        get_current_context().exit(1)

    evaluator = Evaluator(symbols, collector, current_address, settings)
    range_check = None if check is None else _range_checks[check]
    for num, operand in enumerate(operands, start=1):
        location = InputLocation(f"<operand {num:d}>", -1, operand, (0, len(operand)))
        value = evaluator.evaluate(location)
        if range_check is not None:
            value = range_check(value, collector, location)
        echo(f"{value:d}\t{format_hex(value, width)}")

    if collector.problem_counter.num_errors > 0:
        collector.summarize("asmexpr")
        get_current_context().exit(1)


@group()
@version_option(prog_name="asmexpr", message="%(prog)s version %(version)s")
def main() -> None:
    """Command line interface to the assembler operand evaluator."""


main.add_command(evaluate_cmd)
