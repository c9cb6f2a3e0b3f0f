from __future__ import annotations

from collections.abc import Iterator
from logging import getLogger
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from asmexpr.cmdline import format_hex, main
from asmexpr.types import unlimited


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Remove the handlers that the command installs on the root logger."""
    root = getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def run(*args: str) -> Result:
    return CliRunner().invoke(main, ["eval", *args])


def stdout_lines(result: Result) -> list[str]:
    return result.stdout.splitlines()


def test_format_hex() -> None:
    assert format_hex(0x1234, 16) == "1234H"
    assert format_hex(0xFF, 8) == "0FFH"
    assert format_hex(-1, 16) == "0FFFFH"
    assert format_hex(5, 32) == "00000005H"
    assert format_hex(-0x1A, unlimited) == "-1AH"
    assert format_hex(-0xAB, unlimited) == "-0ABH"


def test_eval_operands() -> None:
    result = run("10-3-2", "1234H", "'AB'")
    assert result.exit_code == 0, result.output
    assert stdout_lines(result) == [
        "9\t00000009H",
        "4660\t00001234H",
        "16706\t00004142H",
    ]


def test_eval_definitions() -> None:
    result = run("-D", "BASE=8000H", "-D", "TOP=BASE+10H", "--pc", "BASE+2", "TOP-$")
    assert result.exit_code == 0, result.output
    assert stdout_lines(result) == ["14\t0000000EH"]


def test_eval_width() -> None:
    result = run("--width", "16", "0FFFFH")
    assert result.exit_code == 0, result.output
    assert stdout_lines(result) == ["-1\t0FFFFH"]


def test_eval_bad_width() -> None:
    result = run("--width", "none", "1")
    assert result.exit_code == 2


def test_eval_bad_definition() -> None:
    result = run("-D", "NOVALUE", "1")
    assert result.exit_code == 2


def test_eval_nested_parens() -> None:
    result = run("--nested-parens", "2*((1+2)*3)")
    assert result.exit_code == 0, result.output
    assert stdout_lines(result) == ["18\t00000012H"]


def test_eval_undefined_symbol() -> None:
    """A value is still printed, but the exit status reports the problem."""
    result = run("UNKNOWN+1")
    assert result.exit_code == 1
    assert stdout_lines(result) == ["1\t00000001H"]


def test_eval_range_check() -> None:
    result = run("--check", "sbyte", "127", "128")
    assert result.exit_code == 1
    assert stdout_lines(result) == ["127\t0000007FH", "0\t00000000H"]

    result = run("--check", "byte", "0FFH")
    assert result.exit_code == 0, result.output
    assert stdout_lines(result) == ["255\t000000FFH"]


def test_eval_symbol_file(tmp_path: Path) -> None:
    path = tmp_path / "defs.sym"
    path.write_text("; memory map\nRAM 0C000H\nSTACK RAM+1000H\n", encoding="utf-8")
    result = run("-s", str(path), "STACK-RAM")
    assert result.exit_code == 0, result.output
    assert stdout_lines(result) == ["4096\t00001000H"]


def test_eval_symbol_file_errors(tmp_path: Path) -> None:
    """Errors in the symbol definitions stop evaluation of the operands."""
    path = tmp_path / "defs.sym"
    path.write_text("RAM 0C000H\nRAM 0\n", encoding="utf-8")
    result = run("-s", str(path), "RAM")
    assert result.exit_code == 1
    assert stdout_lines(result) == []
