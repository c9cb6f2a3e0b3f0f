from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from inspect import cleandoc
from logging import getLogger
from resource import RLIMIT_AS, getrlimit, setrlimit

import pytest

from asmexpr.input import ErrorCollector

MEM_LIMIT_GB = 2


def set_memory_limit(size: int) -> None:
    _soft, hard = getrlimit(RLIMIT_AS)
    if hard != -1 and hard < size:
        size = hard
    setrlimit(RLIMIT_AS, (size, hard))


# Shift operators can produce huge integers; fail fast instead of swapping.
set_memory_limit(MEM_LIMIT_GB * 1024**3)


@pytest.fixture
def collector() -> ErrorCollector:
    """Fixture providing a fresh error collector."""
    return ErrorCollector(getLogger("test"))


def iter_code_blocks(docstring: str, language: str) -> Iterator[str]:
    """
    Iterate through the lines of the code blocks of the given language
    in a clean docstring.
    """
    prefix = ".. code-block::"
    in_block = False
    for line in docstring.split("\n"):
        if line.startswith(prefix):
            in_block = line[len(prefix) :].strip() == language
        elif line and not line[0].isspace():
            in_block = False
        elif in_block and line.strip():
            yield line.strip()


@dataclass(frozen=True)
class Case:
    """An operand together with the value it is expected to evaluate to."""

    operand: str
    expected: int

    def __str__(self) -> str:
        return self.operand


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    """
    Parametrize the "case" argument from "expr" code blocks in the test
    function's docstring, which contain lines of the form "OPERAND = VALUE".
    """
    if "case" in metafunc.fixturenames:
        docstring = cleandoc(metafunc.function.__doc__ or "")
        cases = []
        for line in iter_code_blocks(docstring, "expr"):
            operand, sep, value = line.rpartition(" = ")
            if not sep:
                raise pytest.Collector.CollectError(f"No value in case: {line}")
            cases.append(Case(operand, int(value, 0)))
        metafunc.parametrize("case", cases, ids=str)
