from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Self

from .input import InputLocation


class LineReader:
    """
    Iterates through the lines of a text file.
    The lines will not contain a trailing newline character.
    """

    @classmethod
    @contextmanager
    def open(cls, path: Path) -> Iterator[Self]:
        with path.open(encoding="utf-8") as lines:
            yield cls(str(path), lines)

    def __init__(self, path: str, lines: IO[str]):
        self._path = path
        self._lines = lines
        self._lineno = 0

    @property
    def path(self) -> str:
        return self._path

    def __iter__(self) -> Iterator[InputLocation]:
        return self

    def _next_line(self) -> str:
        line = next(self._lines).rstrip("\n")
        self._lineno += 1
        return line

    def __next__(self) -> InputLocation:
        line = self._next_line()
        return InputLocation(self._path, self._lineno, line, (0, len(line)))


class DefLineReader(LineReader):
    """
    Iterates through the lines of a definition file.
    Comments, which start with ";", are removed, as is trailing whitespace.
    Lines that are empty after that are skipped.
    A ";" between a pair of string delimiters does not start a comment.
    """

    @classmethod
    @contextmanager
    def open(cls, path: Path, delimiter: str = "'") -> Iterator[Self]:
        with path.open(encoding="utf-8") as lines:
            yield cls(str(path), lines, delimiter)

    def __init__(self, path: str, lines: IO[str], delimiter: str = "'"):
        super().__init__(path, lines)
        self._delimiter = delimiter

    def __next__(self) -> InputLocation:
        while True:
            line = self._next_line()
            end = _find_comment(line, self._delimiter)
            while end > 0 and line[end - 1].isspace():
                end -= 1
            start = 0
            while start < end and line[start].isspace():
                start += 1
            if start < end:
                return InputLocation(self._path, self._lineno, line, (start, end))


def _find_comment(line: str, delimiter: str) -> int:
    """
    Return the index at which a comment starts in the given line, or the
    length of the line if there is no comment.
    A ";" inside a quoted string does not start a comment.
    """
    quoted = False
    for idx, char in enumerate(line):
        if char == delimiter:
            quoted = not quoted
        elif char == ";" and not quoted:
            return idx
    return len(line)
