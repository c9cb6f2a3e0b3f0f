from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from logging import ERROR, INFO, WARNING, Formatter, Logger, LogRecord, getLogger
from typing import Self, TypeAlias

from typing_extensions import override


@dataclass(frozen=True, slots=True)
class InputLocation:
    """
    Describes a particular span of text in an input line.
    This is passed along with reported problems, so the formatter can show
    which part of an operand caused them.
    """

    @classmethod
    def from_string(cls, text: str) -> Self:
        """Create a location spanning a single-line string."""

        return cls("<string>", -1, text, (0, len(text)))

    path: str
    """
    The path to the input text file.

    This path is only used for logging; it does not need to refer to any real file.
    """

    lineno: int
    """
    The number of this location's line in the input file,
    where line 1 is the first line.
    A value of -1 is used when no line number information is available.
    """

    line: str
    """The contents of the input line that this location describes."""

    span: tuple[int, int]
    """
    The column span of this location, as a start (inclusive) and end
    (exclusive) index into `line`.
    """

    def __getitem__(self, item: int | slice) -> InputLocation:
        span_start, span_end = self.span
        span_len = span_end - span_start

        if isinstance(item, int):
            index = item + span_len if item < 0 else item
            if not 0 <= index < span_len:
                raise IndexError(f"index {item} out of range for length {span_len}")
            return self.update_span((span_start + index, span_start + index + 1))

        start, stop, step = item.indices(span_len)
        if step != 1:
            raise IndexError("step sizes other than 1 are not supported")
        new_start = span_start + start
        return self.update_span((new_start, max(span_start + stop, new_start)))

    def __len__(self) -> int:
        start, end = self.span
        return end - start

    def update_span(self, span: tuple[int, int]) -> InputLocation:
        """
        Return a location on the same line with the given column span;
        the original is unmodified.
        """
        return InputLocation(self.path, self.lineno, self.line, span)

    @property
    def end_location(self) -> InputLocation:
        """A zero-length location marking the end point of this location."""
        end = self.span[1]
        return self.update_span((end, end))

    @property
    def text(self) -> str:
        """The text described by this location: the spanned substring."""
        return self.line[slice(*self.span)]


class ErrorKind(Enum):
    """
    The kinds of problems that can be found in an operand.
    The value of each member is the message reported for it.
    """

    mismatched_parenthesis = "missing )"
    mismatched_quote = "missing string separator"
    undefined_symbol = "undefined symbol"
    value_out_of_range = "value out of range"
    division_by_zero = "division by zero"
    token_too_long = "token too long"

    @property
    def message(self) -> str:
        return self.value


class BadInput(Exception):
    """
    An exception which contains information about the part of the input
    that is considered to violate a rule.
    The `locations` attribute can contain `InputLocation` objects describing
    the location(s) that triggered the exception, and `kind` tells which
    rule was violated, if it is one of the known `ErrorKind`s.
    """

    def __init__(
        self, msg: str, *locations: InputLocation | None, kind: ErrorKind | None = None
    ):
        Exception.__init__(self, msg)
        self.locations = tuple(loc for loc in locations if loc is not None)
        self.kind = kind


LocationArg: TypeAlias = InputLocation | str | None | Sequence[InputLocation | None]


class ErrorCollector:
    """
    A wrapper for a logger with support for locations.

    Log methods can be passed an `InputLocation` with context information.
    Errors and warnings reported in this way are counted, and errors are
    kept so callers can inspect them after processing.
    The companion class `LocationFormatter` can be used to incorporate the
    context information in the logging.
    """

    @property
    def errors(self) -> Sequence[BadInput]:
        return self._errors

    def __init__(self, logger: Logger | None = None):
        self._logger = getLogger(__name__) if logger is None else logger
        self.problem_counter = ProblemCounter()
        self._errors: list[BadInput] = []

    @override
    def __repr__(self) -> str:
        return (
            f"ErrorCollector(logger={self._logger!r}, "
            f"problem_counter={self.problem_counter!r}, errors={self._errors!r})"
        )

    @override
    def __str__(self) -> str:
        return str(self.problem_counter)

    def report(
        self,
        kind: ErrorKind,
        *,
        location: LocationArg = None,
        detail: str | None = None,
    ) -> None:
        """Report a problem of a known kind as an error."""
        msg = kind.message if detail is None else f"{kind.message}: {detail}"
        self._error(msg, location, kind)

    def error(self, msg: str, *, location: LocationArg = None) -> None:
        self._error(msg, location, None)

    def _error(self, msg: str, location: LocationArg, kind: ErrorKind | None) -> None:
        self._logger.error("%s", msg, extra={"location": location})
        self.problem_counter.num_errors += 1

        main_location: InputLocation | None
        if isinstance(location, str):
            # A path only: there is no line to point at.
            main_location = None
        elif isinstance(location, Sequence):
            main_location = location[0] if location else None
        else:
            main_location = location
        self._errors.append(BadInput(msg, main_location, kind=kind))

    def warning(self, msg: str, *, location: LocationArg = None) -> None:
        self._logger.warning("%s", msg, extra={"location": location})
        self.problem_counter.num_warnings += 1

    def info(self, msg: str, *, location: LocationArg = None) -> None:
        self._logger.info("%s", msg, extra={"location": location})

    def summarize(self, path: str) -> None:
        """Log a message containing the error and warning counts."""
        problem_counter = self.problem_counter
        self._logger.log(
            problem_counter.level, "%s", problem_counter, extra={"location": path}
        )

    @contextmanager
    def check(self) -> Iterator[ErrorCollector]:
        """
        Create a context in which errors are collected.

        Raise `DelayedError` on context close if any errors were reported
        on this collector within in the context.
        """
        num_errors_before = len(self._errors)
        try:
            yield self
        except DelayedError as delayed:
            if delayed._collector is not self:
                raise
        errors = self._errors[num_errors_before:]
        if errors:
            group = DelayedError(_pluralize(len(errors), "error"), errors)
            group._collector = self
            raise group


class DelayedError(ExceptionGroup[BadInput]):
    """
    Raised when one or more errors were encountered when processing input.

    Operand evaluation reports problems and carries on with a substitute
    value, so that as many problems as possible are found in one run.
    At the end of a processing step DelayedError can be raised to stop
    the results from being used.
    """

    _collector: ErrorCollector | None = None


@dataclass(slots=True)
class ProblemCounter:
    """Error and warning counts."""

    num_errors: int = 0
    num_warnings: int = 0

    @property
    def level(self) -> int:
        """Logging level corresponding to the problems counted."""
        if self.num_errors > 0:
            return ERROR
        elif self.num_warnings > 0:
            return WARNING
        else:
            return INFO

    @override
    def __str__(self) -> str:
        return (
            f"{_pluralize(self.num_errors, 'error')} and "
            f"{_pluralize(self.num_warnings, 'warning')}"
        )


def _pluralize(count: int, noun: str) -> str:
    return f"{count:d} {noun}{'' if count == 1 else 's'}"


class LocationFormatter(Formatter):
    """
    Formats log records that carry a "location" attribute: the message is
    prefixed by the path and line number, followed by the input line and
    a marker line highlighting the span.
    """

    @override
    def format(self, record: LogRecord) -> str:
        msg = super().format(record)
        if record.levelno == ERROR:
            msg = f"ERROR: {msg}"
        elif record.levelno == WARNING:
            msg = f"warning: {msg}"
        location: None | str | InputLocation | Sequence[InputLocation | None] = getattr(
            record, "location", None
        )
        if location is None:
            return msg
        elif isinstance(location, str):
            return f"{location}: {msg}"
        elif isinstance(location, InputLocation):
            return "\n".join(_format_location(msg, location, [location.span]))
        else:
            locations = [loc for loc in location if loc is not None]
            if not locations:
                return msg
            # All spans are highlighted on the line of the first location.
            main = locations[0]
            spans = [loc.span for loc in locations if loc.line == main.line]
            return "\n".join(_format_location(msg, main, spans))


def _format_location(
    msg: str, location: InputLocation, spans: Sequence[tuple[int, int]]
) -> Iterator[str]:
    if location.lineno == -1:
        yield f"{location.path}: {msg}"
    else:
        yield f"{location.path}:{location.lineno:d}: {msg}"

    line = location.line
    yield line

    length = len(line) + 1
    marks = [" "] * length
    # The main span is drawn last, so it stays visible where spans overlap.
    for idx, (start, end) in reversed(list(enumerate(spans))):
        start = min(start, length - 1)
        end = max(min(end, length), start + 1)
        for col in range(start, end):
            marks[col] = "^" if idx == 0 else "~"
    marker_line = "".join(marks).rstrip()
    if marker_line:
        yield marker_line
