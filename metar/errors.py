"""
Diagnostics produced when a report cannot be decoded.

A `MetarError` records the text that was being decoded, the span (character
offsets) of the offending token and the kind of failure. Errors raised at the
same position are merged so that every alternative tried there shows up in a
single "expected one of" message.
"""

import unicodedata
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union


class MetarException(Exception):
    """Base class for exceptions raised by the metar package"""

    pass


class ExpectedKind(Enum):
    LITERAL = "literal"
    DIGITS = "digits"
    WHITESPACE = "whitespace"
    DESCRIPTION = "description"
    END_OF_INPUT = "end of input"


@dataclass(frozen=True)
class ExpectedNext:
    """One thing that would have been accepted at the failing position."""

    kind: ExpectedKind
    value: str = ""

    @classmethod
    def literal(cls, value: str) -> "ExpectedNext":
        return cls(ExpectedKind.LITERAL, value)

    @classmethod
    def digits(cls) -> "ExpectedNext":
        return cls(ExpectedKind.DIGITS)

    @classmethod
    def whitespace(cls) -> "ExpectedNext":
        return cls(ExpectedKind.WHITESPACE)

    @classmethod
    def description(cls, text: str) -> "ExpectedNext":
        return cls(ExpectedKind.DESCRIPTION, text)

    @classmethod
    def end_of_input(cls) -> "ExpectedNext":
        return cls(ExpectedKind.END_OF_INPUT)

    def __str__(self) -> str:
        if self.kind == ExpectedKind.LITERAL:
            return f'"{self.value}"'
        if self.kind == ExpectedKind.DIGITS:
            return "a number"
        if self.kind == ExpectedKind.DESCRIPTION:
            return self.value
        return self.kind.value


@dataclass(frozen=True)
class ExpectedFound:
    """No alternative matched; `found` is None at the end of the input."""

    expected: tuple[ExpectedNext, ...]
    found: Optional[str]

    @property
    def message(self) -> str:
        expected = ", ".join(str(item) for item in self.expected)
        if self.found is None:
            return f"expected one of: {expected}; reached end of input"
        return f'expected one of: {expected}; found "{self.found}"'

    @property
    def help(self) -> str:
        return "must be one of " + ", ".join(str(item) for item in self.expected)

    def merge(self, other: "ExpectedFound") -> "ExpectedFound":
        expected = list(self.expected)
        for item in other.expected:
            if item not in expected:
                expected.append(item)
        return replace(self, expected=tuple(expected))


class ErrorKind(Enum):
    """Failures detected after a token has the right shape."""

    INVALID_DATE = "invalid observation date"
    INVALID_HOUR = "invalid observation hour"
    INVALID_MINUTE = "invalid observation minute"
    INVALID_WIND_HEADING = "invalid wind heading"
    INVALID_RVR_RUNWAY_NUMBER = "invalid runway number in RVR"
    INVALID_RVR_DISTANCE = "invalid distance in RVR"
    TREND_DATA_CANNOT_BE_UNKNOWN = "data in a trend must be known ahead of time"

    @property
    def message(self) -> str:
        return self.value

    @property
    def help(self) -> str:
        return ERROR_HELP[self]


ERROR_HELP = {
    ErrorKind.INVALID_DATE                 : "the observation date must be a two digit number less than or equal to 31",
    ErrorKind.INVALID_HOUR                 : "the observation hour must be a two digit number less than 24",
    ErrorKind.INVALID_MINUTE               : "the observation minute must be a two digit number less than 60",
    ErrorKind.INVALID_WIND_HEADING         : "the wind heading must be three digits between 000 and 360 inclusive",
    ErrorKind.INVALID_RVR_RUNWAY_NUMBER    : 'the runway number must be between 00 and 36, and may be suffixed with "L", "C" or "R"',
    ErrorKind.INVALID_RVR_DISTANCE         : "the RVR distance must be a 4 digit number",
    ErrorKind.TREND_DATA_CANNOT_BE_UNKNOWN : "trend data cannot be unknown as it isn't reported as a trend if it's unknown!",
}

ErrorVariant = Union[ExpectedFound, ErrorKind]


def _display_width(text: str) -> int:
    width = 0
    for ch in text:
        if unicodedata.combining(ch):
            continue
        width += 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
    return width


def render(string: str, start: int, end: int, variant: ErrorVariant) -> str:
    """
    Render a diagnostic as the offending source line with the span underlined

    Args:
        string (str): the text that was being decoded
        start (int): character offset of the start of the span
        end (int): character offset just past the end of the span
        variant (ErrorVariant): the kind of failure

    Returns:
        str: the rendered diagnostic, without a trailing newline
    """
    start = max(0, min(start, len(string)))
    end = max(start, min(end, len(string)))
    line_start = string.rfind("\n", 0, start) + 1
    line_end = string.find("\n", start)
    if line_end == -1:
        line_end = len(string)
    line_number = string.count("\n", 0, start) + 1
    line = "".join(ch if ch.isprintable() else " " for ch in string[line_start:line_end])
    lead = _display_width(line[: start - line_start])
    marks = max(1, _display_width(line[start - line_start : min(end, line_end) - line_start]))
    gutter = " " * len(str(line_number))
    return "\n".join(
        [
            f"error: {variant.message}",
            f"{gutter}--> {line_number}:{start - line_start + 1}",
            f"{gutter} |",
            f"{line_number} | {line}",
            f"{gutter} | {' ' * lead}{'^' * marks} {variant.help}",
        ]
    )


@dataclass(frozen=True)
class MetarError:
    """
    A diagnostic tied to the text being decoded.

    `start` and `end` are character offsets into `string`; `byte_span` gives
    the equivalent UTF-8 byte offsets.
    """

    string: str
    start: int
    end: int
    variant: ErrorVariant

    @property
    def message(self) -> str:
        return self.variant.message

    @property
    def help(self) -> str:
        return self.variant.help

    @property
    def byte_span(self) -> tuple[int, int]:
        def byte_offset(pos: int) -> int:
            return len(self.string[:pos].encode("utf-8", "surrogatepass"))

        return byte_offset(self.start), byte_offset(self.end)

    def merge(self, other: "MetarError") -> "MetarError":
        """
        Combine two diagnostics raised at the same position

        Args:
            other (MetarError): the diagnostic to fold into this one

        Returns:
            MetarError: this diagnostic, with the expected-sets unioned when both are
                "expected one of" failures
        """
        if isinstance(self.variant, ExpectedFound) and isinstance(other.variant, ExpectedFound):
            return replace(self, variant=self.variant.merge(other.variant))
        return self

    def render(self) -> str:
        return render(self.string, self.start, self.end, self.variant)

    def into_owned(self) -> "OwnedMetarError":
        return OwnedMetarError(self.string, self.start, self.end, self.variant)

    def __str__(self) -> str:
        return self.render()


class OwnedMetarError(MetarException):
    """
    A diagnostic holding its own copy of the decoded text, which can be raised
    or handed to other threads independently of the original input
    """

    def __init__(self, string: str, start: int, end: int, variant: ErrorVariant) -> None:
        super().__init__(variant.message)
        self.string = string
        self.start = start
        self.end = end
        self.variant = variant

    @property
    def message(self) -> str:
        return self.variant.message

    @property
    def help(self) -> str:
        return self.variant.help

    def render(self) -> str:
        return render(self.string, self.start, self.end, self.variant)

    def __str__(self) -> str:
        return self.render()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OwnedMetarError):
            return NotImplemented
        return (self.string, self.start, self.end, self.variant) == (
            other.string,
            other.start,
            other.end,
            other.variant,
        )

    def __hash__(self) -> int:
        return hash((self.string, self.start, self.end, self.variant))
