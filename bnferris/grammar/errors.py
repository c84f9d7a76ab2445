"""
Grammar Errors

Source locations and the error hierarchy raised by the lexer, parser and
generator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Loc:
    """Position in a grammar source (0-based internally, 1-based when shown)."""
    file_path: str
    row: int
    col: int

    def __str__(self) -> str:
        return f"{self.file_path}:{self.row + 1}:{self.col + 1}"


class BnfError(Exception):
    """Base class for every error raised by the grammar core."""

    def __init__(self, message: str, loc: Optional[Loc] = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    def __str__(self) -> str:
        if self.loc is None:
            return f"ERROR: {self.message}"
        return f"{self.loc}: ERROR: {self.message}"


class LexError(BnfError):
    """Malformed token: bad escape, bad hex digit, unterminated literal."""
    pass


class ParseErrorKind(Enum):
    """Kinds of structural problems found by the parser"""
    UNEXPECTED_TOKEN = "unexpected token"
    UNMATCHED_BRACKET = "unmatched bracket"
    MISSING_RHS = "missing right-hand side"
    EMPTY_ALTERNATIVE = "empty alternative"
    DUPLICATE_DEFINITION = "duplicate definition"
    UNDEFINED_EXTENSION = "incremental alternative to undefined rule"
    INVALID_RANGE_LITERAL = "invalid range literal"
    INVALID_RANGE = "invalid range"
    INVALID_REPETITION = "invalid repetition"
    NESTING_TOO_DEEP = "nesting too deep"


class ParseError(BnfError):
    """Structurally invalid grammar text."""

    def __init__(self, kind: ParseErrorKind, message: str, loc: Optional[Loc] = None):
        super().__init__(message, loc)
        self.kind = kind


class GenError(BnfError):
    """Failure while generating a single message."""
    pass


class UndefinedSymbolError(GenError):
    """A symbol reference with no matching rule."""

    def __init__(self, name: str, loc: Optional[Loc] = None):
        super().__init__(f"Symbol <{name}> is not defined", loc)
        self.name = name


class UnknownEntryError(GenError):
    """The requested entry rule is not present in the grammar."""

    def __init__(self, name: str):
        super().__init__(
            f"Symbol {name} is not defined. Pass --entry '!' to get the list of defined symbols."
        )
        self.name = name


class RecursionLimitError(GenError):
    """
    A rule was reached past the depth ceiling but has no finite derivation,
    or expansion ran into the interpreter recursion limit.
    """

    def __init__(self, name: str, loc: Optional[Loc] = None, message: Optional[str] = None):
        super().__init__(
            message or f"Rule <{name}> has no terminating expansion; recursion limit reached", loc
        )
        self.name = name
