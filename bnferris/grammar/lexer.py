"""
Grammar Lexer

Turns BNF/ABNF hybrid grammar text into a lazy stream of tokens.

Recognized:
- Comments: ``;`` or ``//`` to end of line
- Definitions: ``=``, ``::=``, incremental ``=/``
- Alternation: ``/`` or ``|``
- Strings: ``"..."`` or ``'...'`` with ``\\0 \\n \\r \\t \\\\ \\xNN`` escapes
- Hex values: ``%x41``, ``%x41.42.43``, ranges ``%x30-39``
- Symbols: ``name`` or ``<name>``; decimal numbers; ``*``; ``...``
- Brackets: ``[ ] ( ) { }``

Every line ends with an EOL token and the stream ends with an END token.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Tuple, Union

from .errors import LexError, Loc


MAX_CODEPOINT = 0x10FFFF


class TokenKind(Enum):
    """Token kinds, valued by their human-readable names"""
    EOL = "end of line"
    END = "end of input"
    SYMBOL = "symbol"
    DEFINITION = "definition symbol"
    INC_ALTERNATIVE = "incremental alternative"
    ALTERNATION = "alternation symbol"
    STRING = "string literal"
    VALUE_RANGE = "value range"
    NUMBER = "number"
    ASTERISK = "asterisk"
    ELLIPSIS = "ellipsis"
    BRACKET_OPEN = "open bracket"
    BRACKET_CLOSE = "close bracket"
    CURLY_OPEN = "open curly"
    CURLY_CLOSE = "close curly"
    PAREN_OPEN = "open paren"
    PAREN_CLOSE = "close paren"


# Longest operators first so "::=" and "=/" win over "="
OPERATORS: List[Tuple[str, TokenKind]] = [
    ("::=", TokenKind.DEFINITION),
    ("...", TokenKind.ELLIPSIS),
    ("=/", TokenKind.INC_ALTERNATIVE),
    ("=", TokenKind.DEFINITION),
    ("|", TokenKind.ALTERNATION),
    ("/", TokenKind.ALTERNATION),
    ("[", TokenKind.BRACKET_OPEN),
    ("]", TokenKind.BRACKET_CLOSE),
    ("{", TokenKind.CURLY_OPEN),
    ("}", TokenKind.CURLY_CLOSE),
    ("(", TokenKind.PAREN_OPEN),
    (")", TokenKind.PAREN_CLOSE),
    ("*", TokenKind.ASTERISK),
]

SIMPLE_ESCAPES = {
    '0': '\0',
    'n': '\n',
    'r': '\r',
    't': '\t',
    '\\': '\\',
}

DIGITS = "0123456789"
HEX_DIGITS = DIGITS + "abcdefABCDEF"

# UTF-16 surrogates cannot be written to a text stream
SURROGATES = (0xD800, 0xDFFF)


@dataclass(frozen=True)
class Token:
    """
    A single token.

    ``text`` holds the decoded value for strings and symbols, ``value`` the
    integer of a NUMBER or the ``(low, high)`` pair of a VALUE_RANGE.
    """
    kind: TokenKind
    text: str
    loc: Loc
    value: Union[int, Tuple[int, int], None] = None


def is_symbol_start(ch: str) -> bool:
    return ch.isalpha() or ch in "-_"


def is_symbol_char(ch: str) -> bool:
    return ch.isalnum() or ch in "-_"


class Lexer:
    """
    Iterable token source over grammar text.

    Tokens are produced on demand; iterating the same Lexer again restarts
    from the beginning of the text.
    """

    def __init__(self, text: str, file_path: str = "<input>"):
        self.text = text
        self.file_path = file_path
        self.logger = logging.getLogger("bnferris.grammar.lexer")

    def __iter__(self) -> Iterator[Token]:
        return self.tokens()

    def tokens(self) -> Iterator[Token]:
        row = 0
        for row, line in enumerate(self.text.split('\n')):
            if line.endswith('\r'):
                line = line[:-1]
            scanner = _LineScanner(line, row, self.file_path)
            yield from scanner.scan()
        self.logger.debug(f"Lexed {row + 1} line(s) from {self.file_path}")
        yield Token(TokenKind.END, "", Loc(self.file_path, row + 1, 0))


class _LineScanner:
    """Scans the tokens of one source line."""

    def __init__(self, line: str, row: int, file_path: str):
        self.line = line
        self.row = row
        self.file_path = file_path
        self.col = 0

    def loc(self, col: int = None) -> Loc:
        return Loc(self.file_path, self.row, self.col if col is None else col)

    def has_prefix(self, prefix: str) -> bool:
        return self.line.startswith(prefix, self.col)

    def at_end(self) -> bool:
        return self.col >= len(self.line)

    def scan(self) -> Iterator[Token]:
        while True:
            while not self.at_end() and self.line[self.col].isspace():
                self.col += 1

            if self.has_prefix("//") or self.has_prefix(";"):
                self.col = len(self.line)

            if self.at_end():
                yield Token(TokenKind.EOL, "", self.loc())
                return

            yield self.next_token()

    def next_token(self) -> Token:
        start = self.loc()
        ch = self.line[self.col]

        if ch in DIGITS:
            begin = self.col
            while not self.at_end() and self.line[self.col] in DIGITS:
                self.col += 1
            text = self.line[begin:self.col]
            return Token(TokenKind.NUMBER, text, start, int(text))

        if is_symbol_start(ch):
            begin = self.col
            while not self.at_end() and is_symbol_char(self.line[self.col]):
                self.col += 1
            return Token(TokenKind.SYMBOL, self.line[begin:self.col], start)

        if ch == '<':
            return self.chop_bracketed_symbol(start)

        if ch in ('"', "'"):
            return Token(TokenKind.STRING, self.chop_string(), start)

        if self.has_prefix("%x") or self.has_prefix("%X"):
            return self.chop_hex_value(start)

        for text, kind in OPERATORS:
            if self.has_prefix(text):
                self.col += len(text)
                return Token(kind, text, start)

        raise LexError(f"Invalid token starting with `{ch}`", start)

    def chop_bracketed_symbol(self, start: Loc) -> Token:
        self.col += 1
        begin = self.col
        while not self.at_end() and self.line[self.col] != '>':
            ch = self.line[self.col]
            if not is_symbol_char(ch):
                raise LexError(f"Unexpected character in symbol name `{ch}`", self.loc())
            self.col += 1
        if self.at_end():
            raise LexError("Expected '>' at the end of the symbol name", self.loc())
        name = self.line[begin:self.col]
        if not name:
            raise LexError("Empty symbol name", start)
        self.col += 1
        return Token(TokenKind.SYMBOL, name, start)

    def chop_string(self) -> str:
        quote = self.line[self.col]
        begin = self.col
        self.col += 1
        chars = []

        while not self.at_end():
            ch = self.line[self.col]
            if ch == quote:
                self.col += 1
                return ''.join(chars)
            if ch != '\\':
                chars.append(ch)
                self.col += 1
                continue

            self.col += 1
            if self.at_end():
                raise LexError("Unfinished escape sequence", self.loc())
            esc = self.line[self.col]
            if esc in SIMPLE_ESCAPES:
                chars.append(SIMPLE_ESCAPES[esc])
                self.col += 1
            elif esc == quote:
                chars.append(quote)
                self.col += 1
            elif esc == 'x':
                self.col += 1
                chars.append(chr(self.chop_hex_digits(exact=2)))
            else:
                raise LexError(f"Unknown escape sequence starting with `{esc}`", self.loc())

        raise LexError(
            f"Expected {quote} at the end of this string literal", self.loc(begin)
        )

    def chop_hex_digits(self, exact: int = None) -> int:
        """Read hex digits: exactly ``exact`` of them, or one or more."""
        begin = self.col
        while not self.at_end() and self.line[self.col] in HEX_DIGITS:
            if exact is not None and self.col - begin == exact:
                break
            self.col += 1
        count = self.col - begin

        if exact is not None and count < exact:
            if self.at_end():
                raise LexError(
                    f"Unfinished hexadecimal value. Expected {exact} hex digits, but got {count}.",
                    self.loc(),
                )
            raise LexError(f"Expected hex digit, but got `{self.line[self.col]}`", self.loc())
        if count == 0:
            got = "end of line" if self.at_end() else f"`{self.line[self.col]}`"
            raise LexError(f"Expected hex digit, but got {got}", self.loc())

        value = int(self.line[begin:self.col], 16)
        if value > MAX_CODEPOINT:
            raise LexError(f"Hex value %x{self.line[begin:self.col]} is out of range", self.loc(begin))
        if SURROGATES[0] <= value <= SURROGATES[1]:
            raise LexError(f"Hex value %x{self.line[begin:self.col]} is a surrogate codepoint", self.loc(begin))
        return value

    def chop_hex_value(self, start: Loc) -> Token:
        self.col += 2
        low = self.chop_hex_digits()

        if self.has_prefix("-"):
            self.col += 1
            high = self.chop_hex_digits()
            return Token(TokenKind.VALUE_RANGE, chr(low) + chr(high), start, (low, high))

        chars = [chr(low)]
        while self.has_prefix("."):
            self.col += 1
            chars.append(chr(self.chop_hex_digits()))
        return Token(TokenKind.STRING, ''.join(chars), start)
