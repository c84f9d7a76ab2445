"""
Grammar Parser

Parses BNF/ABNF hybrid grammar text into a Grammar.

Supported syntax:
- Definitions: name = ..., <name> ::= ..., incremental name =/ ...
- Alternation: "/" or "|" (same precedence, looser than concatenation)
- Grouping (...), optional [...], curly repetition {...}
- Repetition prefixes: n*m, n*, *m, *, n
- Ranges: %x30-39, "a" ... "z", "\\x00" ... "\\x1f"
- Literals: "text", 'text', %x41, %x41.42
- Comments: ; comment, // comment

A rule ends at end of line. Newlines inside brackets are ignored, and a line
starting with "/" or "|" continues the rule above it.

Example grammar:
    message  = greeting *(" " word) [punct]
    greeting = "hello" / "hi"
    word     = 1*8 %x61-7A
    punct    = "!" | "?"
    punct   =/ "."
"""

import logging
from collections import deque
from typing import Iterator, List

from .errors import Loc, ParseError, ParseErrorKind
from .lexer import SURROGATES, Lexer, Token, TokenKind
from .rules import (
    Alternative,
    Element,
    Grammar,
    Group,
    Literal,
    Optional,
    Range,
    Repetition,
    Rule,
    SymbolRef,
)


ELEMENT_START = {
    TokenKind.SYMBOL,
    TokenKind.STRING,
    TokenKind.VALUE_RANGE,
    TokenKind.NUMBER,
    TokenKind.ASTERISK,
    TokenKind.PAREN_OPEN,
    TokenKind.BRACKET_OPEN,
    TokenKind.CURLY_OPEN,
}

CLOSERS = {
    TokenKind.PAREN_OPEN: TokenKind.PAREN_CLOSE,
    TokenKind.BRACKET_OPEN: TokenKind.BRACKET_CLOSE,
    TokenKind.CURLY_OPEN: TokenKind.CURLY_CLOSE,
}

# Tokens after which an alternative is empty rather than malformed
ALTERNATIVE_END = {
    TokenKind.ALTERNATION,
    TokenKind.EOL,
    TokenKind.END,
    TokenKind.PAREN_CLOSE,
    TokenKind.BRACKET_CLOSE,
    TokenKind.CURLY_CLOSE,
}


class TokenStream:
    """Token iterator with arbitrary lookahead."""

    def __init__(self, tokens: Iterator[Token]):
        self._tokens = tokens
        self._buffer = deque()
        self._last = None

    def peek(self, offset: int = 0) -> Token:
        while len(self._buffer) <= offset:
            token = next(self._tokens, None)
            if token is None:
                # END repeats forever once the lexer is exhausted
                token = self._last
            self._last = token
            self._buffer.append(token)
        return self._buffer[offset]

    def next(self) -> Token:
        token = self.peek()
        self._buffer.popleft()
        return token


class GrammarParser:
    """
    Builds a Grammar from grammar text.

    Errors abort parsing immediately; there is no partial-grammar recovery.
    """

    def __init__(self):
        self.logger = logging.getLogger("bnferris.grammar.parser")
        self.grammar = Grammar()
        self.stream = None

    def parse(self, grammar_text: str, file_path: str = "<input>") -> Grammar:
        """
        Parse grammar text into a Grammar.

        Args:
            grammar_text: Grammar source
            file_path: Name used in error locations

        Returns:
            Grammar mapping rule names to rules

        Raises:
            LexError: malformed token
            ParseError: structurally invalid grammar
        """
        self.grammar = Grammar()
        self.stream = TokenStream(iter(Lexer(grammar_text, file_path)))

        while True:
            token = self.stream.peek()
            if token.kind == TokenKind.END:
                break
            if token.kind == TokenKind.EOL:
                self.stream.next()
                continue
            try:
                self._parse_definition()
            except RecursionError as e:
                raise ParseError(
                    ParseErrorKind.NESTING_TOO_DEEP,
                    "Brackets are nested too deeply",
                    token.loc,
                ) from e

        self.logger.info(f"Parsed grammar with {len(self.grammar)} rules")
        return self.grammar

    def _expect(self, kind: TokenKind) -> Token:
        token = self.stream.next()
        if token.kind != kind:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_TOKEN,
                f"Expected {kind.value} but got {token.kind.value}",
                token.loc,
            )
        return token

    def _skip_newlines(self):
        while self.stream.peek().kind == TokenKind.EOL:
            self.stream.next()

    def _parse_definition(self):
        head = self._expect(TokenKind.SYMBOL)
        name = head.text
        op = self.stream.next()
        existing = self.grammar.get(name)

        if op.kind == TokenKind.DEFINITION:
            if existing is not None:
                raise ParseError(
                    ParseErrorKind.DUPLICATE_DEFINITION,
                    f"Redefinition of the rule {name} (first defined at {existing.loc})",
                    head.loc,
                )
            alternatives = self._parse_rule_body(op)
            self.grammar.define(Rule(alternatives, name=name, loc=head.loc))
            self.logger.debug(f"Defined rule <{name}> with {len(alternatives)} alternative(s)")

        elif op.kind == TokenKind.INC_ALTERNATIVE:
            if existing is None:
                raise ParseError(
                    ParseErrorKind.UNDEFINED_EXTENSION,
                    f"Can't apply incremental alternative to a non-existing rule {name}. "
                    f"You need to define it first.",
                    head.loc,
                )
            alternatives = self._parse_rule_body(op)
            self.grammar.extend(name, alternatives)
            self.logger.debug(f"Extended rule <{name}> with {len(alternatives)} alternative(s)")

        else:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_TOKEN,
                f"Expected {TokenKind.DEFINITION.value} or {TokenKind.INC_ALTERNATIVE.value} "
                f"but got {op.kind.value}",
                op.loc,
            )

        self._expect_end_of_rule()

    def _expect_end_of_rule(self):
        token = self.stream.peek()
        if token.kind == TokenKind.EOL:
            self.stream.next()
            return
        if token.kind == TokenKind.END:
            return
        if token.kind in CLOSERS.values():
            raise ParseError(
                ParseErrorKind.UNMATCHED_BRACKET,
                f"Unmatched {token.kind.value}",
                token.loc,
            )
        raise ParseError(
            ParseErrorKind.UNEXPECTED_TOKEN,
            f"Expected {TokenKind.EOL.value} but got {token.kind.value}",
            token.loc,
        )

    def _parse_rule_body(self, op: Token) -> List[Alternative]:
        if self.stream.peek().kind in (TokenKind.EOL, TokenKind.END):
            raise ParseError(
                ParseErrorKind.MISSING_RHS,
                f"Missing right-hand side after {op.kind.value}",
                op.loc,
            )
        return self._parse_alternatives(depth=0)

    def _continues_on_next_line(self) -> bool:
        """True if the next non-blank line starts with an alternation."""
        offset = 0
        while self.stream.peek(offset).kind == TokenKind.EOL:
            offset += 1
        return self.stream.peek(offset).kind == TokenKind.ALTERNATION

    def _parse_alternatives(self, depth: int) -> List[Alternative]:
        alternatives = [self._parse_alternative(depth)]

        while True:
            if depth > 0:
                self._skip_newlines()
            token = self.stream.peek()

            if token.kind == TokenKind.ALTERNATION:
                self.stream.next()
                alternatives.append(self._parse_alternative(depth))
            elif depth == 0 and token.kind == TokenKind.EOL and self._continues_on_next_line():
                self._skip_newlines()
            else:
                return alternatives

    def _parse_alternative(self, depth: int) -> Alternative:
        elements = []

        while True:
            if depth > 0:
                self._skip_newlines()
            token = self.stream.peek()
            if token.kind not in ELEMENT_START:
                break
            elements.append(self._parse_element(depth))

        if not elements:
            if token.kind in ALTERNATIVE_END:
                raise ParseError(
                    ParseErrorKind.EMPTY_ALTERNATIVE,
                    f"Empty alternative before {token.kind.value}",
                    token.loc,
                )
            raise ParseError(
                ParseErrorKind.UNEXPECTED_TOKEN,
                f"Expected start of an expression, but got {token.kind.value}",
                token.loc,
            )

        return Alternative(elements)

    def _parse_element(self, depth: int) -> Element:
        token = self.stream.next()
        kind = token.kind

        if kind == TokenKind.PAREN_OPEN:
            return Group(self._parse_bracketed(token, depth), token.loc)

        if kind == TokenKind.BRACKET_OPEN:
            return Optional(self._parse_bracketed(token, depth), token.loc)

        if kind == TokenKind.CURLY_OPEN:
            inner = Group(self._parse_bracketed(token, depth), token.loc)
            return Repetition(0, None, inner, token.loc)

        if kind == TokenKind.NUMBER:
            lower = token.value
            upper = lower
            if self.stream.peek().kind == TokenKind.ASTERISK:
                self.stream.next()
                upper = self._optional_number()
            return self._parse_repetition(token, lower, upper, depth)

        if kind == TokenKind.ASTERISK:
            return self._parse_repetition(token, 0, self._optional_number(), depth)

        if kind == TokenKind.VALUE_RANGE:
            low, high = token.value
            return self._make_range(low, high, token.loc)

        if kind == TokenKind.STRING:
            if self.stream.peek().kind != TokenKind.ELLIPSIS:
                return Literal(token.text, token.loc)
            self.stream.next()
            upper = self._expect(TokenKind.STRING)
            low = self._range_bound(token, "lower")
            high = self._range_bound(upper, "upper")
            return self._make_range(low, high, token.loc)

        if kind == TokenKind.SYMBOL:
            return SymbolRef(token.text, token.loc)

        raise ParseError(
            ParseErrorKind.UNEXPECTED_TOKEN,
            f"Expected start of an expression, but got {kind.value}",
            token.loc,
        )

    def _optional_number(self):
        if self.stream.peek().kind == TokenKind.NUMBER:
            return self.stream.next().value
        return None

    def _parse_repetition(self, token: Token, lower: int, upper, depth: int) -> Repetition:
        if upper is not None and lower > upper:
            raise ParseError(
                ParseErrorKind.INVALID_REPETITION,
                f"Upper bound of the repetition ({upper}) is lower than the lower one ({lower})",
                token.loc,
            )
        if depth > 0:
            self._skip_newlines()
        following = self.stream.peek()
        if following.kind not in ELEMENT_START:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_TOKEN,
                f"Expected an element after repetition, but got {following.kind.value}",
                following.loc,
            )
        inner = self._parse_element(depth)
        return Repetition(lower, upper, inner, token.loc)

    def _parse_bracketed(self, opening: Token, depth: int) -> Rule:
        close_kind = CLOSERS[opening.kind]
        alternatives = self._parse_alternatives(depth + 1)

        token = self.stream.peek()
        if token.kind == close_kind:
            self.stream.next()
            return Rule(alternatives, loc=opening.loc)
        if token.kind == TokenKind.END or token.kind in CLOSERS.values():
            raise ParseError(
                ParseErrorKind.UNMATCHED_BRACKET,
                f"Expected {close_kind.value} to match the {opening.kind.value} at {opening.loc}, "
                f"but got {token.kind.value}",
                token.loc,
            )
        raise ParseError(
            ParseErrorKind.UNEXPECTED_TOKEN,
            f"Expected {close_kind.value} but got {token.kind.value}",
            token.loc,
        )

    def _range_bound(self, token: Token, which: str) -> int:
        if len(token.text) != 1:
            raise ParseError(
                ParseErrorKind.INVALID_RANGE_LITERAL,
                f"The {which} boundary of the range is expected to be 1 symbol string. "
                f"Got {len(token.text)} instead.",
                token.loc,
            )
        return ord(token.text)

    def _make_range(self, low: int, high: int, loc: Loc) -> Range:
        if low > high:
            raise ParseError(
                ParseErrorKind.INVALID_RANGE,
                f"Upper bound of the range (%x{high:02X}) is lower than the lower one (%x{low:02X})",
                loc,
            )
        if low < SURROGATES[0] and high > SURROGATES[1]:
            raise ParseError(
                ParseErrorKind.INVALID_RANGE,
                f"Range %x{low:02X}-{high:02X} spans the surrogate codepoints %xD800-DFFF; "
                f"split it in two",
                loc,
            )
        return Range(low, high, loc)


# Convenience function
def parse(grammar_text: str, file_path: str = "<input>") -> Grammar:
    """
    Quick function to parse grammar text.

    Example:
        >>> grammar = parse('digit = %x30-39')
        >>> grammar.names()
        ['digit']
    """
    parser = GrammarParser()
    return parser.parse(grammar_text, file_path)
