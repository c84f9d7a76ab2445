"""
bnferris Grammar Core

Parses BNF/ABNF hybrid grammars and generates random messages from them.

Features:
- Lexer and parser for a mixed BNF/ABNF syntax
- Incremental alternatives (=/)
- Undefined / unused symbol checks
- Random generation with a hard recursion ceiling
- Dump back to grammar notation
"""

from .errors import (
    BnfError,
    GenError,
    LexError,
    Loc,
    ParseError,
    ParseErrorKind,
    RecursionLimitError,
    UndefinedSymbolError,
    UnknownEntryError,
)
from .rules import Grammar, Rule, Alternative, Literal, SymbolRef, Group, Optional, Repetition, Range
from .lexer import Lexer, Token, TokenKind
from .grammar_parser import GrammarParser, parse
from .resolver import (
    UndefinedSymbolReport,
    UnusedSymbolReport,
    find_unreachable,
    find_unused,
    list_symbols,
    verify,
)
from .generator import GrammarGenerator, generate, make_rng
from .dumper import dump, dump_grammar, dump_rule
from .builtin_grammars import BuiltinGrammars

__all__ = [
    'BnfError', 'GenError', 'LexError', 'Loc', 'ParseError', 'ParseErrorKind',
    'RecursionLimitError', 'UndefinedSymbolError', 'UnknownEntryError',
    'Grammar', 'Rule', 'Alternative', 'Literal', 'SymbolRef', 'Group', 'Optional',
    'Repetition', 'Range',
    'Lexer', 'Token', 'TokenKind',
    'GrammarParser', 'parse',
    'UndefinedSymbolReport', 'UnusedSymbolReport', 'verify', 'find_unused',
    'find_unreachable', 'list_symbols',
    'GrammarGenerator', 'generate', 'make_rng',
    'dump', 'dump_grammar', 'dump_rule',
    'BuiltinGrammars',
]
