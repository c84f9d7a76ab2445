"""
Symbol Resolver

Read-only checks over a parsed Grammar. Every pass collects all findings
instead of stopping at the first one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .errors import Loc
from .rules import Grammar, SymbolRef, iter_elements


logger = logging.getLogger("bnferris.grammar.resolver")


@dataclass
class UndefinedSymbolReport:
    """A referenced name with no rule, and every place it is referenced from"""
    name: str
    locations: List[Loc] = field(default_factory=list)

    @property
    def loc(self):
        return self.locations[0] if self.locations else None

    def __str__(self) -> str:
        return f"{self.loc}: ERROR: Symbol {self.name} is not defined"


@dataclass
class UnusedSymbolReport:
    """A defined rule that nothing refers to"""
    name: str
    loc: Loc = None

    def __str__(self) -> str:
        return f"{self.loc}: {self.name} is unused"


def referenced_names(grammar: Grammar) -> Dict[str, List[Loc]]:
    """Every referenced name, in first-reference order, with its locations."""
    references: Dict[str, List[Loc]] = {}
    for name in grammar:
        for element in iter_elements(grammar[name]):
            if isinstance(element, SymbolRef):
                references.setdefault(element.name, []).append(element.loc)
    return references


def verify(grammar: Grammar) -> List[UndefinedSymbolReport]:
    """
    Find every referenced symbol that has no definition.

    Returns:
        One report per undefined name; empty when the grammar is closed
    """
    reports = []
    for name, locations in referenced_names(grammar).items():
        if name not in grammar:
            logger.warning(f"Undefined symbol: <{name}>")
            reports.append(UndefinedSymbolReport(name, locations))
    return reports


def find_unused(grammar: Grammar, entry: str) -> List[UnusedSymbolReport]:
    """
    Find defined rules never referenced anywhere in the grammar.

    This is a syntactic scan: a rule referenced only by another unused rule
    still counts as referenced. The entry rule is never reported.
    """
    referenced = referenced_names(grammar)
    reports = []
    for name in grammar:
        if name != entry and name not in referenced:
            logger.info(f"Unused symbol: <{name}>")
            reports.append(UnusedSymbolReport(name, grammar[name].loc))
    return reports


def find_unreachable(grammar: Grammar, entry: str) -> List[UnusedSymbolReport]:
    """
    Find defined rules that cannot be reached from ``entry``.

    Undefined references are skipped; ``verify`` reports those.
    """
    visited: Set[str] = set()
    pending = [entry]
    while pending:
        name = pending.pop()
        if name in visited or name not in grammar:
            continue
        visited.add(name)
        for element in iter_elements(grammar[name]):
            if isinstance(element, SymbolRef) and element.name not in visited:
                pending.append(element.name)

    return [
        UnusedSymbolReport(name, grammar[name].loc)
        for name in grammar
        if name not in visited
    ]


def list_symbols(grammar: Grammar) -> List[str]:
    """All defined rule names, sorted."""
    return sorted(grammar)
