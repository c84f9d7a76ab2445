"""
Grammar Rules

Internal representation of a parsed grammar: a flat mapping from rule name
to Rule. Rules reference each other by name only, so recursive and mutually
recursive grammars never form cyclic object graphs.

    Grammar      name -> Rule (definition order preserved)
    Rule         ordered list of Alternative
    Alternative  ordered list of Element, concatenated
    Element      Literal | SymbolRef | Group | Optional | Repetition | Range
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Union

from .errors import Loc


@dataclass
class Literal:
    """Fixed text, produced verbatim."""
    text: str
    loc: Union[Loc, None] = field(default=None, compare=False)


@dataclass
class SymbolRef:
    """Reference to another rule, resolved at generation time."""
    name: str
    loc: Union[Loc, None] = field(default=None, compare=False)


@dataclass
class Group:
    """Parenthesized anonymous sub-rule."""
    rule: "Rule"
    loc: Union[Loc, None] = field(default=None, compare=False)


@dataclass
class Optional:
    """Bracketed sub-rule that may also produce nothing."""
    rule: "Rule"
    loc: Union[Loc, None] = field(default=None, compare=False)


@dataclass
class Repetition:
    """Inner element repeated min..max times; max None means unbounded."""
    min: int
    max: Union[int, None]
    inner: "Element"
    loc: Union[Loc, None] = field(default=None, compare=False)


@dataclass
class Range:
    """Inclusive codepoint range, low <= high."""
    low: int
    high: int
    loc: Union[Loc, None] = field(default=None, compare=False)


Element = Union[Literal, SymbolRef, Group, Optional, Repetition, Range]


@dataclass
class Alternative:
    elements: List[Element] = field(default_factory=list)


@dataclass
class Rule:
    """
    A named (or, inside groups, anonymous) set of alternatives.

    Alternatives keep insertion order: those from the first definition come
    before those appended by later incremental definitions.
    """
    alternatives: List[Alternative] = field(default_factory=list)
    name: Union[str, None] = None
    loc: Union[Loc, None] = field(default=None, compare=False)


class Grammar:
    """Mapping from rule name to Rule, in definition order."""

    def __init__(self):
        self.rules: Dict[str, Rule] = {}

    def define(self, rule: Rule):
        self.rules[rule.name] = rule

    def extend(self, name: str, alternatives: List[Alternative]):
        """Append alternatives to an existing rule (incremental definition)."""
        self.rules[name].alternatives.extend(alternatives)

    def get(self, name: str) -> Union[Rule, None]:
        return self.rules.get(name)

    def names(self) -> List[str]:
        return list(self.rules)

    def __getitem__(self, name: str) -> Rule:
        return self.rules[name]

    def __contains__(self, name) -> bool:
        return name in self.rules

    def __iter__(self) -> Iterator[str]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"Grammar({', '.join(self.rules)})"


def iter_elements(rule: Rule) -> Iterator[Element]:
    """Yield every element of a rule, descending into nested sub-rules."""
    for alternative in rule.alternatives:
        for element in alternative.elements:
            yield from _walk(element)


def _walk(element: Element) -> Iterator[Element]:
    yield element
    if isinstance(element, (Group, Optional)):
        yield from iter_elements(element.rule)
    elif isinstance(element, Repetition):
        yield from _walk(element.inner)
