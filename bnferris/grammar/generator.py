"""
Grammar Generator

Generates random strings from a parsed Grammar.
"""

import math
import random
import logging
from typing import Dict, List, Union

from .errors import RecursionLimitError, UndefinedSymbolError, UnknownEntryError
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


DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_REPETITION = 20
DEFAULT_MAX_EXPANSIONS = 10000
DEFAULT_OPTIONAL_PROBABILITY = 0.5

INFINITE = math.inf


class GrammarGenerator:
    """
    Generates strings from a parsed grammar.

    Features:
    - Uniform choice among a rule's alternatives
    - Injected random source for reproducible output
    - Hard recursion-depth ceiling and expansion budget

    Past the depth ceiling (or once the expansion budget is spent) every
    choice takes its shortest form: optionals are skipped, repetitions use
    their minimum and rules pick an alternative of minimal derivation height.
    This bounds the work of every call, including for self-referential rules.

    A generator keeps per-call state; use one instance per thread.
    """

    def __init__(self, grammar: Grammar,
                 rng: random.Random = None,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 max_repetition: int = DEFAULT_MAX_REPETITION,
                 max_expansions: int = DEFAULT_MAX_EXPANSIONS,
                 optional_probability: float = DEFAULT_OPTIONAL_PROBABILITY):
        """
        Initialize grammar generator.

        Args:
            grammar: Parsed grammar
            rng: Random source (default: a fresh unseeded random.Random)
            max_depth: Rule/group nesting depth after which output is shortened
            max_repetition: Upper bound substituted for unbounded repetition
            max_expansions: Element evaluations per message before shortening
            optional_probability: Chance that an optional element is produced
        """
        if not 0.0 < optional_probability < 1.0:
            raise ValueError("optional_probability must be strictly between 0 and 1")

        self.grammar = grammar
        self.rng = rng if rng is not None else random.Random()
        self.max_depth = max_depth
        self.max_repetition = max_repetition
        self.max_expansions = max_expansions
        self.optional_probability = optional_probability
        self.logger = logging.getLogger("bnferris.grammar.generator")

        self._expansions = 0
        self._alt_heights: Dict[int, List[float]] = {}
        self.heights = self._compute_heights()

    def generate(self, entry: str) -> str:
        """
        Generate one string from the ``entry`` rule.

        Raises:
            UnknownEntryError: entry is not defined
            UndefinedSymbolError: a referenced rule is not defined
            RecursionLimitError: a rule with no finite expansion was forced
        """
        rule = self.grammar.get(entry)
        if rule is None:
            raise UnknownEntryError(entry)

        self._expansions = 0
        try:
            result = self._generate_rule(rule, depth=1)
        except RecursionError as e:
            raise RecursionLimitError(
                entry, rule.loc,
                f"Python recursion limit reached while expanding <{entry}>; "
                f"lower max_depth (currently {self.max_depth})",
            ) from e

        self.logger.debug(f"Generated {len(result)} characters from <{entry}> "
                          f"in {self._expansions} expansions")
        return result

    def generate_batch(self, count: int, entry: str) -> List[str]:
        """Generate ``count`` strings from ``entry``."""
        if entry not in self.grammar:
            raise UnknownEntryError(entry)
        return [self.generate(entry) for _ in range(count)]

    def _shortest(self, depth: int) -> bool:
        return depth > self.max_depth or self._expansions > self.max_expansions

    def _generate_rule(self, rule: Rule, depth: int) -> str:
        candidates = rule.alternatives
        if self._shortest(depth):
            heights = self._alternative_heights(rule)
            lowest = min(heights)
            if lowest == INFINITE:
                raise RecursionLimitError(rule.name or "(group)", rule.loc)
            candidates = [alt for alt, h in zip(rule.alternatives, heights) if h == lowest]

        alternative = self.rng.choice(candidates)
        parts = []
        for element in alternative.elements:
            parts.append(self._generate_element(element, depth))
        return ''.join(parts)

    def _generate_element(self, element: Element, depth: int) -> str:
        self._expansions += 1

        if isinstance(element, Literal):
            return element.text

        elif isinstance(element, SymbolRef):
            rule = self.grammar.get(element.name)
            if rule is None:
                raise UndefinedSymbolError(element.name, element.loc)
            return self._generate_rule(rule, depth + 1)

        elif isinstance(element, Group):
            return self._generate_rule(element.rule, depth + 1)

        elif isinstance(element, Optional):
            if self._shortest(depth) or self.rng.random() >= self.optional_probability:
                return ""
            return self._generate_rule(element.rule, depth + 1)

        elif isinstance(element, Repetition):
            if self._shortest(depth):
                count = element.min
            else:
                upper = element.max
                if upper is None:
                    upper = max(element.min, self.max_repetition)
                count = self.rng.randint(element.min, upper)
            parts = []
            for _ in range(count):
                parts.append(self._generate_element(element.inner, depth))
            return ''.join(parts)

        elif isinstance(element, Range):
            return chr(self.rng.randint(element.low, element.high))

        raise TypeError(f"Unknown grammar element: {element!r}")

    # Derivation heights: the minimal nesting depth needed to fully expand
    # a rule. Infinite for rules that can only expand into themselves.

    def _compute_heights(self) -> Dict[str, float]:
        heights = {name: INFINITE for name in self.grammar}
        changed = True
        while changed:
            changed = False
            for name in self.grammar:
                height = self._rule_height(self.grammar[name], heights)
                if height < heights[name]:
                    heights[name] = height
                    changed = True
        return heights

    def _rule_height(self, rule: Rule, heights: Dict[str, float]) -> float:
        return min(self._alt_height(alt, heights) for alt in rule.alternatives)

    def _alt_height(self, alternative: Alternative, heights: Dict[str, float]) -> float:
        return max((self._element_height(e, heights) for e in alternative.elements), default=0)

    def _element_height(self, element: Element, heights: Dict[str, float]) -> float:
        if isinstance(element, (Literal, Range, Optional)):
            return 0
        elif isinstance(element, SymbolRef):
            # undefined symbols surface as errors when generated
            return heights.get(element.name, 0) + 1
        elif isinstance(element, Group):
            return self._rule_height(element.rule, heights) + 1
        elif isinstance(element, Repetition):
            if element.min == 0:
                return 0
            return self._element_height(element.inner, heights)
        raise TypeError(f"Unknown grammar element: {element!r}")

    def _alternative_heights(self, rule: Rule) -> List[float]:
        key = id(rule)
        if key not in self._alt_heights:
            self._alt_heights[key] = [
                self._alt_height(alt, self.heights) for alt in rule.alternatives
            ]
        return self._alt_heights[key]

    def get_statistics(self, entry: str, samples: int = 100) -> Dict:
        """
        Get statistics about generated strings.

        Args:
            entry: Rule to generate from
            samples: Number of samples to analyze

        Returns:
            Dict with statistics
        """
        generated = self.generate_batch(samples, entry)

        lengths = [len(s) for s in generated]
        unique = len(set(generated))

        return {
            'samples': samples,
            'avg_length': sum(lengths) / len(lengths) if lengths else 0,
            'min_length': min(lengths) if lengths else 0,
            'max_length': max(lengths) if lengths else 0,
            'unique_count': unique,
            'uniqueness_ratio': (unique / samples) * 100 if samples else 0
        }


def make_rng(seed_source: Union[int, random.Random, None] = None) -> random.Random:
    """Build a random source from a seed, an existing Random, or nothing."""
    if isinstance(seed_source, random.Random):
        return seed_source
    return random.Random(seed_source)


# Convenience function
def generate(grammar: Grammar, entry: str, count: int = 1,
             rng: Union[int, random.Random, None] = None, **options) -> List[str]:
    """
    Quick function to generate from a grammar.

    Args:
        grammar: Parsed grammar
        entry: Rule to generate from
        count: Number of strings to generate
        rng: Seed or random.Random for reproducible output
        **options: Passed to GrammarGenerator (max_depth, max_repetition, ...)

    Returns:
        List of generated strings

    Example:
        >>> grammar = parse('digit = %x30-39')
        >>> generate(grammar, "digit", count=3, rng=7)
    """
    generator = GrammarGenerator(grammar, rng=make_rng(rng), **options)
    return generator.generate_batch(count, entry)

