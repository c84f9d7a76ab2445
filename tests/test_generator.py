"""
Tests for grammar/generator.py - GrammarGenerator and generate().
"""

import random
import pytest

from bnferris.grammar import (
    GrammarGenerator,
    Literal,
    RecursionLimitError,
    UndefinedSymbolError,
    UnknownEntryError,
    generate,
    parse,
)
from bnferris.grammar.generator import make_rng
from bnferris.grammar.rules import Alternative, Grammar, Rule


class TestElementSemantics:
    """Tests for how each element kind is generated."""

    def test_literal(self, rng):
        assert generate(parse('a = "hello"'), "a", count=3, rng=rng) == ["hello"] * 3

    def test_concatenation_order(self, rng):
        assert generate(parse('a = "x" b "z"\nb = "y"'), "a", rng=rng) == ["xyz"]

    def test_range_bounds(self, rng):
        samples = generate(parse("digit = %x30-39"), "digit", count=500, rng=rng)
        assert all(len(s) == 1 and 0x30 <= ord(s) <= 0x39 for s in samples)
        assert len(set(samples)) == 10

    def test_single_codepoint_range(self, rng):
        assert generate(parse("a = %x41-41"), "a", count=5, rng=rng) == ["A"] * 5

    def test_repetition_bounds(self, rng):
        samples = generate(parse('group = 3*5 "x"'), "group", count=300, rng=rng)
        assert all(3 <= len(s) <= 5 and set(s) == {"x"} for s in samples)
        assert {len(s) for s in samples} == {3, 4, 5}

    def test_exact_repetition(self, rng):
        assert generate(parse('a = 4"ab"'), "a", rng=rng) == ["abababab"]

    def test_unbounded_repetition_uses_ceiling(self, rng):
        grammar = parse('a = *"x"')
        generator = GrammarGenerator(grammar, rng=rng, max_repetition=7)
        lengths = {len(generator.generate("a")) for _ in range(400)}
        assert lengths == set(range(8))

    def test_unbounded_minimum_above_ceiling(self, rng):
        generator = GrammarGenerator(parse('a = 30*"x"'), rng=rng, max_repetition=5)
        assert generator.generate("a") == "x" * 30

    def test_optional_reachability(self, rng):
        samples = set(generate(parse('opt = ["y"]'), "opt", count=200, rng=rng))
        assert samples == {"", "y"}

    def test_optional_probability(self):
        generator = GrammarGenerator(parse('opt = ["y"]'), rng=random.Random(5),
                                     optional_probability=0.9)
        samples = generator.generate_batch(1000, "opt")
        assert samples.count("y") > 800

    def test_invalid_optional_probability(self):
        with pytest.raises(ValueError):
            GrammarGenerator(parse('opt = ["y"]'), optional_probability=1.0)

    def test_group_alternatives(self, rng):
        samples = set(generate(parse('a = ("x" / "y") "!"'), "a", count=200, rng=rng))
        assert samples == {"x!", "y!"}

    def test_curly_repetition(self, rng):
        samples = generate(parse('a = {"ab" / "c"}'), "a", count=200, rng=rng)
        assert all(set(s) <= {"a", "b", "c"} for s in samples)
        assert "" in samples

    def test_unknown_element_type(self, rng):
        grammar = Grammar()
        grammar.define(Rule([Alternative([object()])], name="a"))
        with pytest.raises(TypeError):
            GrammarGenerator(grammar, rng=rng)


class TestIncrementalAlternatives:
    """Tests for =/ behaving like a single definition."""

    def test_merged_alternatives_cover_all_values(self, rng):
        merged = generate(parse('rule = "a" / "b"\nrule =/ "c"'), "rule", count=1000, rng=rng)
        assert set(merged) == {"a", "b", "c"}

    def test_same_sequence_as_single_definition(self):
        merged = generate(parse('rule = "a" / "b"\nrule =/ "c"'), "rule", count=50, rng=9)
        single = generate(parse('rule = "a" / "b" / "c"'), "rule", count=50, rng=9)
        assert merged == single


class TestErrors:
    """Tests for generation failures."""

    def test_undefined_symbol(self, rng):
        with pytest.raises(UndefinedSymbolError) as exc:
            generate(parse("a = b"), "a", rng=rng)
        assert exc.value.name == "b"

    def test_unknown_entry(self, rng):
        with pytest.raises(UnknownEntryError) as exc:
            generate(parse('a = "x"'), "missing", rng=rng)
        assert exc.value.name == "missing"

    def test_unknown_entry_with_zero_count(self, rng):
        with pytest.raises(UnknownEntryError):
            generate(parse('a = "x"'), "missing", count=0, rng=rng)

    def test_rule_without_finite_expansion(self, rng):
        generator = GrammarGenerator(parse('a = "x" a'), rng=rng, max_depth=10)
        with pytest.raises(RecursionLimitError) as exc:
            generator.generate("a")
        assert exc.value.name == "a"

    def test_interpreter_recursion_limit(self, rng):
        """A finite chain deeper than the interpreter stack is reported as such."""
        length = 3000
        lines = ['r%d = "x"' % length]
        lines += ["r%d = r%d" % (i, i + 1) for i in reversed(range(length))]
        generator = GrammarGenerator(parse("\n".join(lines)), rng=rng, max_depth=length + 10)
        assert generator.heights["r0"] == length
        with pytest.raises(RecursionLimitError) as exc:
            generator.generate("r0")
        assert exc.value.name == "r0"
        assert "Python recursion limit reached" in exc.value.message
        assert "no terminating expansion" not in exc.value.message


class TestTermination:
    """Tests for the recursion-depth ceiling."""

    def test_self_reference_terminates(self, rng):
        generator = GrammarGenerator(parse('loop = "a" loop | "a"'), rng=rng, max_depth=16)
        for _ in range(200):
            result = generator.generate("loop")
            assert set(result) == {"a"}
            # one "a" per level up to the ceiling, then the shortest form
            assert 1 <= len(result) <= 17

    def test_mutual_recursion_terminates(self, rng):
        grammar = parse('a = "(" b ")" / "x"\nb = a a / a')
        generator = GrammarGenerator(grammar, rng=rng, max_depth=8)
        for _ in range(100):
            result = generator.generate("a")
            assert result.count("(") == result.count(")")

    def test_branching_recursion_bounded_by_budget(self, rng):
        grammar = parse('tree = *tree "x" / "x"')
        generator = GrammarGenerator(grammar, rng=rng, max_depth=30, max_expansions=500)
        for _ in range(20):
            result = generator.generate("tree")
            assert set(result) == {"x"}

    def test_shortest_form_skips_optional_and_repetition(self, rng):
        grammar = parse('deep = "<" deep ">" / [ "opt" ] 2*9 "x"')
        generator = GrammarGenerator(grammar, rng=rng, max_depth=0)
        assert generator.generate("deep") == "xx"

    def test_shortest_alternative_chosen_past_ceiling(self, rng):
        grammar = parse('a = b / c\nb = "long" c\nc = "short"')
        generator = GrammarGenerator(grammar, rng=rng, max_depth=0)
        assert generator.heights == {"a": 1, "b": 1, "c": 0}
        assert generator.generate_batch(20, "a") == ["short"] * 20

    def test_heights_of_unproductive_rules(self):
        generator = GrammarGenerator(parse('a = "x" a\nb = a / "y"'))
        assert generator.heights["a"] == float("inf")
        assert generator.heights["b"] == 0


class TestRandomness:
    """Tests for the injected random source."""

    def test_seed_reproducible(self, message_grammar_text):
        grammar = parse(message_grammar_text)
        assert generate(grammar, "message", count=20, rng=42) == \
            generate(grammar, "message", count=20, rng=42)

    def test_random_instance_is_used(self, message_grammar_text):
        grammar = parse(message_grammar_text)
        first = generate(grammar, "message", count=10, rng=random.Random(3))
        second = GrammarGenerator(grammar, rng=random.Random(3)).generate_batch(10, "message")
        assert first == second

    def test_make_rng(self):
        source = random.Random(1)
        assert make_rng(source) is source
        assert isinstance(make_rng(None), random.Random)
        assert make_rng(5).random() == random.Random(5).random()

    def test_grammar_shared_between_generators(self, message_grammar_text):
        grammar = parse(message_grammar_text)
        before = grammar["message"].alternatives[:]
        for seed in range(5):
            GrammarGenerator(grammar, rng=random.Random(seed)).generate_batch(10, "message")
        assert grammar["message"].alternatives == before


class TestStatistics:

    def test_get_statistics(self, rng):
        generator = GrammarGenerator(parse('a = "x" / "yy"'), rng=rng)
        stats = generator.get_statistics("a", samples=100)
        assert stats['samples'] == 100
        assert stats['min_length'] == 1
        assert stats['max_length'] == 2
        assert stats['unique_count'] == 2
        assert stats['uniqueness_ratio'] == 2.0

    def test_message_grammar_shape(self, message_grammar_text, rng):
        samples = generate(parse(message_grammar_text), "message", count=200, rng=rng)
        for sample in samples:
            words = sample.rstrip("!?.").split(" ")
            assert words[0] in ("hello", "hi")
            assert len(words) <= 4
            assert all(w.isalpha() and w.islower() and 1 <= len(w) <= 8 for w in words[1:])


def test_literal_dataclass_equality():
    """Locations do not take part in structural equality."""
    assert Literal("x") == Literal("x", loc=None)
