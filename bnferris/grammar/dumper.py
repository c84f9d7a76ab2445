"""
Grammar Dumper

Renders rules back into the hybrid notation. The output re-parses into an
equivalent grammar; comments and original spacing are not preserved.
"""

from typing import List

from .errors import UnknownEntryError
from .lexer import is_symbol_char, is_symbol_start
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


ESCAPES = {
    '\0': '\\0',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\\': '\\\\',
    '"': '\\"',
}


def render_symbol(name: str) -> str:
    bare = bool(name) and is_symbol_start(name[0]) and all(is_symbol_char(c) for c in name)
    return name if bare else f"<{name}>"


def render_literal(text: str) -> str:
    out = ['"']
    for ch in text:
        if ch in ESCAPES:
            out.append(ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    out.append('"')
    return ''.join(out)


def render_repetition(element: Repetition) -> str:
    if element.max is None:
        prefix = "*" if element.min == 0 else f"{element.min}*"
    elif element.min == element.max:
        prefix = f"{element.min}"
    elif element.min == 0:
        prefix = f"*{element.max}"
    else:
        prefix = f"{element.min}*{element.max}"

    inner = element.inner
    if isinstance(inner, Repetition):
        # "2 *x" would read back as "2*x"
        return f"{prefix}( {render_element(inner)} )"
    return f"{prefix}{render_element(inner)}"


def render_element(element: Element) -> str:
    if isinstance(element, Literal):
        return render_literal(element.text)
    elif isinstance(element, SymbolRef):
        return render_symbol(element.name)
    elif isinstance(element, Group):
        return f"( {render_alternatives(element.rule.alternatives)} )"
    elif isinstance(element, Optional):
        return f"[ {render_alternatives(element.rule.alternatives)} ]"
    elif isinstance(element, Repetition):
        return render_repetition(element)
    elif isinstance(element, Range):
        return f"%x{element.low:02X}-{element.high:02X}"
    raise TypeError(f"Unknown grammar element: {element!r}")


def render_alternatives(alternatives: List[Alternative]) -> str:
    return " / ".join(
        " ".join(render_element(e) for e in alternative.elements)
        for alternative in alternatives
    )


def dump_rule(rule: Rule) -> str:
    """Render a named rule as ``name = alternatives``."""
    return f"{render_symbol(rule.name)} = {render_alternatives(rule.alternatives)}"


def dump(grammar: Grammar, entry: str) -> str:
    """Render the ``entry`` rule."""
    rule = grammar.get(entry)
    if rule is None:
        raise UnknownEntryError(entry)
    return dump_rule(rule)


def dump_grammar(grammar: Grammar) -> str:
    """Render every rule, sorted by name, one per line."""
    return "\n".join(dump_rule(grammar[name]) for name in sorted(grammar))
