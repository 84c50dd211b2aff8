"""
EBNF Desugaring

Rewrites optional, repetition and group constructs into plain BNF rules
over freshly named nonterminals.
"""

from typing import Dict, Iterable, List, Sequence

from .symbols import Expansion, Nonterminal, Symbol


class FreshSymbols:
    """
    Allocates nonterminal names that do not clash with existing ones.

    The hint itself is used when free, otherwise hint-1, hint-2, ...
    """

    def __init__(self, existing: Iterable[str] = ()):
        self.existing = set(existing)

    def new(self, hint: str = "symbol") -> str:
        candidate = hint
        count = 0
        while candidate in self.existing:
            count += 1
            candidate = f"{hint}-{count}"
        self.existing.add(candidate)
        return candidate


def optional_rule(content: Sequence[Symbol]) -> List[Expansion]:
    """N ::= "" | content"""
    return [Expansion(()), Expansion(tuple(content))]


def star_rule(name: str, content: Sequence[Symbol]) -> List[Expansion]:
    """N ::= "" | content N"""
    return [Expansion(()), Expansion(tuple(content) + (Nonterminal(name),))]


def plus_rule(name: str, content: Sequence[Symbol]) -> List[Expansion]:
    """N ::= content | content N"""
    return [Expansion(tuple(content)), Expansion(tuple(content) + (Nonterminal(name),))]


def group_rule(content: Sequence[Symbol]) -> List[Expansion]:
    """N ::= content"""
    return [Expansion(tuple(content))]


def desugar(operator: str, content: Sequence[Symbol], symbols: FreshSymbols,
            rules: Dict[str, List[Expansion]], hint: str = "symbol") -> Nonterminal:
    """
    Add a rule for `content` under `operator` and return its nonterminal.

    Args:
        operator: One of "?", "*", "+" or "" (plain group)
        content: Symbols the construct wraps
        symbols: Fresh name allocator
        rules: Rules mapping the new rule is added to
        hint: Base name for the new nonterminal
    """
    name = symbols.new(hint)
    if operator == "?":
        rules[name] = optional_rule(content)
    elif operator == "*":
        rules[name] = star_rule(name, content)
    elif operator == "+":
        rules[name] = plus_rule(name, content)
    elif operator == "":
        rules[name] = group_rule(content)
    else:
        raise ValueError(f"Unknown EBNF operator: {operator!r}")
    return Nonterminal(name)
