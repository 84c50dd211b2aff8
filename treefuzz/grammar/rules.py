"""
Grammar Rules

Immutable, validated context-free grammar.
"""

import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Set, Tuple, Union

from .cost import CostTable, estimate_costs
from .errors import EmptyAlternatives, NoStartSymbol, UndefinedSymbol
from .symbols import Expansion, Symbol, as_expansion


logger = logging.getLogger("treefuzz.grammar.rules")

RuleAlternative = Union[Expansion, Iterable[Symbol]]


class Grammar:
    """
    Validated mapping from nonterminal name to its ordered alternatives.

    Every referenced nonterminal has a rule, every rule has at least one
    alternative, and the start symbol exists. The cost table is computed
    once here and shared read-only by every generation that uses the grammar.
    """

    def __init__(self, rules: Mapping[str, Iterable[RuleAlternative]], start: str):
        """
        Initialize and validate grammar.

        Args:
            rules: Mapping of nonterminal name to alternatives
            start: Start nonterminal name

        Raises:
            NoStartSymbol, EmptyAlternatives, UndefinedSymbol
        """
        normalized = {
            name: tuple(as_expansion(alt) for alt in alternatives)
            for name, alternatives in rules.items()
        }
        _validate(normalized, start)

        self._rules = MappingProxyType(normalized)
        self._start = start
        self._costs = estimate_costs(self._rules)

        unreachable = self.unreachable()
        if unreachable:
            logger.warning(f"Unreachable nonterminals from <{start}>: {', '.join(unreachable)}")

    @property
    def start(self) -> str:
        return self._start

    @property
    def rules(self) -> Mapping[str, Tuple[Expansion, ...]]:
        return self._rules

    @property
    def costs(self) -> CostTable:
        return self._costs

    def alternatives(self, name: str) -> Tuple[Expansion, ...]:
        return self._rules[name]

    def __getitem__(self, name: str) -> Tuple[Expansion, ...]:
        return self._rules[name]

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def reachable(self, start: Optional[str] = None) -> Set[str]:
        """Nonterminals reachable from `start` (default: the start symbol)."""
        result: Set[str] = set()
        frontier = [start or self._start]
        while frontier:
            name = frontier.pop()
            if name in result:
                continue
            result.add(name)
            for expansion in self._rules.get(name, ()):
                frontier.extend(nt.name for nt in expansion.nonterminals)
        return result

    def unreachable(self) -> List[str]:
        reachable = self.reachable()
        return [name for name in self._rules if name not in reachable]

    def unproductive(self) -> List[str]:
        return self._costs.unproductive()

    def __repr__(self) -> str:
        return f"Grammar(start={self._start!r}, rules={len(self._rules)})"

    def __str__(self) -> str:
        lines = []
        for name, alternatives in self._rules.items():
            body = " | ".join(str(alt) for alt in alternatives)
            lines.append(f"<{name}> ::= {body}")
        return "\n".join(lines)


def _validate(rules: Mapping[str, Tuple[Expansion, ...]], start: str):
    if start not in rules:
        raise NoStartSymbol(f"Start symbol <{start}> has no rule", symbol=start)

    for name, alternatives in rules.items():
        if not alternatives:
            raise EmptyAlternatives(f"Nonterminal <{name}> has no expansions", symbol=name)
        for expansion in alternatives:
            for nonterminal in expansion.nonterminals:
                if nonterminal.name not in rules:
                    raise UndefinedSymbol(
                        f"<{name}> references undefined nonterminal <{nonterminal.name}>",
                        symbol=nonterminal.name
                    )


def build_grammar(rules: Mapping[str, Iterable[RuleAlternative]], start: str) -> Grammar:
    """
    Validate rules and build an immutable Grammar.

    Args:
        rules: Mapping of nonterminal name to an ordered sequence of alternatives
        start: Start nonterminal name

    Returns:
        Grammar

    Example:
        >>> S, A = Nonterminal("S"), Nonterminal("A")
        >>> grammar = build_grammar({"S": [Expansion.of(A, "b")], "A": [Expansion.of("a")]}, "S")
    """
    grammar = Grammar(rules, start)
    logger.info(f"Built grammar with {len(grammar)} rules, start <{start}>")
    return grammar
