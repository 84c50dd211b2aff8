"""
Dictionary Grammars

Loads grammars written as mappings from "<name>" to expansion strings,
with EBNF operators ?, * and + on nonterminals and parenthesized groups.

Example:
    {
        "<start>": ["<number>"],
        "<number>": ["(-)?<digit>+", ("0", {"weight": 0.1})],
        "<digit>": ["0", "1", "2", "3", "4", "5", "6", "7", "8", "9"],
    }
"""

import re
import logging
from collections import deque
from typing import Any, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

from .ebnf import FreshSymbols, desugar
from .errors import GrammarSyntaxError
from .rules import Grammar, build_grammar
from .symbols import Expansion, Nonterminal, Symbol, Terminal


logger = logging.getLogger("treefuzz.grammar.dict_grammar")

START_SYMBOL = "<start>"
RE_NONTERMINAL = re.compile(r'(<[^<> ]+>)')
RE_PARENTHESIZED = re.compile(r'\(([^()]+)\)([?*+])')
RE_EXTENDED_NONTERMINAL = re.compile(r'(<[^<> ]+>)([?*+])')


def strip_brackets(name: str) -> str:
    if name.startswith('<') and name.endswith('>') and len(name) > 2:
        return name[1:-1]
    return name


def tokenize(expansion: str) -> Tuple[Symbol, ...]:
    """Split an expansion string into terminal and nonterminal symbols."""
    symbols: List[Symbol] = []
    for piece in RE_NONTERMINAL.split(expansion):
        if not piece:
            continue
        if RE_NONTERMINAL.fullmatch(piece):
            symbols.append(Nonterminal(piece[1:-1]))
        else:
            symbols.append(Terminal(piece))
    return tuple(symbols)


class DictGrammarLoader:
    """
    Converts a dictionary grammar into plain BNF rules.

    Parenthesized groups followed by an operator are converted first, then
    nonterminals followed by an operator. Each conversion introduces a fresh
    nonterminal named after the rule it came from.
    """

    def __init__(self):
        self.logger = logging.getLogger("treefuzz.grammar.dict_grammar")

    def to_rules(self, grammar: Mapping[str, Sequence[Any]]) -> Dict[str, List[Expansion]]:
        """
        Convert a dictionary grammar to a rules mapping.

        Args:
            grammar: Mapping of "<name>" to a list of alternatives; each
                alternative is a string or a (string, options) pair

        Returns:
            Dict mapping bare nonterminal names to alternatives

        Raises:
            GrammarSyntaxError: on malformed alternatives
        """
        symbols = FreshSymbols(strip_brackets(key) for key in grammar)
        rules: Dict[str, List[Expansion]] = {}
        pending: Deque[Tuple[str, List[Tuple[str, Optional[float]]]]] = deque()

        for key, alternatives in grammar.items():
            if isinstance(alternatives, str):
                raise GrammarSyntaxError(f"Alternatives for {key} must be a list, got a string", symbol=key)
            pending.append((strip_brackets(key), [self._split_options(key, alt) for alt in alternatives]))

        while pending:
            name, alternatives = pending.popleft()
            converted = []
            for text, weight in alternatives:
                text = self._convert_parentheses(name, text, symbols, pending)
                text = self._convert_operators(name, text, symbols, rules)
                converted.append(Expansion(tokenize(text), weight))
            rules.setdefault(name, []).extend(converted)

        self.logger.debug(f"Converted dictionary grammar to {len(rules)} rules")
        return rules

    def load(self, grammar: Mapping[str, Sequence[Any]], start: str = START_SYMBOL) -> Grammar:
        """Convert and validate a dictionary grammar."""
        return build_grammar(self.to_rules(grammar), strip_brackets(start))

    def _split_options(self, key: str, alternative: Any) -> Tuple[str, Optional[float]]:
        if isinstance(alternative, str):
            return alternative, None

        if isinstance(alternative, (list, tuple)) and len(alternative) == 2 \
                and isinstance(alternative[0], str) and isinstance(alternative[1], dict):
            text, options = alternative
            unknown = set(options) - {"weight"}
            if unknown:
                self.logger.warning(f"Ignoring unknown options for {key}: {', '.join(sorted(unknown))}")
            weight = options.get("weight")
            if weight is not None and not isinstance(weight, (int, float)):
                raise GrammarSyntaxError(f"Weight for {key} must be a number, got {weight!r}", symbol=key)
            return text, weight

        raise GrammarSyntaxError(f"Invalid alternative for {key}: {alternative!r}", symbol=key)

    def _convert_parentheses(self, name: str, text: str, symbols: FreshSymbols,
                             pending: Deque[Tuple[str, List[Tuple[str, Optional[float]]]]]) -> str:
        """Replace `(content)op` with `<new>op`, queueing `<new> ::= content`."""
        while True:
            match = RE_PARENTHESIZED.search(text)
            if match is None:
                return text
            content, operator = match.groups()
            new_name = symbols.new(name)
            text = f"{text[:match.start()]}<{new_name}>{operator}{text[match.end():]}"
            pending.append((new_name, [(content, None)]))

    def _convert_operators(self, name: str, text: str, symbols: FreshSymbols,
                           rules: Dict[str, List[Expansion]]) -> str:
        """Replace `<x>op` with `<new>`, adding the operator rule for `<new>`."""
        while True:
            match = RE_EXTENDED_NONTERMINAL.search(text)
            if match is None:
                return text
            nonterminal, operator = match.groups()
            new = desugar(operator, (Nonterminal(nonterminal[1:-1]),), symbols, rules, hint=name)
            text = f"{text[:match.start()]}<{new.name}>{text[match.end():]}"


# Convenience function
def load_dict_grammar(grammar: Mapping[str, Sequence[Any]], start: str = START_SYMBOL) -> Grammar:
    """
    Quick function to build a Grammar from a dictionary grammar.

    Example:
        >>> grammar = load_dict_grammar({"<start>": ["<digit>+"], "<digit>": ["0", "1"]})
    """
    return DictGrammarLoader().load(grammar, start)
