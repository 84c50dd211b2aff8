"""
Grammar Parser

Parses BNF/EBNF grammar text into validated grammars.
"""

import logging
from typing import Dict, List, Optional, Tuple

from rich.console import Console

from .ebnf import FreshSymbols, desugar
from .errors import GrammarSyntaxError
from .rules import Grammar, build_grammar
from .symbols import Expansion, Nonterminal, Symbol, Terminal


logger = logging.getLogger("treefuzz.grammar.parser")

_CLOSERS = {'[': ']', '{': '}', '(': ')'}
_POSTFIX = "?*+"
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


class GrammarParser:
    """
    Parses BNF/EBNF grammar specifications.

    Supported syntax:
    - BNF: <rule> ::= <production> | <alternative>
    - EBNF extensions: {repetition}, [optional], (grouping)
    - Postfix operators after any element: ? * +
    - Terminal strings: "literal" or 'literal'
    - Comments: # comment
    - Continuation lines starting with |

    The first rule defined is the start symbol. EBNF constructs become
    fresh rules named after the rule they appear in (<digits-1>, ...).

    Example grammar:
        <json> ::= <object> | <array>
        <object> ::= "{" [<members>] "}"
        <members> ::= <pair> | <pair> "," <members>
        <pair> ::= <string> ":" <value>
        <array> ::= "[" [<elements>] "]"
        <elements> ::= <value> | <value> "," <elements>
        <value> ::= <string> | <number> | <object> | <array> | "true" | "false" | "null"
        <string> ::= '"' {<char>} '"'
        <number> ::= <digit> {<digit>}
        <digit> ::= "0" | "1" | "2" | "3" | "4" | "5" | "6" | "7" | "8" | "9"
    """

    def __init__(self):
        self.logger = logging.getLogger("treefuzz.grammar.parser")
        self.rules: Dict[str, List[Expansion]] = {}
        self.start: Optional[str] = None
        self._symbols = FreshSymbols()

    def parse(self, grammar_text: str) -> Dict[str, List[Expansion]]:
        """
        Parse grammar text into a rules mapping.

        Args:
            grammar_text: Grammar in BNF/EBNF format

        Returns:
            Dict mapping rule names to alternatives

        Raises:
            GrammarSyntaxError: on malformed input
        """
        self.rules = {}
        self.start = None

        definitions = self._split_rules(grammar_text)
        self._symbols = FreshSymbols(name for name, _, _ in definitions)

        for rule_name, productions_text, line_no in definitions:
            if self.start is None:
                self.start = rule_name
            if rule_name in self.rules:
                self.logger.debug(f"Extending rule <{rule_name}> at line {line_no}")
            alternatives = self._parse_rule(rule_name, productions_text, line_no)
            self.rules.setdefault(rule_name, []).extend(alternatives)

        self.logger.info(f"Parsed grammar with {len(self.rules)} rules")
        return self.rules

    def _split_rules(self, grammar_text: str) -> List[Tuple[str, str, int]]:
        """Join continuation lines and split each rule into name and body."""
        definitions: List[List] = []

        for line_no, line in enumerate(grammar_text.split('\n'), start=1):
            line = _strip_comment(line).strip()

            # Skip empty lines and comments
            if not line:
                continue

            if line.startswith('|'):
                if not definitions:
                    raise GrammarSyntaxError(f"Line {line_no}: continuation before any rule")
                definitions[-1][1] += " " + line
                continue

            if '::=' not in line:
                raise GrammarSyntaxError(f"Line {line_no}: expected '::=' in {line!r}")

            name_text, body = line.split('::=', 1)
            rule_name = name_text.strip().strip('<>').strip()
            if not rule_name:
                raise GrammarSyntaxError(f"Line {line_no}: rule has no name")
            definitions.append([rule_name, body.strip(), line_no])

        return [(name, body, line_no) for name, body, line_no in definitions]

    def _parse_rule(self, rule_name: str, text: str, line_no: int) -> List[Expansion]:
        """Parse the alternatives of a single rule."""
        alternatives, end = self._parse_alternatives(rule_name, text, 0, None, line_no)
        if end != len(text):
            raise GrammarSyntaxError(f"Line {line_no}: unexpected {text[end]!r} at position {end}")
        return [Expansion(tuple(symbols)) for symbols in alternatives]

    def _parse_alternatives(self, rule_name: str, text: str, start: int,
                            closer: Optional[str], line_no: int) -> Tuple[List[List[Symbol]], int]:
        """
        Parse '|'-separated alternatives up to `closer` (or end of text).

        Returns:
            (alternatives, position just past the closer)
        """
        alternatives: List[List[Symbol]] = [[]]
        i = start

        while i < len(text):
            char = text[i]

            # Skip whitespace
            if char.isspace():
                i += 1
                continue

            if char == '|':
                alternatives.append([])
                i += 1
                continue

            if closer is not None and char == closer:
                return alternatives, i + 1

            # Terminal string (quoted)
            if char in ('"', "'"):
                terminal, i = self._parse_terminal(text, i, line_no)
                elements = [terminal]

            # NonTerminal <rule_name>
            elif char == '<':
                nonterminal, i = self._parse_nonterminal(text, i, line_no)
                elements = [nonterminal]

            # Optional [...], repetition {...}, group (...)
            elif char in _CLOSERS:
                inner, i = self._parse_alternatives(rule_name, text, i + 1, _CLOSERS[char], line_no)
                operator = {'[': '?', '{': '*', '(': ''}[char]
                if operator:
                    elements = [self._add_rule(rule_name, operator, inner)]
                else:
                    elements = self._inline(rule_name, inner)

            else:
                raise GrammarSyntaxError(f"Line {line_no}: unexpected {char!r} at position {i}")

            # Postfix operator applies to the element just parsed
            if i < len(text) and text[i] in _POSTFIX:
                elements = [self._add_rule(rule_name, text[i], [elements])]
                i += 1

            alternatives[-1].extend(elements)

        if closer is not None:
            raise GrammarSyntaxError(f"Line {line_no}: missing {closer!r}")
        return alternatives, i

    def _inline(self, rule_name: str, alternatives: List[List[Symbol]]) -> List[Symbol]:
        """Symbols for a group: inlined when it has one alternative, else a new rule."""
        if len(alternatives) == 1:
            return alternatives[0]
        return [self._group(rule_name, alternatives)]

    def _add_rule(self, rule_name: str, operator: str, alternatives: List[List[Symbol]]) -> Nonterminal:
        """New rule applying an EBNF operator (? * +) to the given alternatives."""
        content = self._inline(rule_name, alternatives)
        return desugar(operator, content, self._symbols, self.rules, hint=rule_name)

    def _group(self, rule_name: str, alternatives: List[List[Symbol]]) -> Nonterminal:
        name = self._symbols.new(rule_name)
        self.rules[name] = [Expansion(tuple(symbols)) for symbols in alternatives]
        return Nonterminal(name)

    def _parse_terminal(self, text: str, start: int, line_no: int) -> Tuple[Terminal, int]:
        """Parse terminal string, resolving backslash escapes."""
        quote_char = text[start]
        chars = []
        i = start + 1

        while i < len(text):
            char = text[i]
            if char == quote_char:
                return Terminal("".join(chars)), i + 1
            if char == "\\" and i + 1 < len(text):
                chars.append(_ESCAPES.get(text[i + 1], text[i + 1]))
                i += 2
                continue
            chars.append(char)
            i += 1

        raise GrammarSyntaxError(f"Line {line_no}: unclosed quote at position {start}")

    def _parse_nonterminal(self, text: str, start: int, line_no: int) -> Tuple[Nonterminal, int]:
        """Parse non-terminal <rule_name>."""
        end = text.find('>', start)

        if end == -1:
            raise GrammarSyntaxError(f"Line {line_no}: unclosed non-terminal at position {start}")

        name = text[start + 1:end].strip()
        if not name:
            raise GrammarSyntaxError(f"Line {line_no}: empty non-terminal at position {start}")
        return Nonterminal(name), end + 1

    def build(self, start: Optional[str] = None) -> Grammar:
        """Build a validated Grammar from the parsed rules."""
        return build_grammar(self.rules, start or self.start or "")

    def print_grammar(self, console: Optional[Console] = None):
        """Print parsed grammar in human-readable format."""
        console = console or Console()
        console.rule("[bold]PARSED GRAMMAR")

        for rule_name, alternatives in self.rules.items():
            console.print(f"\n[cyan]<{rule_name}>[/cyan] ::=", highlight=False)
            for i, expansion in enumerate(alternatives):
                prefix = "  |" if i > 0 else "   "
                console.print(f"{prefix} {expansion}", markup=False, highlight=False)

        console.rule()


def _strip_comment(line: str) -> str:
    """Drop a trailing # comment that is not inside a quoted terminal."""
    quote = None
    escaped = False
    for i, char in enumerate(line):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char == '#':
            return line[:i]
    return line


# Convenience function
def parse_grammar(grammar_text: str, start: Optional[str] = None) -> Grammar:
    """
    Quick function to parse grammar text into a validated Grammar.

    Args:
        grammar_text: Grammar in BNF/EBNF format
        start: Start rule (default: first rule)

    Returns:
        Grammar

    Example:
        >>> grammar = parse_grammar('''
        ... <expr> ::= <term> | <expr> "+" <term>
        ... <term> ::= <number> | "(" <expr> ")"
        ... <number> ::= "0" | "1" | "2"
        ... ''')
    """
    parser = GrammarParser()
    parser.parse(grammar_text)
    return parser.build(start)
