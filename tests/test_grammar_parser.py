"""
Tests for grammar/grammar_parser.py and grammar/ebnf.py - BNF/EBNF text grammars.
"""

import random

import pytest
from rich.console import Console

from treefuzz.grammar import (
    Expansion, GrammarParser, GrammarSyntaxError, Nonterminal, Terminal,
    UndefinedSymbol, generate, GenerationConfig, parse_grammar,
)
from treefuzz.grammar.ebnf import FreshSymbols, desugar


def parse(text):
    parser = GrammarParser()
    return parser.parse(text), parser


class TestBNF:
    """Tests for plain BNF rules."""

    def test_alternatives_and_symbols(self):
        """Test terminals, nonterminals and alternatives are parsed in order."""
        rules, parser = parse('<s> ::= "a" <t> | <t>\n<t> ::= \'b\'')
        assert parser.start == "s"
        assert rules["s"] == [
            Expansion((Terminal("a"), Nonterminal("t"))),
            Expansion((Nonterminal("t"),)),
        ]
        assert rules["t"] == [Expansion((Terminal("b"),))]

    def test_empty_alternative(self):
        """Test an empty alternative or "" is an epsilon expansion."""
        rules, _ = parse('<s> ::= "a" <s> | ""')
        assert rules["s"][1] == Expansion((Terminal(""),))
        rules, _ = parse('<s> ::= "a" |')
        assert rules["s"][1] == Expansion(())

    def test_comments_and_continuations(self):
        """Test # comments are dropped and | lines continue the previous rule."""
        rules, _ = parse('''
        # header comment
        <s> ::= "a"    # trailing comment
              | "#"
              | "b"
        ''')
        assert [e.symbols[0].text for e in rules["s"]] == ["a", "#", "b"]

    def test_escapes(self):
        """Test backslash escapes inside terminals."""
        rules, _ = parse(r'<s> ::= "\n" | "\"" | "a\\b"')
        assert [e.symbols[0].text for e in rules["s"]] == ["\n", '"', "a\\b"]

    def test_repeated_rule_extends(self):
        """Test defining a rule twice appends alternatives."""
        rules, _ = parse('<s> ::= "a"\n<s> ::= "b"')
        assert len(rules["s"]) == 2

    def test_first_rule_is_start(self, arithmetic_text):
        grammar = parse_grammar(arithmetic_text)
        assert grammar.start == "expr"

    def test_explicit_start(self, arithmetic_text):
        assert parse_grammar(arithmetic_text, start="term").start == "term"


class TestEBNF:
    """Tests for optional, repetition, group and postfix operators."""

    def test_optional(self):
        rules, _ = parse('<a> ::= "x" ["y"]')
        assert rules["a"] == [Expansion((Terminal("x"), Nonterminal("a-1")))]
        assert rules["a-1"] == [Expansion(()), Expansion((Terminal("y"),))]

    def test_repetition(self):
        rules, _ = parse('<a> ::= {"y"}')
        assert rules["a-1"] == [Expansion(()), Expansion((Terminal("y"), Nonterminal("a-1")))]

    def test_single_group_is_inlined(self):
        rules, _ = parse('<a> ::= ("x" "y") "z"')
        assert rules == {"a": [Expansion((Terminal("x"), Terminal("y"), Terminal("z")))]}

    def test_group_with_alternatives(self):
        rules, _ = parse('<a> ::= ("x" | "y") "z"')
        assert rules["a"] == [Expansion((Nonterminal("a-1"), Terminal("z")))]
        assert rules["a-1"] == [Expansion((Terminal("x"),)), Expansion((Terminal("y"),))]

    @pytest.mark.parametrize("operator,expected", [
        ("?", [(), ("b",)]),
        ("*", [(), ("b", "a-1")]),
        ("+", [("b",), ("b", "a-1")]),
    ])
    def test_postfix_operators(self, operator, expected):
        """Test ? * + after an element."""
        rules, _ = parse(f'<a> ::= <b>{operator}\n<b> ::= "b"')
        assert rules["a"] == [Expansion((Nonterminal("a-1"),))]
        assert [[s.name for s in e.symbols] for e in rules["a-1"]] == [list(x) for x in expected]

    def test_fresh_names_avoid_existing_rules(self):
        """Test generated names skip names already defined."""
        rules, _ = parse('<a> ::= ["x"] <a-1>\n<a-1> ::= "y"')
        assert rules["a"] == [Expansion((Nonterminal("a-2"), Nonterminal("a-1")))]
        assert rules["a-1"] == [Expansion((Terminal("y"),))]

    def test_nested_constructs(self):
        """Test nested EBNF builds a valid grammar that generates."""
        grammar = parse_grammar('<list> ::= "[" [<item> {"," <item>}] "]"\n<item> ::= "1" | "2"')
        for seed in range(10):
            text = generate(grammar, GenerationConfig(rng=random.Random(seed)))
            assert text.startswith("[") and text.endswith("]")


class TestParseErrors:
    """Tests for malformed grammar text."""

    @pytest.mark.parametrize("text", [
        '<a> "x"',
        '::= "x"',
        '| "x"',
        '<a> ::= "x',
        '<a> ::= <b',
        '<a> ::= <>',
        '<a> ::= ["x"',
        '<a> ::= "x" ]',
        '<a> ::= x',
    ])
    def test_syntax_errors(self, text):
        with pytest.raises(GrammarSyntaxError):
            parse(text)

    def test_undefined_symbol_on_build(self):
        """Test references to missing rules fail when the grammar is built."""
        with pytest.raises(UndefinedSymbol):
            parse_grammar('<a> ::= <b>')

    def test_print_grammar(self):
        """Test the parsed grammar renders through rich."""
        _, parser = parse('<a> ::= "x" | <a> "y"')
        console = Console(record=True, width=80)
        parser.print_grammar(console)
        assert "<a> 'y'" in console.export_text()


class TestFreshSymbols:
    """Tests for the EBNF desugaring helpers."""

    def test_hint_then_numbered(self):
        symbols = FreshSymbols(["list"])
        assert symbols.new("list") == "list-1"
        assert symbols.new("list") == "list-2"
        assert symbols.new("item") == "item"
        assert symbols.new("item") == "item-1"

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            desugar("!", [Terminal("x")], FreshSymbols(), {})
