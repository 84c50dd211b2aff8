"""
Pytest configuration and fixtures for treefuzz tests.
"""

import sys
import pytest
from pathlib import Path

# Add project root to path for all imports
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from treefuzz.grammar import Expansion, Nonterminal, build_grammar


class SequenceRandom:
    """Random source that replays a fixed sequence of values, cycling at the end."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class ForbiddenRandom:
    """Random source that fails the test if it is ever drawn from."""

    def random(self) -> float:
        raise AssertionError("random source should not be used")


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point ~ at a temporary directory so ~/.treefuzz is not touched."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def xy_grammar():
    """S -> A B, A -> "x", B -> "y": exactly one derivation."""
    S, A, B = Nonterminal("S"), Nonterminal("A"), Nonterminal("B")
    return build_grammar({
        "S": [Expansion.of(A, B)],
        "A": [Expansion.of("x")],
        "B": [Expansion.of("y")],
    }, "S")


@pytest.fixture
def left_recursive_grammar():
    """S -> "a" | S "a"."""
    S = Nonterminal("S")
    return build_grammar({"S": [Expansion.of("a"), Expansion.of(S, "a")]}, "S")


@pytest.fixture
def right_recursive_grammar():
    """S -> "a" S | "" (empty)."""
    S = Nonterminal("S")
    return build_grammar({"S": [Expansion.of("a", S), Expansion.of()]}, "S")


@pytest.fixture
def arithmetic_text():
    """Small BNF arithmetic grammar."""
    return """
    # Simple arithmetic grammar
    <expr> ::= <term> | <expr> "+" <term> | <expr> "-" <term>
    <term> ::= <factor> | <term> "*" <factor>
    <factor> ::= <number> | "(" <expr> ")"
    <number> ::= <digit> {<digit>}
    <digit> ::= "0" | "1" | "2" | "3" | "4" | "5" | "6" | "7" | "8" | "9"
    """
