"""
Grammar Errors

Exception hierarchy for grammar construction, loading and generation.
"""

from typing import Optional


class GrammarError(Exception):
    """Base class for all treefuzz grammar errors."""

    def __init__(self, message: str, symbol: Optional[str] = None):
        super().__init__(message)
        self.symbol = symbol


class GrammarValidationError(GrammarError):
    """Grammar rules failed validation at construction time."""
    pass


class UndefinedSymbol(GrammarValidationError):
    """An expansion references a nonterminal that has no rule."""
    pass


class EmptyAlternatives(GrammarValidationError):
    """A nonterminal has no expansions."""
    pass


class NoStartSymbol(GrammarValidationError):
    """The designated start symbol has no rule."""
    pass


class InvalidWeight(GrammarValidationError):
    """An expansion carries a non-positive selection weight."""
    pass


class GrammarSyntaxError(GrammarValidationError):
    """Grammar text or mapping could not be parsed."""
    pass


class GenerationError(GrammarError):
    """A single generation attempt failed."""
    pass


class NonTerminating(GenerationError):
    """A reachable nonterminal cannot be reduced to terminals."""
    pass


class EmptyGrammar(GenerationError):
    """The start symbol has no alternatives to expand."""
    pass


class IncompleteTree(GenerationError):
    """A derivation tree with open leaves was materialized."""
    pass


class GenerationAborted(GenerationError):
    """Generation exceeded the caller-supplied step budget."""

    def __init__(self, message: str, steps: int):
        super().__init__(message)
        self.steps = steps
