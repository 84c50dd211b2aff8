"""
treefuzz Grammar-Based Generation

Generates structurally valid inputs from context-free grammars by growing
derivation trees, with a cost-driven closing phase that guarantees every
generation terminates.

Features:
- Validated, immutable grammars with precomputed expansion costs
- Derivation-tree expansion with growth, exploration and closing phases
- Grammar parser (BNF/EBNF support) and dictionary grammars with ? * +
- Built-in grammars (JSON, XML, SQL, etc.)
"""

from .errors import (
    GrammarError, GrammarValidationError, UndefinedSymbol, EmptyAlternatives,
    NoStartSymbol, InvalidWeight, GrammarSyntaxError, GenerationError,
    NonTerminating, EmptyGrammar, IncompleteTree, GenerationAborted,
)
from .symbols import Terminal, Nonterminal, Expansion
from .rules import Grammar, build_grammar
from .cost import CostTable, CostEstimator, INFINITE
from .tree import DerivationNode, DerivationTree, materialize
from .generator import GenerationConfig, GrammarGenerator, LeafSelection, Phase, generate
from .grammar_parser import GrammarParser, parse_grammar
from .dict_grammar import DictGrammarLoader, load_dict_grammar
from .loader import load_grammar
from .builtin_grammars import BuiltinGrammars

__all__ = [
    'GrammarError', 'GrammarValidationError', 'UndefinedSymbol', 'EmptyAlternatives',
    'NoStartSymbol', 'InvalidWeight', 'GrammarSyntaxError', 'GenerationError',
    'NonTerminating', 'EmptyGrammar', 'IncompleteTree', 'GenerationAborted',
    'Terminal', 'Nonterminal', 'Expansion',
    'Grammar', 'build_grammar',
    'CostTable', 'CostEstimator', 'INFINITE',
    'DerivationNode', 'DerivationTree', 'materialize',
    'GenerationConfig', 'GrammarGenerator', 'LeafSelection', 'Phase', 'generate',
    'GrammarParser', 'parse_grammar',
    'DictGrammarLoader', 'load_dict_grammar',
    'load_grammar',
    'BuiltinGrammars',
]
