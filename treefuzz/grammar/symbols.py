"""
Grammar Symbols

Value types for terminals, nonterminals and expansions.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .errors import InvalidWeight


DEFAULT_WEIGHT = 1.0


@dataclass(frozen=True)
class Terminal:
    """Literal text that needs no further expansion."""
    text: str

    def __str__(self) -> str:
        return repr(self.text)


@dataclass(frozen=True)
class Nonterminal:
    """Named symbol that must be expanded through one of its rules."""
    name: str

    def __str__(self) -> str:
        return f"<{self.name}>"


Symbol = Union[Terminal, Nonterminal]


@dataclass(frozen=True)
class Expansion:
    """
    One alternative right-hand side of a rule.

    An expansion with no symbols derives the empty string. The weight is
    relative to the other alternatives of the same nonterminal; None means
    DEFAULT_WEIGHT.
    """
    symbols: Tuple[Symbol, ...] = ()
    weight: Optional[float] = None

    def __post_init__(self):
        # Accept any iterable of symbols but store a tuple
        if not isinstance(self.symbols, tuple):
            object.__setattr__(self, "symbols", tuple(self.symbols))
        for symbol in self.symbols:
            if not isinstance(symbol, (Terminal, Nonterminal)):
                raise TypeError(f"Expansion symbols must be Terminal or Nonterminal, got {symbol!r}")
        if self.weight is not None and not self.weight > 0:
            raise InvalidWeight(f"Expansion weight must be positive, got {self.weight!r}")

    @classmethod
    def of(cls, *symbols: Union[Symbol, str], weight: Optional[float] = None) -> "Expansion":
        """
        Build an expansion from symbols, treating bare strings as terminals.

        Example:
            >>> Expansion.of("(", Nonterminal("expr"), ")")
        """
        return cls(tuple(Terminal(s) if isinstance(s, str) else s for s in symbols), weight)

    @property
    def effective_weight(self) -> float:
        return DEFAULT_WEIGHT if self.weight is None else float(self.weight)

    @property
    def nonterminals(self) -> Tuple[Nonterminal, ...]:
        return tuple(s for s in self.symbols if isinstance(s, Nonterminal))

    @property
    def is_terminal_only(self) -> bool:
        return not self.nonterminals

    def __len__(self) -> int:
        return len(self.symbols)

    def __str__(self) -> str:
        if not self.symbols:
            return '""'
        return " ".join(str(s) for s in self.symbols)


def as_expansion(value: Union[Expansion, Iterable[Symbol]]) -> Expansion:
    """Normalize a rule alternative to an Expansion."""
    if isinstance(value, Expansion):
        return value
    if isinstance(value, (Terminal, Nonterminal)):
        return Expansion((value,))
    return Expansion(tuple(value))
