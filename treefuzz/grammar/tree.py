"""
Derivation Tree

Mutable generation state and the materializer that flattens it.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .errors import IncompleteTree
from .symbols import Expansion, Nonterminal, Symbol, Terminal


logger = logging.getLogger("treefuzz.grammar.tree")


@dataclass(eq=False)
class DerivationNode:
    """
    One position in a derivation tree.

    States:
    - terminal leaf: symbol is a Terminal
    - open leaf: symbol is a Nonterminal, children is None
    - expanded node: symbol is a Nonterminal, alternative and children set
    """
    symbol: Symbol
    depth: int = 0
    alternative: Optional[int] = None
    children: Optional[List["DerivationNode"]] = None

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.symbol, Terminal)

    @property
    def is_open(self) -> bool:
        return isinstance(self.symbol, Nonterminal) and self.children is None

    @property
    def is_expanded(self) -> bool:
        return self.children is not None

    @property
    def name(self) -> str:
        """Nonterminal name, or the terminal text for terminal leaves."""
        if isinstance(self.symbol, Terminal):
            return self.symbol.text
        return self.symbol.name

    def walk(self) -> Iterator["DerivationNode"]:
        """Pre-order traversal, children left to right."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def __str__(self) -> str:
        if self.is_terminal:
            return repr(self.symbol.text)
        if self.is_open:
            return f"{self.symbol} (open)"
        return f"{self.symbol} #{self.alternative}"


class DerivationTree:
    """
    Derivation tree rooted at an open leaf for the start symbol.

    Open leaves are kept in a worklist ordered left to right. Expanding a
    leaf replaces it in the worklist with its new open children at the same
    position, so the order survives every expansion.
    """

    def __init__(self, start: str):
        self.root = DerivationNode(Nonterminal(start))
        self._open: List[DerivationNode] = [self.root]
        self.steps = 0

    @property
    def open_leaves(self) -> Sequence[DerivationNode]:
        return tuple(self._open)

    @property
    def open_count(self) -> int:
        return len(self._open)

    @property
    def is_complete(self) -> bool:
        return not self._open

    def open_leaf(self, position: int) -> DerivationNode:
        return self._open[position]

    def expand(self, position: int, alternative: int, expansion: Expansion) -> List[DerivationNode]:
        """
        Expand the open leaf at `position` of the worklist.

        Args:
            position: Index into the open-leaf worklist
            alternative: Index of the chosen alternative in its rule
            expansion: The chosen alternative

        Returns:
            The new child nodes
        """
        node = self._open[position]
        children = [DerivationNode(symbol, depth=node.depth + 1) for symbol in expansion.symbols]
        node.alternative = alternative
        node.children = children
        self._open[position:position + 1] = [child for child in children if child.is_open]
        self.steps += 1
        return children

    def walk(self) -> Iterator[DerivationNode]:
        return self.root.walk()

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def depth(self) -> int:
        return max(node.depth for node in self.walk())

    def __str__(self) -> str:
        return "".join(
            node.symbol.text if node.is_terminal else str(node.symbol)
            for node in self.walk()
            if node.is_terminal or node.is_open
        )


def materialize(tree: DerivationTree) -> str:
    """
    Concatenate the terminal leaves of a fully expanded tree.

    Raises:
        IncompleteTree: if the tree still has open leaves
    """
    parts = []
    for node in tree.walk():
        if node.is_open:
            raise IncompleteTree(f"Cannot materialize tree with open leaf {node.symbol}", symbol=node.name)
        if node.is_terminal:
            parts.append(node.symbol.text)
    return "".join(parts)
