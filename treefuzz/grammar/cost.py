"""
Grammar Cost Estimator

Computes the minimum number of expansion steps each nonterminal needs to
reach a terminal-only derivation.
"""

import math
import collections.abc
import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from .symbols import Expansion


logger = logging.getLogger("treefuzz.grammar.cost")

INFINITE = math.inf


class CostTable(collections.abc.Mapping):
    """
    Read-only mapping from nonterminal name to minimum expansion cost.

    Costs are non-negative integers, or INFINITE for nonterminals that can
    never be reduced to terminals.
    """

    def __init__(self, costs: Dict[str, float]):
        self._costs = dict(costs)

    def __getitem__(self, name: str) -> float:
        return self._costs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._costs)

    def __len__(self) -> int:
        return len(self._costs)

    def __repr__(self) -> str:
        return f"CostTable({self._costs!r})"

    def is_finite(self, name: str) -> bool:
        return self._costs[name] != INFINITE

    def expansion_cost(self, expansion: Expansion) -> float:
        """Cost of the most expensive referenced nonterminal, 0 if there are none."""
        return max((self._costs[nt.name] for nt in expansion.nonterminals), default=0)

    def unproductive(self) -> List[str]:
        """Nonterminals with no terminating derivation."""
        return [name for name, cost in self._costs.items() if cost == INFINITE]

    def max_finite_cost(self) -> int:
        finite = [cost for cost in self._costs.values() if cost != INFINITE]
        return int(max(finite, default=0))


class CostEstimator:
    """
    Minimum expansion cost by fixpoint relaxation.

    Every nonterminal starts at INFINITE. Each pass recomputes
    1 + min over alternatives of the max child cost from the current
    estimates and keeps any value that went down. A cycle therefore
    contributes INFINITE until some terminating path lowers one of its
    members, and the table is final once a pass changes nothing. Costs only
    decrease and each pass settles at least one more nonterminal, so at most
    len(rules) + 1 passes are needed.
    """

    def __init__(self, rules: Mapping[str, Sequence[Expansion]]):
        """
        Initialize cost estimator.

        Args:
            rules: Mapping of nonterminal name to its alternatives
        """
        self.rules = rules
        self._table: Optional[CostTable] = None

    def estimate(self) -> CostTable:
        """Compute the cost of every nonterminal in the grammar."""
        if self._table is not None:
            return self._table

        costs: Dict[str, float] = {name: INFINITE for name in self.rules}
        passes = 0
        changed = True
        while changed:
            changed = False
            passes += 1
            for name, alternatives in self.rules.items():
                cost = 1 + min(
                    (self._expansion_cost(expansion, costs) for expansion in alternatives),
                    default=INFINITE
                )
                if cost < costs[name]:
                    costs[name] = cost
                    changed = True

        table = CostTable(costs)
        unproductive = table.unproductive()
        if unproductive:
            logger.warning(f"Unproductive nonterminals: {', '.join(unproductive)}")
        logger.debug(f"Estimated costs for {len(table)} nonterminals in {passes} passes")
        self._table = table
        return table

    def symbol_cost(self, name: str) -> float:
        return self.estimate()[name]

    @staticmethod
    def _expansion_cost(expansion: Expansion, costs: Mapping[str, float]) -> float:
        return max((costs[nt.name] for nt in expansion.nonterminals), default=0)


def estimate_costs(rules: Mapping[str, Sequence[Expansion]]) -> CostTable:
    """Quick function to build a CostTable for a rules mapping."""
    return CostEstimator(rules).estimate()
