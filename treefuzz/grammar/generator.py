"""
Grammar Generator

Generates strings from grammars by expanding derivation trees.
"""

import random
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .cost import INFINITE
from .errors import EmptyGrammar, GenerationAborted, NonTerminating
from .rules import Grammar
from .tree import DerivationTree, materialize


logger = logging.getLogger("treefuzz.grammar.generator")


class LeafSelection(Enum):
    """Policy for picking the next open leaf to expand"""
    RANDOM = "random"
    LEFTMOST = "leftmost"
    SHALLOWEST = "shallowest"


class Phase(Enum):
    """Expansion phases, entered in this order"""
    GROWTH = "growth"
    EXPLORATION = "exploration"
    CLOSING = "closing"


@dataclass
class GenerationConfig:
    """
    Generation settings.

    rng only needs a random() method returning a uniform float in [0, 1),
    so a seeded random.Random or a fixed sequence can be substituted.
    """
    min_nonterminals: int = 0
    max_nonterminals: int = 10
    rng: random.Random = field(default_factory=random.Random)
    leaf_selection: LeafSelection = LeafSelection.RANDOM
    exploration_budget: Optional[int] = 1000
    max_steps: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.leaf_selection, str):
            self.leaf_selection = LeafSelection(self.leaf_selection)
        if self.min_nonterminals < 0:
            raise ValueError(f"min_nonterminals must be >= 0, got {self.min_nonterminals}")
        if self.max_nonterminals < self.min_nonterminals:
            raise ValueError(
                f"max_nonterminals ({self.max_nonterminals}) must be >= "
                f"min_nonterminals ({self.min_nonterminals})"
            )
        if self.exploration_budget is not None and self.exploration_budget < 0:
            raise ValueError(f"exploration_budget must be >= 0, got {self.exploration_budget}")
        if self.max_steps is not None and self.max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {self.max_steps}")


def weighted_choice(rng, candidates: Sequence[int], weights: Sequence[float]) -> int:
    """
    Pick one of `candidates` with probability proportional to its weight.

    Draws exactly one value from rng.
    """
    total = sum(weights)
    point = rng.random() * total
    cumulative = 0.0
    for candidate, weight in zip(candidates, weights):
        cumulative += weight
        if point < cumulative:
            return candidate
    return candidates[-1]


def batch_rng(seed: Optional[int], index: int) -> Optional[random.Random]:
    """Random source for item `index` of a seeded batch, None when unseeded."""
    if seed is None:
        return None
    return random.Random(seed + index)


class GrammarGenerator:
    """
    Generates strings from a validated grammar.

    Each string is produced by growing a fresh derivation tree from the start
    symbol. Expansion runs in up to three phases:
    - growth: while fewer than min_nonterminals leaves are open, prefer the
      most expensive alternative
    - exploration: while fewer than max_nonterminals leaves are open, pick
      alternatives by weighted random choice
    - closing: pick the cheapest alternative until no open leaves remain

    Growth and exploration also end once exploration_budget steps are spent.
    Growth additionally gives up after len(grammar) consecutive steps that do
    not raise the open count to a new high, so it is bounded even without a
    budget.
    The grammar and its cost table are shared read-only, so one generator can
    serve several threads at once.
    """

    def __init__(self, grammar: Grammar, config: Optional[GenerationConfig] = None):
        """
        Initialize grammar generator.

        Args:
            grammar: Validated grammar
            config: Generation settings (default: GenerationConfig())
        """
        self.grammar = grammar
        self.config = config or GenerationConfig()
        self.logger = logging.getLogger("treefuzz.grammar.generator")

    def generate(self, rng=None) -> str:
        """
        Generate one string.

        Args:
            rng: Random source overriding config.rng for this call

        Returns:
            Generated string
        """
        return materialize(self.expand(rng))

    def expand(self, rng=None) -> DerivationTree:
        """
        Grow a derivation tree from the start symbol until it is closed.

        Raises:
            NonTerminating: an open leaf's nonterminal has no terminating derivation
            EmptyGrammar: the start symbol has no alternatives
            GenerationAborted: config.max_steps was exceeded
        """
        rng = rng if rng is not None else self.config.rng
        start = self.grammar.start
        if not self.grammar.alternatives(start):
            raise EmptyGrammar(f"Start symbol <{start}> has no alternatives", symbol=start)

        tree = DerivationTree(start)
        phase = Phase.GROWTH
        peak = tree.open_count
        stalled = 0

        while not tree.is_complete:
            if self.config.max_steps is not None and tree.steps >= self.config.max_steps:
                raise GenerationAborted(
                    f"Generation exceeded {self.config.max_steps} steps "
                    f"with {tree.open_count} open leaves",
                    steps=tree.steps
                )

            next_phase = self._next_phase(phase, tree, stalled)
            if next_phase is not phase:
                self.logger.debug(
                    f"Entering {next_phase.value} phase after {tree.steps} steps "
                    f"({tree.open_count} open leaves)"
                )
                phase = next_phase

            position = self._select_leaf(tree, rng)
            name = tree.open_leaf(position).name
            index = self._select_alternative(name, phase, rng)
            tree.expand(position, index, self.grammar.alternatives(name)[index])

            if phase is Phase.GROWTH:
                if tree.open_count > peak:
                    peak = tree.open_count
                    stalled = 0
                else:
                    stalled += 1

        self.logger.debug(f"Closed derivation tree in {tree.steps} steps")
        return tree

    def _next_phase(self, phase: Phase, tree: DerivationTree, stalled: int = 0) -> Phase:
        """
        Phase for the next step.

        Args:
            phase: Current phase
            tree: Tree being expanded
            stalled: Growth steps since the open count last reached a new high
        """
        if phase is Phase.CLOSING:
            return phase

        budget = self.config.exploration_budget
        if budget is not None and tree.steps >= budget:
            return Phase.CLOSING

        if phase is Phase.GROWTH:
            if tree.open_count < self.config.min_nonterminals and stalled < len(self.grammar):
                return Phase.GROWTH
            phase = Phase.EXPLORATION

        if tree.open_count < self.config.max_nonterminals:
            return Phase.EXPLORATION
        return Phase.CLOSING

    def _select_leaf(self, tree: DerivationTree, rng) -> int:
        """Position of the next open leaf to expand in the worklist."""
        if tree.open_count == 1:
            return 0
        policy = self.config.leaf_selection
        if policy is LeafSelection.LEFTMOST:
            return 0
        if policy is LeafSelection.SHALLOWEST:
            leaves = tree.open_leaves
            return min(range(len(leaves)), key=lambda i: leaves[i].depth)
        return min(int(rng.random() * tree.open_count), tree.open_count - 1)

    def _select_alternative(self, name: str, phase: Phase, rng) -> int:
        """Index of the alternative to expand `name` with."""
        costs = self.grammar.costs
        if costs[name] == INFINITE:
            raise NonTerminating(f"Nonterminal <{name}> has no terminating derivation", symbol=name)

        alternatives = self.grammar.alternatives(name)

        if phase is Phase.EXPLORATION:
            candidates = list(range(len(alternatives)))
        else:
            expansion_costs = [costs.expansion_cost(e) for e in alternatives]
            finite = [c for c in expansion_costs if c != INFINITE]
            target = max(finite) if phase is Phase.GROWTH else min(finite)
            candidates = [i for i, c in enumerate(expansion_costs) if c == target]

        if len(candidates) == 1:
            return candidates[0]
        return weighted_choice(rng, candidates, [alternatives[i].effective_weight for i in candidates])

    def generate_batch(self, count: int, workers: int = 1, seed: Optional[int] = None) -> List[str]:
        """
        Generate multiple strings.

        Args:
            count: Number of strings to generate
            workers: Number of worker threads
            seed: Base seed; item i uses random.Random(seed + i)

        Returns:
            List of generated strings, in item order
        """
        def generate_one(i: int) -> str:
            return self.generate(batch_rng(seed, i))

        if workers <= 1:
            return [generate_one(i) for i in range(count)]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="treefuzz-gen") as pool:
            return list(pool.map(generate_one, range(count)))

    def get_statistics(self, samples: int = 100, seed: Optional[int] = None, workers: int = 1) -> Dict:
        """
        Get statistics about generated strings.

        Args:
            samples: Number of samples to analyze
            seed: Base seed for the samples
            workers: Number of worker threads

        Returns:
            Dict with statistics
        """
        started = time.perf_counter()
        generated = self.generate_batch(samples, workers=workers, seed=seed)
        return summarize(generated, time.perf_counter() - started)


def summarize(generated: List[str], elapsed: float = 0.0) -> Dict:
    """
    Statistics for a batch of generated strings.

    Args:
        generated: Generated strings
        elapsed: Seconds spent generating them
    """
    samples = len(generated)
    lengths = [len(s) for s in generated]
    unique = len(set(generated))

    return {
        'samples': samples,
        'avg_length': sum(lengths) / len(lengths) if lengths else 0,
        'min_length': min(lengths) if lengths else 0,
        'max_length': max(lengths) if lengths else 0,
        'unique_count': unique,
        'uniqueness_ratio': (unique / samples) * 100 if samples else 0,
        'elapsed_seconds': elapsed,
        'strings_per_second': samples / elapsed if elapsed > 0 else 0.0,
    }


def generate(grammar: Grammar, config: Optional[GenerationConfig] = None) -> str:
    """
    Quick function to generate one string from a grammar.

    Example:
        >>> grammar = build_grammar(rules, "start")
        >>> text = generate(grammar, GenerationConfig(max_nonterminals=5, rng=random.Random(1)))
    """
    return GrammarGenerator(grammar, config).generate()
