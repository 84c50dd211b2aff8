# treefuzz/main.py
import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from treefuzz.logger import setup_treefuzz_logger
from treefuzz.config import TreefuzzConfig, TreefuzzConfigError
from treefuzz.grammar import (
    BuiltinGrammars, Grammar, GrammarError, GrammarGenerator, LeafSelection,
    build_grammar, load_grammar,
)
from treefuzz.grammar.cost import INFINITE
from treefuzz.grammar.generator import batch_rng, summarize
from treefuzz.grammar.tree import DerivationNode, DerivationTree, materialize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treefuzz",
        description="treefuzz: generate test inputs from context-free grammars"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--grammar", help="Grammar file (.json dictionary grammar, otherwise BNF/EBNF text)")
    source.add_argument("--builtin", help="Name of a built-in grammar (see --list-builtins)")
    parser.add_argument("--list-builtins", action="store_true", help="List built-in grammars and exit")
    parser.add_argument("--start", default=None, help="Start symbol (default: from the grammar)")
    parser.add_argument("-n", "--count", type=int, default=None, help="Number of strings to generate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible output")
    parser.add_argument("--min-nonterminals", type=int, default=None,
                        help="Grow the tree until this many nonterminals are open")
    parser.add_argument("--max-nonterminals", type=int, default=None,
                        help="Start closing the tree once this many nonterminals are open")
    parser.add_argument("--exploration-budget", type=int, default=None,
                        help="Force the closing phase after this many expansion steps")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Abort a generation after this many expansion steps")
    parser.add_argument("--leaf-selection", choices=[p.value for p in LeafSelection], default=None,
                        help="Which open leaf to expand next")
    parser.add_argument("--workers", type=int, default=None, help="Number of generator threads")
    parser.add_argument("--output-dir", default=None,
                        help="Write each string to <dir>/testcase_<n>.txt instead of stdout")
    parser.add_argument("--stats", action="store_true", help="Print generation statistics")
    parser.add_argument("--show-tree", action="store_true", help="Print the derivation tree of each string")
    parser.add_argument("--check", action="store_true", help="Print grammar rules and costs, then exit")
    parser.add_argument("--config", default=None,
                        help="Optional path to an alternate config file (otherwise uses default in ~/.treefuzz/).")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Set the logging level for treefuzz.")
    parser.add_argument("--quiet", action="store_true",
                        help="Minimize console output (overrides log-level to WARNING).")
    parser.add_argument("--no-log-file", action="store_true", help="Do not write the rotating log file")
    return parser


def apply_overrides(cfg: TreefuzzConfig, args: argparse.Namespace, logger: logging.Logger) -> None:
    """Override config values with CLI args that were provided."""
    overrides = {
        "start": args.start,
        "count": args.count,
        "seed": args.seed,
        "min_nonterminals": args.min_nonterminals,
        "max_nonterminals": args.max_nonterminals,
        "exploration_budget": args.exploration_budget,
        "max_steps": args.max_steps,
        "leaf_selection": args.leaf_selection,
        "workers": args.workers,
        "output_dir": args.output_dir,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(cfg, key, value)
            logger.debug(f"Using {key} from CLI: {value}")


def resolve_grammar(args: argparse.Namespace, cfg: TreefuzzConfig) -> Grammar:
    if args.grammar:
        return load_grammar(args.grammar, cfg.start)

    grammar = BuiltinGrammars.load(args.builtin)
    if cfg.start and cfg.start != grammar.start:
        grammar = build_grammar(grammar.rules, cfg.start)
    return grammar


def print_costs(grammar: Grammar, console: Console) -> bool:
    """Print rules with their costs; returns False if the start symbol cannot close."""
    table = Table(title=f"Grammar <{grammar.start}>")
    table.add_column("Nonterminal", style="cyan")
    table.add_column("Cost", justify="right")
    table.add_column("Alternatives")

    for name, alternatives in grammar.rules.items():
        cost = grammar.costs[name]
        cost_text = "[red]inf[/red]" if cost == INFINITE else str(cost)
        body = " | ".join(str(alt) for alt in alternatives)
        table.add_row(escape(f"<{name}>"), cost_text, escape(body))
    console.print(table)

    unreachable = grammar.unreachable()
    if unreachable:
        console.print(f"[yellow]Unreachable:[/yellow] {', '.join(unreachable)}")
    unproductive = grammar.unproductive()
    if unproductive:
        console.print(f"[red]Unproductive:[/red] {', '.join(unproductive)}")
    return grammar.costs.is_finite(grammar.start)


def render_tree(tree: DerivationTree) -> Tree:
    """Build a rich Tree for a derivation tree."""
    root = Tree(_node_label(tree.root))
    stack = [(tree.root, root)]
    while stack:
        node, branch = stack.pop()
        for child in node.children or []:
            stack.append((child, branch.add(_node_label(child))))
    return root


def _node_label(node: DerivationNode) -> str:
    if node.is_terminal:
        return f"[green]{escape(repr(node.symbol.text))}[/green]"
    if node.is_open:
        return f"[red]{escape(str(node.symbol))} (open)[/red]"
    return f"[cyan]{escape(str(node.symbol))}[/cyan] #{node.alternative}"


def write_outputs(strings: List[str], output_dir: Optional[str]) -> None:
    if not output_dir:
        for s in strings:
            sys.stdout.write(s + "\n")
        sys.stdout.flush()
        return

    output_dir = os.path.expanduser(output_dir)
    os.makedirs(output_dir, exist_ok=True)
    for i, s in enumerate(strings, start=1):
        with open(os.path.join(output_dir, f"testcase_{i:05d}.txt"), "w", encoding="utf-8") as f:
            f.write(s)


def print_stats(stats: dict, console: Console) -> None:
    table = Table(title="Generation statistics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Samples", str(stats['samples']))
    table.add_row("Avg length", f"{stats['avg_length']:.1f}")
    table.add_row("Length range", f"{stats['min_length']}-{stats['max_length']}")
    table.add_row("Unique outputs", str(stats['unique_count']))
    table.add_row("Uniqueness", f"{stats['uniqueness_ratio']:.1f}%")
    table.add_row("Elapsed", f"{stats['elapsed_seconds']:.3f}s")
    table.add_row("Strings/sec", f"{stats['strings_per_second']:.1f}")
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    if args.list_builtins:
        for name in BuiltinGrammars.list_grammars():
            print(name)
        return 0

    if not args.grammar and not args.builtin:
        parser.error("one of --grammar or --builtin is required")

    # 1) Load configuration
    try:
        cfg = TreefuzzConfig.load(args.config)
    except TreefuzzConfigError as e:
        setup_treefuzz_logger(logging.ERROR, log_to_file=False).error(f"Failed to load config: {e}")
        return 1

    # 2) Configure logging
    level_name = args.log_level or cfg.log_level
    log_level = logging.getLevelName(str(level_name).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    if args.quiet:
        log_level = logging.WARNING
    logger = setup_treefuzz_logger(
        log_level,
        log_to_file=cfg.log_to_file and not args.no_log_file,
        log_file=cfg.log_file,
    )

    apply_overrides(cfg, args, logger)

    # 3) Load the grammar
    try:
        grammar = resolve_grammar(args, cfg)
    except KeyError as e:
        logger.error(f"{e.args[0] if e.args else e}")
        return 1
    except (OSError, GrammarError) as e:
        logger.error(f"Failed to load grammar: {e}")
        return 1

    if args.check:
        return 0 if print_costs(grammar, console) else 1

    # 4) Generate
    try:
        gen_config = cfg.generation_config()
    except TreefuzzConfigError as e:
        logger.error(str(e))
        return 1

    generator = GrammarGenerator(grammar, gen_config)
    count = int(cfg.count)
    started = time.perf_counter()
    try:
        if args.show_tree:
            strings = []
            for i in range(count):
                tree = generator.expand(batch_rng(cfg.seed, i))
                console.print(render_tree(tree))
                strings.append(materialize(tree))
        else:
            strings = generator.generate_batch(count, workers=int(cfg.workers), seed=cfg.seed)
    except GrammarError as e:
        logger.error(f"Generation failed: {e}")
        return 1
    elapsed = time.perf_counter() - started
    logger.info(f"Generated {len(strings)} strings in {elapsed:.3f}s")

    # 5) Emit
    try:
        write_outputs(strings, cfg.output_dir)
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        return 1

    if args.stats:
        print_stats(summarize(strings, elapsed), console)

    return 0


if __name__ == "__main__":
    sys.exit(main())
