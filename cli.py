"""Command-line runner: step a Dijkstra run and print its summary."""

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from algorithms import (
    DijkstraConfig,
    DijkstraError,
    StepResult,
    StepwiseDijkstra,
)
from algorithms.dijkstra import RELAXATION_MODES
from algorithms.edge_queue import EDGE_ORDERINGS
from algorithms.frontier import FRONTIERS
from graph import Graph

logger = logging.getLogger("cli")

EXAMPLE_ADJ = """# vertex: target(weight) ...
A: B(1) C(5)
B: C(1)
C:
"""


def _load_graph(args: argparse.Namespace) -> Graph:
    if args.random:
        return Graph.generate_random(
            num_nodes=args.n,
            edge_probability=args.prob,
            seed=args.seed,
        )
    path = Path(args.edges)
    if not path.exists():
        raise DijkstraError(f"edges file not found: {args.edges}")
    return Graph.from_adjacency_list(path.read_text(encoding="utf-8"))


def _print_step(step: StepResult) -> None:
    print(f"[{step.step_number:4d}] {step.kind.value:<18} {step.explanation}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``stepwise-dijkstra`` command."""
    examples = (
        "Examples:\n"
        "  stepwise-dijkstra --edges graph.txt --source A --trace\n"
        "  stepwise-dijkstra --random --n 8 --source 0 --frontier heap\n"
    )
    p = argparse.ArgumentParser(
        prog="stepwise-dijkstra",
        description="Run Dijkstra one micro-step at a time and print the result",
        epilog=examples,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    p.add_argument("--verbose", action="store_true", help="Show full tracebacks")
    p.add_argument(
        "--log-level",
        choices=["debug", "info", "warning"],
        default="warning",
        help="Log verbosity",
    )
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--edges", type=str, help="Path to an adjacency-list file")
    src.add_argument("--random", action="store_true", help="Use a random graph")
    src.add_argument(
        "--example",
        action="store_true",
        help="Print a sample adjacency list to stdout and exit",
    )

    p.add_argument("--n", type=int, default=8, help="Vertices (random mode)")
    p.add_argument("--prob", type=float, default=0.3, help="Edge probability (random mode)")
    p.add_argument("--seed", type=int, default=0, help="Seed for the random graph")
    p.add_argument("--source", type=str, default=None, help="Source vertex id")
    p.add_argument("--target", type=str, default=None, help="Also print the path to this vertex")

    p.add_argument("--edge-order", choices=sorted(EDGE_ORDERINGS), default="by_weight")
    p.add_argument("--frontier", choices=sorted(FRONTIERS), default="scan")
    p.add_argument("--relaxation", choices=list(RELAXATION_MODES), default="guarded")
    p.add_argument("--trace", action="store_true", help="Print every micro-step")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.example:
        sys.stdout.write(EXAMPLE_ADJ)
        return 0

    try:
        graph = _load_graph(args)
        source = args.source if args.source is not None else next(iter(graph.vertices()), None)
        if source is None:
            raise DijkstraError("graph has no vertices")
        config = DijkstraConfig(
            edge_order=args.edge_order,
            frontier=args.frontier,
            relaxation=args.relaxation,
        )
        engine = StepwiseDijkstra(graph, source, config)
        steps = engine.run(on_step=_print_step if args.trace else lambda _step: None)
        logger.info("run finished in %d steps", steps)

        if args.trace:
            print()
        sys.stdout.write(engine.summary())
        if args.target is not None:
            print(f"\npath to {args.target}: {' '.join(map(str, engine.path_to(args.target)))}")
    except DijkstraError as exc:
        if args.verbose:
            traceback.print_exc()
        else:
            print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
