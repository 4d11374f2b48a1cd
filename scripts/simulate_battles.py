"""Run a batch of simulated battles and print the outcome summary.

Usage:
    python scripts/simulate_battles.py --allies emberpup voltmouse \
        --opponents tidecrab sproutling [--runs N] [--seed S] [--parallel]
"""

from __future__ import annotations

import argparse
import logging
import time

from beastdeck.sim.content.registry import ContentRegistry
from beastdeck.sim.play_agents.heuristic_agent import HeuristicAgent
from beastdeck.sim.play_agents.random_agent import RandomAgent
from beastdeck.sim.runner import BatchRunner
from beastdeck.sim.telemetry import BatchSummary

_AGENTS = {"random": RandomAgent, "heuristic": HeuristicAgent}


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate creature battles headlessly.")
    parser.add_argument("--allies", nargs="+", default=["emberpup", "voltmouse"],
                        help="Creature ids for the ally side, in slot order")
    parser.add_argument("--opponents", nargs="+", default=["tidecrab", "sproutling"],
                        help="Creature ids for the opponent side, in slot order")
    parser.add_argument("--runs", type=int, default=100, help="Number of battles")
    parser.add_argument("--seed", type=int, default=42, help="Base seed")
    parser.add_argument("--ally-agent", choices=sorted(_AGENTS), default="heuristic")
    parser.add_argument("--opponent-agent", choices=sorted(_AGENTS), default="heuristic")
    parser.add_argument("--max-rounds", type=int, default=200)
    parser.add_argument("--parallel", action="store_true", default=False,
                        help="Run battles in a multiprocessing pool")
    parser.add_argument("-v", "--verbose", action="store_true", default=False)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    registry = ContentRegistry.default()
    registry.validate()
    print(f"Loaded {registry!r}")

    runner = BatchRunner(
        registry,
        ally_agent_class=_AGENTS[args.ally_agent],
        opponent_agent_class=_AGENTS[args.opponent_agent],
        max_rounds=args.max_rounds,
    )
    config = {"allies": args.allies, "opponents": args.opponents}

    t0 = time.time()
    results = runner.run_batch(
        args.runs, config, base_seed=args.seed, parallel=args.parallel,
    )
    elapsed = time.time() - t0

    summary = BatchSummary.from_battles(results)
    print(f"\n{' + '.join(args.allies)}  vs  {' + '.join(args.opponents)}")
    print(f"  Time: {elapsed:.1f}s ({elapsed / max(args.runs, 1) * 1000:.0f}ms/battle)")
    print(f"  Win rate: {summary.victories}/{summary.battles} ({summary.win_rate * 100:.1f}%)")
    print(f"  Defeats: {summary.defeats}  Timeouts: {summary.timeouts}")
    print(f"  Avg rounds: {summary.avg_rounds:.1f}")
    print(f"  Avg ally HP left: {summary.avg_ally_hp_end:.1f}")


if __name__ == "__main__":
    main()
