"""Battle simulation runner -- ties the battle session, agents, and telemetry together.

Provides two key classes:

- **CombatSimulator**: Runs a single battle to completion with one agent
  per side.
- **BatchRunner**: Orchestrates many seeded battles (optionally in parallel).
"""

from __future__ import annotations

import logging
import multiprocessing
from typing import Any, TYPE_CHECKING

from beastdeck.sim.battle import Battle
from beastdeck.sim.core.actions import EndTurn
from beastdeck.sim.core.entities import Side
from beastdeck.sim.core.rng import GameRNG
from beastdeck.sim.play_agents.base import PlayAgent
from beastdeck.sim.play_agents.heuristic_agent import HeuristicAgent
from beastdeck.sim.play_agents.random_agent import RandomAgent
from beastdeck.sim.telemetry import BattleTelemetry, collect_battle_telemetry

if TYPE_CHECKING:
    from beastdeck.sim.content.registry import ContentRegistry

logger = logging.getLogger(__name__)

_MAX_ROUNDS = 200

# Caps a single turn so zero-cost draw loops cannot spin forever.
_MAX_ACTIONS_PER_TURN = 50


# =====================================================================
# CombatSimulator
# =====================================================================

class CombatSimulator:
    """Runs a single battle to completion.

    Parameters
    ----------
    registry:
        Content registry shared with the battle session.
    ally_agent, opponent_agent:
        Agents piloting each side.
    max_rounds:
        Rounds after which the battle is abandoned as a ``"timeout"``.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        ally_agent: PlayAgent,
        opponent_agent: PlayAgent,
        max_rounds: int = _MAX_ROUNDS,
    ) -> None:
        self.registry = registry
        self.ally_agent = ally_agent
        self.opponent_agent = opponent_agent
        self.max_rounds = max_rounds

    def run_combat(self, battle: Battle, seed: int = 0) -> BattleTelemetry:
        """Drive *battle* until it ends or the round cap is hit."""
        state = battle.state
        hp_start = {c.id: c.hp for c in state.combatants}

        actions_this_turn = 0
        last_actor: str | None = None

        while not battle.is_over and state.round <= self.max_rounds:
            actor = battle.current_combatant
            if actor is None:
                break
            if actor.id != last_actor:
                last_actor, actions_this_turn = actor.id, 0

            agent = self.ally_agent if actor.side is Side.ALLY else self.opponent_agent
            if actions_this_turn >= _MAX_ACTIONS_PER_TURN:
                logger.warning("%s hit the per-turn action cap; ending turn", actor.id)
                action = EndTurn()
            else:
                action = agent.choose_action(state, actor)

            result = battle.submit(action)
            actions_this_turn += 1
            if not result.accepted:
                logger.warning(
                    "%s proposed a rejected action (%s); ending turn",
                    type(agent).__name__, result.reason,
                )
                battle.submit(EndTurn())
            elif isinstance(action, EndTurn):
                last_actor = None

        if not battle.is_over:
            logger.info("Battle seed=%d hit the round cap (%d)", seed, self.max_rounds)
        return collect_battle_telemetry(state, seed, hp_start)


# =====================================================================
# Batch running
# =====================================================================

def _make_agent(
    agent_class: type[PlayAgent], registry: ContentRegistry, seed: int, label: str
) -> PlayAgent:
    if agent_class is RandomAgent:
        return RandomAgent(registry, rng=GameRNG(seed).fork(label))
    return agent_class(registry)  # type: ignore[call-arg]


def _run_single_battle(
    registry: ContentRegistry,
    seed: int,
    battle_config: dict[str, Any],
    ally_agent_class: type[PlayAgent],
    opponent_agent_class: type[PlayAgent],
    max_rounds: int,
) -> BattleTelemetry:
    """Run one battle with the given seed and configuration."""
    battle = Battle.create(
        registry,
        battle_config.get("allies", ["emberpup"]),
        battle_config.get("opponents", ["tidecrab"]),
        seed=seed,
    )
    simulator = CombatSimulator(
        registry,
        ally_agent=_make_agent(ally_agent_class, registry, seed, "ally_agent"),
        opponent_agent=_make_agent(opponent_agent_class, registry, seed, "opponent_agent"),
        max_rounds=max_rounds,
    )
    return simulator.run_combat(battle, seed=seed)


def _worker_run_single(args: tuple) -> BattleTelemetry:
    """Top-level worker function for multiprocessing (must be picklable)."""
    (
        moves_path, creatures_path, seed, battle_config,
        ally_agent_class, opponent_agent_class, max_rounds,
    ) = args

    from beastdeck.sim.content.registry import ContentRegistry

    registry = ContentRegistry()
    registry.load_moves(moves_path)
    registry.load_creatures(creatures_path)

    return _run_single_battle(
        registry, seed, battle_config,
        ally_agent_class, opponent_agent_class, max_rounds,
    )


class BatchRunner:
    """Runs many seeded battles, optionally in parallel.

    Parameters
    ----------
    registry:
        Content registry for sequential runs.  Parallel workers reload the
        bundled JSON content instead of receiving it.
    ally_agent_class, opponent_agent_class:
        Agent types; each is built fresh per battle from the registry.
    max_rounds:
        Round cap per battle.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        ally_agent_class: type[PlayAgent] = RandomAgent,
        opponent_agent_class: type[PlayAgent] = HeuristicAgent,
        max_rounds: int = _MAX_ROUNDS,
    ) -> None:
        self.registry = registry
        self.ally_agent_class = ally_agent_class
        self.opponent_agent_class = opponent_agent_class
        self.max_rounds = max_rounds

    def run_batch(
        self,
        n_runs: int,
        battle_config: dict[str, Any],
        base_seed: int = 42,
        parallel: bool = False,
    ) -> list[BattleTelemetry]:
        """Run *n_runs* battles with seeds ``base_seed .. base_seed + n_runs - 1``.

        *battle_config* holds ``"allies"`` and ``"opponents"`` lists of
        creature ids.
        """
        seeds = [base_seed + i for i in range(n_runs)]

        if parallel and n_runs > 1:
            return self._run_parallel(seeds, battle_config)
        return self._run_sequential(seeds, battle_config)

    def _run_sequential(
        self,
        seeds: list[int],
        battle_config: dict[str, Any],
    ) -> list[BattleTelemetry]:
        return [
            _run_single_battle(
                self.registry, seed, battle_config,
                self.ally_agent_class, self.opponent_agent_class, self.max_rounds,
            )
            for seed in seeds
        ]

    def _run_parallel(
        self,
        seeds: list[int],
        battle_config: dict[str, Any],
    ) -> list[BattleTelemetry]:
        """Run battles in parallel using multiprocessing.

        Rather than pickling the registry, we pass file paths and reload
        in each worker process.
        """
        from beastdeck.sim.content.registry import (
            _DEFAULT_CREATURES_PATH,
            _DEFAULT_MOVES_PATH,
        )

        work_items = [
            (
                str(_DEFAULT_MOVES_PATH), str(_DEFAULT_CREATURES_PATH), seed,
                battle_config, self.ally_agent_class, self.opponent_agent_class,
                self.max_rounds,
            )
            for seed in seeds
        ]

        n_workers = min(len(seeds), multiprocessing.cpu_count() or 1)

        with multiprocessing.Pool(processes=n_workers) as pool:
            results = pool.map(_worker_run_single, work_items)

        return results
