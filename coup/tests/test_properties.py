"""
Whole-game checks over many seeded AI-only games.

After every engine call:
- the snapshot passes validation (at most one pending phase)
- all 25 cards and 50 coins are accounted for
- either the game is over or somebody is expected to act
"""

import random

import pytest

from ..bots.heuristic import HeuristicOracle
from ..bots.personality import AGGRESSIVE
from ..bots.policy import RandomOracle
from ..config import CoupConfig
from ..engine_core.engine import CoupEngine
from ..engine_core.state import card_total, validate_state


def check(state):
    validate_state(state)
    assert len(state.active_phase_fields) <= 1
    assert card_total(state) == 25
    assert state.treasury + sum(p.money for p in state.players) == 50
    assert all(p.money >= 0 for p in state.players)
    assert not any(line.startswith("Error:") for line in state.action_log)
    if state.winner is None:
        assert state.needs_human_trigger_for_ai
        assert state.current_player.is_active
        assert not state.has_pending_phase
    else:
        assert len(state.active_players) <= 1


async def play_out(engine, players, max_turns=500):
    state = await engine.initialize_game([], players)
    check(state)
    for _ in range(max_turns):
        if state.winner is not None:
            break
        state = await engine.handle_ai_action(state)
        check(state)
    return state


@pytest.mark.parametrize("seed", range(12))
def test_random_games_keep_invariants(run, seed):
    """Random games keep cards, coins and phases consistent."""
    players = 2 + seed % 5
    engine = CoupEngine(
        oracle=RandomOracle(seed=seed, challenge_rate=0.4, block_rate=0.4),
        config=CoupConfig(oracle_timeout_seconds=1.0),
        rng=random.Random(seed),
    )
    state = run(play_out(engine, players))
    assert state.winner is not None
    assert state.get_player(state.winner) is not None


@pytest.mark.parametrize("seed", range(4))
def test_heuristic_games_finish(run, seed):
    """Heuristic games reach a winner."""
    engine = CoupEngine(
        oracle=HeuristicOracle(AGGRESSIVE, seed=seed),
        config=CoupConfig(oracle_timeout_seconds=1.0),
        rng=random.Random(100 + seed),
    )
    state = run(play_out(engine, 4))
    assert state.winner is not None
    assert any(line.endswith("has won the game!") for line in state.action_log)


def test_retreat_refund_keeps_coins_conserved(run):
    """Retreat refunds keep coins conserved."""
    engine = CoupEngine(
        oracle=RandomOracle(seed=3, challenge_rate=0.9),
        config=CoupConfig(oracle_timeout_seconds=1.0, refund_cost_on_retreat=True),
        rng=random.Random(3),
    )
    state = run(play_out(engine, 3))
    assert state.treasury + sum(p.money for p in state.players) == 50
