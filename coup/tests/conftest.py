"""
Pytest fixtures for Coup tests.
"""

import asyncio
import random
from collections import Counter

import pytest

from ..bots.policy import (
    ActionDecision,
    BlockDecisionResult,
    ChallengeDecisionResult,
    DecisionOracle,
)
from ..config import CoupConfig
from ..engine_core.context import RuleContext
from ..engine_core.deck import build_deck
from ..engine_core.engine import CoupEngine
from ..engine_core.rules import ActionType, CardType
from ..engine_core.state import GameState, InfluenceCard, Player


DUKE = CardType.DUKE
ASSASSIN = CardType.ASSASSIN
CAPTAIN = CardType.CAPTAIN
AMBASSADOR = CardType.AMBASSADOR
CONTESSA = CardType.CONTESSA


def make_player(pid, cards, money=2, is_ai=False, name=None, revealed=()):
    """A player holding cards; indices in revealed are face up."""
    return Player(
        id=pid,
        name=name or pid.upper(),
        is_ai=is_ai,
        money=money,
        influence=tuple(InfluenceCard(c, revealed=i in revealed) for i, c in enumerate(cards)),
    )


def make_state(*players, current=0, deck=None, treasury=None, **kwargs):
    """
    A snapshot that accounts for every card and coin.

    By default the deck holds the rest of the 25-card supply in build order
    and the treasury holds the coins nobody has.
    """
    if deck is None:
        remaining = Counter(build_deck())
        for p in players:
            for c in p.influence:
                remaining[c.card_type] -= 1
        deck = tuple(c for c in CardType for _ in range(remaining[c]))
    if treasury is None:
        treasury = 50 - sum(p.money for p in players)
    return GameState(
        players=tuple(players),
        deck=deck,
        treasury=treasury,
        current_player_index=current,
        **kwargs,
    )


class ScriptedOracle(DecisionOracle):
    """
    Oracle answering from queues, defaulting to Income / no / no.

    Records every context it was asked about.
    """

    def __init__(self, actions=(), challenges=(), blocks=(), exchanges=()):
        self.actions = list(actions)
        self.challenges = list(challenges)
        self.blocks = list(blocks)
        self.exchanges = list(exchanges)
        self.asked = []

    async def select_action(self, context):
        self.asked.append(("action", context))
        if self.actions:
            return self.actions.pop(0)
        return ActionDecision(action=ActionType.INCOME, reasoning="scripted")

    async def challenge_reasoning(self, context):
        self.asked.append(("challenge", context))
        answer = self.challenges.pop(0) if self.challenges else False
        return ChallengeDecisionResult(should_challenge=answer, reasoning="scripted")

    async def block_reasoning(self, context):
        self.asked.append(("block", context))
        answer = self.blocks.pop(0) if self.blocks else False
        return BlockDecisionResult(should_block=answer, reasoning="scripted")

    async def choose_exchange(self, context):
        self.asked.append(("exchange", context))
        if self.exchanges:
            return self.exchanges.pop(0)
        return await super().choose_exchange(context)


class FailingOracle(DecisionOracle):
    """Oracle whose every call raises."""

    async def select_action(self, context):
        raise RuntimeError("model unavailable")

    async def challenge_reasoning(self, context):
        raise RuntimeError("model unavailable")

    async def block_reasoning(self, context):
        raise RuntimeError("model unavailable")

    async def choose_exchange(self, context):
        raise RuntimeError("model unavailable")


class MalformedOracle(DecisionOracle):
    """Oracle answering with raw JSON-like values instead of decision objects."""

    async def select_action(self, context):
        return {"action": "Tax", "reasoning": "raw"}

    async def challenge_reasoning(self, context):
        return {"shouldChallenge": True, "reasoning": "raw"}

    async def block_reasoning(self, context):
        return True

    async def choose_exchange(self, context):
        return 7


class SlowOracle(FailingOracle):
    """Oracle that never answers in time."""

    async def select_action(self, context):
        await asyncio.sleep(10)

    async def challenge_reasoning(self, context):
        await asyncio.sleep(10)


@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def ctx() -> RuleContext:
    """Rule context with a seeded random source."""
    return RuleContext(rng=random.Random(7))


@pytest.fixture
def events():
    """List collecting every published GameEvent."""
    return []


@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()


@pytest.fixture
def engine(oracle, events) -> CoupEngine:
    """Engine with a scripted oracle, seeded rng and an event recorder."""
    return CoupEngine(
        oracle=oracle,
        config=CoupConfig(oracle_timeout_seconds=0.5),
        rng=random.Random(11),
        hooks=[events.append],
    )


@pytest.fixture
def two_humans() -> GameState:
    """P1 (Duke, Captain) to play against P2 (Assassin, Contessa)."""
    return make_state(
        make_player("p1", [DUKE, CAPTAIN]),
        make_player("p2", [ASSASSIN, CONTESSA]),
    )


@pytest.fixture
def three_humans() -> GameState:
    return make_state(
        make_player("p1", [DUKE, CAPTAIN]),
        make_player("p2", [ASSASSIN, CONTESSA]),
        make_player("p3", [AMBASSADOR, DUKE]),
    )
