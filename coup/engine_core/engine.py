"""
Coup Engine - The public API every host talks to.

Every entry point takes a snapshot and returns a new one; nothing is
mutated and no exception escapes:
- A request that is not legal right now comes back as the unchanged state
  plus a log entry explaining why.
- A broken snapshot or an unexpected failure comes back as the last good
  state with an "Error: ..." entry and its transient phases cleared.

After each accepted transition, pending AI decisions are resolved before
the call returns. An AI player's own turn is only started through
handle_ai_action, which hosts call when needs_human_trigger_for_ai is set.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar
import logging
import random

from ..bots.heuristic import HeuristicOracle
from ..bots.orchestrator import AIOrchestrator
from ..bots.policy import DecisionOracle
from ..config import CoupConfig, DEFAULT_CONFIG
from .actions import available_actions, perform_action
from .context import RuleContext
from .deck import deal
from .errors import Rejected
from .events import EventHook, EventKind
from .exchange import complete_exchange
from .phases import (
    handle_assassination_confirmation,
    handle_challenge_decision,
    handle_player_response,
)
from .reveal import complete_forced_reveal
from .rules import ActionType, AssassinationDecision, CardType, ChallengeDecision, Response
from .state import GameState, InfluenceCard, Player, validate_state
from . import turns


logger = logging.getLogger("coup.engine")

E = TypeVar("E", bound=Enum)

Transition = Callable[..., GameState]

MIN_PLAYERS = 2
MAX_PLAYERS = 6


def _coerce(enum_type: type[E], value: Any) -> E:
    """Accept enum members or their string values from hosts."""
    try:
        return enum_type(value)
    except ValueError:
        raise Rejected(f"Unknown {enum_type.__name__}: {value}") from None


@dataclass
class CoupEngine:
    """
    Async facade over the rule modules.

    Stateless between calls: all game state lives in the snapshots.
    """
    oracle: DecisionOracle = field(default_factory=HeuristicOracle)
    config: CoupConfig = DEFAULT_CONFIG
    rng: random.Random = field(default_factory=random.Random)
    hooks: list[EventHook] = field(default_factory=list)

    def __post_init__(self):
        self.ctx = RuleContext(config=self.config, rng=self.rng, hooks=tuple(self.hooks))
        self.orchestrator = AIOrchestrator(self)

    # ------------------------------------------------------------------
    # Transition plumbing
    # ------------------------------------------------------------------

    def try_apply(self, state: GameState, transition: Transition, *args) -> tuple[GameState, bool]:
        """
        Run one transition and settle the chain it started.

        Returns (new state, accepted). Rejections and failures are turned
        into log entries here.
        """
        try:
            validate_state(state)
            new_state = transition(state, *args, self.ctx)
            return turns.settle(new_state, self.ctx), True
        except Rejected as e:
            return self.ctx.reject(state, str(e)), False
        except Exception as e:
            logger.exception("Transition %s failed", getattr(transition, "__name__", transition))
            return self.ctx.error_state(str(e), state), False

    def apply(self, state: GameState, transition: Transition, *args) -> GameState:
        return self.try_apply(state, transition, *args)[0]

    async def _run(self, state: GameState, transition: Transition, *args) -> GameState:
        state, accepted = self.try_apply(state, transition, *args)
        if not accepted:
            return state
        try:
            return await self.orchestrator.drive(state)
        except Exception as e:
            logger.exception("AI orchestration failed")
            return self.ctx.error_state(str(e), state)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def initialize_game(self, player_names: list[str], ai_count: int) -> GameState:
        """
        Deal a new game for the given humans plus ai_count AI players.

        Raises ValueError for an unplayable player count; there is no
        snapshot to fall back on yet.
        """
        total = len(player_names) + ai_count
        if not MIN_PLAYERS <= total <= MAX_PLAYERS:
            raise ValueError(f"Coup needs {MIN_PLAYERS} to {MAX_PLAYERS} players, got {total}")

        hands, deck = deal(total, self.rng, copies_per_card=self.config.copies_per_card)
        seats = [(f"player-{i}", name, False) for i, name in enumerate(player_names)]
        seats += [(f"ai-{i}", f"AI Player {i + 1}", True) for i in range(ai_count)]
        players = tuple(
            Player(
                id=pid,
                name=name,
                is_ai=is_ai,
                money=self.config.starting_money,
                influence=tuple(InfluenceCard(card) for card in hand),
            )
            for (pid, name, is_ai), hand in zip(seats, hands)
        )

        start = self.rng.randrange(total) if self.config.random_start else 0
        state = GameState(
            players=players,
            deck=deck,
            treasury=self.config.total_coins - self.config.starting_money * total,
            current_player_index=start,
            needs_human_trigger_for_ai=players[start].is_ai,
        )
        state = self.ctx.log(state, "Game started!")
        return self.ctx.log(state, f"--- {players[start].name}'s turn ---",
                            kind=EventKind.TURN, player_id=players[start].id)

    async def perform_action(
        self,
        state: GameState,
        player_id: str,
        action: ActionType | str,
        target_id: str | None = None,
    ) -> GameState:
        def declare(s, pid, a, target, ctx):
            return perform_action(s, pid, _coerce(ActionType, a), target, ctx)
        return await self._run(state, declare, player_id, action, target_id)

    async def handle_player_response(
        self,
        state: GameState,
        player_id: str,
        response: Response | str,
    ) -> GameState:
        def respond(s, pid, r, ctx):
            return handle_player_response(s, pid, _coerce(Response, r), ctx)
        return await self._run(state, respond, player_id, response)

    async def handle_challenge_decision(
        self,
        state: GameState,
        player_id: str,
        decision: ChallengeDecision | str,
    ) -> GameState:
        def decide(s, pid, d, ctx):
            return handle_challenge_decision(s, pid, _coerce(ChallengeDecision, d), ctx)
        return await self._run(state, decide, player_id, decision)

    async def handle_assassination_confirmation(
        self,
        state: GameState,
        player_id: str,
        decision: AssassinationDecision | str,
    ) -> GameState:
        def confirm(s, pid, d, ctx):
            return handle_assassination_confirmation(s, pid, _coerce(AssassinationDecision, d), ctx)
        return await self._run(state, confirm, player_id, decision)

    async def handle_exchange_selection(
        self,
        state: GameState,
        player_id: str,
        indices: list[int],
    ) -> GameState:
        return await self._run(state, complete_exchange, player_id, list(indices))

    async def handle_force_reveal(
        self,
        state: GameState,
        player_id: str,
        card_type: CardType | str | None = None,
    ) -> tuple[GameState, CardType | None]:
        """Reveal the chosen card for a player asked to lose influence."""
        revealed: list[CardType | None] = [None]

        def reveal(s, pid, card, ctx):
            chosen = _coerce(CardType, card) if card is not None else None
            s, revealed[0] = complete_forced_reveal(s, pid, chosen, ctx)
            return s

        new_state = await self._run(state, reveal, player_id, card_type)
        return new_state, revealed[0]

    async def handle_ai_action(self, state: GameState) -> GameState:
        """Play the current AI player's turn."""
        try:
            validate_state(state)
        except Exception as e:
            return self.ctx.error_state(str(e), state)

        if state.winner is not None:
            return state

        player = state.current_player
        if not player.is_ai:
            return self.ctx.error_state(f"handle_ai_action called for non-AI player {player.name}.", state)

        state = state._copy_with(needs_human_trigger_for_ai=False)
        if not player.is_active:
            return await self._run(state, turns.advance_turn)
        if state.has_pending_phase:
            # Only pending AI decisions can be moved along here
            return await self.orchestrator.drive(state)
        if not available_actions(state, player.id):
            return await self._run(state, turns.advance_turn)

        try:
            state, action, target_id = await self.orchestrator.decide_action(state, player)
        except Exception as e:
            logger.exception("AI action selection failed")
            return self.ctx.error_state(str(e), state)
        return await self._run(state, perform_action, player.id, action, target_id)

    async def advance_turn(self, state: GameState) -> GameState:
        return await self._run(state, turns.advance_turn)

    async def process_pending_action_after_reveal(self, state: GameState) -> GameState:
        return await self._run(state, turns.process_pending_action_after_reveal)
