"""
AI Response Orchestrator - Answers every question the engine puts to AI players.

After each accepted transition the engine hands the new snapshot to
drive(), which resolves pending AI decisions one at a time, in seat order,
until the game waits on a human (or on the next AI turn trigger):
- responses to a live claim (challenge, block or allow)
- Proceed/Retreat when an AI player is challenged
- challenging a Contessa block against an AI assassin
- keeping cards after an AI Exchange

Every oracle call is bounded by a timeout. Failures are logged and replaced
by a conservative default, so a misbehaving oracle can never stall a game.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Awaitable, Callable
import asyncio
import logging

from ..engine_core.actions import available_actions
from ..engine_core.events import EventKind
from ..engine_core.exchange import complete_exchange, preferred_exchange_indices
from ..engine_core.phases import (
    handle_assassination_confirmation,
    handle_challenge_decision,
    handle_player_response,
)
from ..engine_core.reveal import complete_forced_reveal
from ..engine_core.rules import (
    TARGETED_ACTIONS,
    ActionType,
    AssassinationDecision,
    BlockType,
    ChallengeDecision,
    Response,
    cards_proving,
    least_valuable,
)
from ..engine_core.state import GameState, Player
from .policy import (
    ActionDecision,
    BlockDecisionResult,
    ChallengeDecisionResult,
    DecisionOracle,
    build_action_context,
    build_block_context,
    build_challenge_context,
    build_exchange_context,
)

if TYPE_CHECKING:
    from ..engine_core.engine import CoupEngine


logger = logging.getLogger("coup.bots")


class AIOrchestrator:
    """Runs AI decisions through the same transitions humans use."""

    def __init__(self, engine: CoupEngine):
        self.engine = engine

    @property
    def oracle(self) -> DecisionOracle:
        return self.engine.oracle

    @property
    def ctx(self):
        return self.engine.ctx

    async def consult(
        self,
        state: GameState,
        player: Player,
        call: Callable[[Any], Awaitable[Any]],
        context: Any,
        default: Any,
        expected: type | tuple[type, ...] | None = None,
    ) -> tuple[GameState, Any]:
        """
        Ask the oracle one question with a timeout.

        Returns (state, answer); on failure, or when the answer is not an
        instance of expected, the answer is default and the failure is
        written to the action log.
        """
        try:
            answer = await asyncio.wait_for(
                call(context), timeout=self.ctx.config.oracle_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.error("Oracle timed out for %s", player.name)
            state = self.ctx.log(state, f"AI ({player.name}) took too long to decide; using the default.",
                                 kind=EventKind.ERROR, player_id=player.id)
            return state, default
        except Exception as e:
            logger.error("Oracle failed for %s: %s", player.name, e)
            state = self.ctx.log(state, f"AI ({player.name}) could not decide ({e}); using the default.",
                                 kind=EventKind.ERROR, player_id=player.id)
            return state, default
        if answer is None:
            return state, default
        if expected is not None and not isinstance(answer, expected):
            logger.error("Oracle returned %s for %s", type(answer).__name__, player.name)
            state = self.ctx.log(state, f"AI ({player.name}) gave an unusable answer; using the default.",
                                 kind=EventKind.ERROR, player_id=player.id)
            return state, default
        return state, answer

    # ------------------------------------------------------------------
    # Turn actions
    # ------------------------------------------------------------------

    async def decide_action(
        self,
        state: GameState,
        player: Player,
    ) -> tuple[GameState, ActionType, str | None]:
        """
        Ask the oracle for the AI's action and make it legal.

        An unknown or unavailable action falls back to Income (or the only
        legal action); a missing or invalid target is replaced by a random
        active opponent.
        """
        available = available_actions(state, player.id)
        fallback = ActionType.INCOME if ActionType.INCOME in available else available[0]
        context = build_action_context(state, player.id, available, self.ctx.config.copies_per_card)
        state, decision = await self.consult(
            state,
            player,
            self.oracle.select_action,
            context,
            ActionDecision(action=fallback, reasoning="Defaulting to a safe action."),
            ActionDecision,
        )
        try:
            action = ActionType(decision.action)
        except ValueError:
            action = None

        if action not in available:
            state = self.ctx.log(
                state,
                f"AI ({player.name}) chose invalid action '{getattr(decision.action, 'value', decision.action)}'. "
                f"Defaulting to {fallback.value}.",
                kind=EventKind.AI,
                player_id=player.id,
            )
            action = fallback
        elif decision.reasoning:
            state = self.ctx.log(state, f"AI ({player.name}) Reasoning: {decision.reasoning}",
                                 kind=EventKind.AI, player_id=player.id)

        if action not in TARGETED_ACTIONS:
            state = self.ctx.log(state, f"AI ({player.name}) chose action: {action.value}",
                                 kind=EventKind.AI, player_id=player.id)
            return state, action, None

        opponents = state.opponents_of(player.id)
        target = next(
            (o for o in opponents if decision.target in (o.id, o.name)),
            None,
        )
        if target is None:
            if not opponents:
                return state, fallback, None
            target = self.ctx.rng.choice(opponents)
            state = self.ctx.log(
                state,
                f"AI ({player.name}) target '{decision.target}' invalid, "
                f"targeting random opponent {target.name}.",
                kind=EventKind.AI,
                player_id=player.id,
            )
        else:
            state = self.ctx.log(
                state,
                f"AI ({player.name}) chose action: {action.value} targeting {target.name}",
                kind=EventKind.AI,
                player_id=player.id,
            )
        return state, action, target.id

    # ------------------------------------------------------------------
    # Pending decisions
    # ------------------------------------------------------------------

    def _ai(self, state: GameState, player_id: str | None) -> Player | None:
        player = state.get_player(player_id)
        if player is not None and player.is_ai and player.is_active:
            return player
        return None

    async def _respond(self, state: GameState) -> tuple[GameState, bool] | None:
        phase = state.challenge_or_block_phase
        ai = next(
            (p for p in (self._ai(state, pid) for pid in phase.waiting_on) if p is not None),
            None,
        )
        if ai is None:
            return None

        response = Response.ALLOW
        if Response.CHALLENGE in phase.valid_responses:
            context = build_challenge_context(
                state, ai.id, phase.claimant_id, phase.claim, phase.target_id,
                self.ctx.config.copies_per_card,
            )
            state, result = await self.consult(
                state, ai, self.oracle.challenge_reasoning, context,
                ChallengeDecisionResult(False, "Defaulting to Allow."),
                ChallengeDecisionResult,
            )
            state = self.ctx.log(state, f"AI ({ai.name}) Challenge Reasoning: {result.reasoning}",
                                 kind=EventKind.AI, player_id=ai.id)
            if result.should_challenge:
                response = Response.CHALLENGE

        block_response = next((r for r in phase.valid_responses if r.block is not None), None)
        if response == Response.ALLOW and block_response is not None and isinstance(phase.claim, ActionType):
            context = build_block_context(
                state, ai.id, phase.action_player_id or phase.claimant_id, phase.claim, block_response.block
            )
            state, result = await self.consult(
                state, ai, self.oracle.block_reasoning, context,
                BlockDecisionResult(False, "Defaulting to Allow."),
                BlockDecisionResult,
            )
            state = self.ctx.log(state, f"AI ({ai.name}) Block Reasoning: {result.reasoning}",
                                 kind=EventKind.AI, player_id=ai.id)
            if result.should_block:
                response = block_response

        if response not in phase.valid_responses:
            response = Response.ALLOW
        return self.engine.try_apply(state, handle_player_response, ai.id, response)

    async def _decide_challenge(self, state: GameState) -> tuple[GameState, bool] | None:
        pending = state.pending_challenge_decision
        ai = self._ai(state, pending.challenged_player_id)
        if ai is None:
            return None
        can_prove = ai.holds(*cards_proving(pending.claim))
        decision = ChallengeDecision.PROCEED if can_prove else ChallengeDecision.RETREAT
        return self.engine.try_apply(state, handle_challenge_decision, ai.id, decision)

    async def _confirm_assassination(self, state: GameState) -> tuple[GameState, bool] | None:
        pending = state.pending_assassination_confirmation
        ai = self._ai(state, pending.assassin_id)
        if ai is None:
            return None
        context = build_challenge_context(
            state, ai.id, pending.contessa_player_id, BlockType.BLOCK_ASSASSINATION,
            pending.contessa_player_id, self.ctx.config.copies_per_card,
        )
        state, result = await self.consult(
            state, ai, self.oracle.challenge_reasoning, context,
            ChallengeDecisionResult(False, "Defaulting to Accept Block."),
            ChallengeDecisionResult,
        )
        state = self.ctx.log(state, f"AI ({ai.name}) Challenge Reasoning: {result.reasoning}",
                             kind=EventKind.AI, player_id=ai.id)
        decision = (
            AssassinationDecision.CHALLENGE_CONTESSA if result.should_challenge
            else AssassinationDecision.ACCEPT_BLOCK
        )
        return self.engine.try_apply(state, handle_assassination_confirmation, ai.id, decision)

    async def _exchange(self, state: GameState) -> tuple[GameState, bool] | None:
        pending = state.pending_exchange
        ai = self._ai(state, pending.player_id)
        if ai is None:
            return None
        context = build_exchange_context(state, ai.id)
        default = preferred_exchange_indices(pending.cards_to_choose, ai.influence_count)
        state, indices = await self.consult(
            state, ai, self.oracle.choose_exchange, context, default, (list, tuple)
        )

        indices = list(indices)
        valid = (
            len(indices) == ai.influence_count
            and len(set(indices)) == len(indices)
            and all(isinstance(i, int) and 0 <= i < len(pending.cards_to_choose) for i in indices)
        )
        if not valid:
            state = self.ctx.log(state, f"AI ({ai.name}) picked an invalid Exchange selection; keeping its best cards.",
                                 kind=EventKind.ERROR, player_id=ai.id)
            indices = default
        kept = ", ".join(pending.cards_to_choose[i].value for i in indices)
        state = self.ctx.log(state, f"AI ({ai.name}) chooses [{kept}] for Exchange.",
                             kind=EventKind.AI, player_id=ai.id)
        return self.engine.try_apply(state, complete_exchange, ai.id, indices)

    async def _reveal(self, state: GameState) -> tuple[GameState, bool] | None:
        ai = self._ai(state, state.player_needs_to_reveal)
        if ai is None:
            return None

        def reveal(s, player_id, card, ctx):
            s, _ = complete_forced_reveal(s, player_id, card, ctx)
            return s

        return self.engine.try_apply(state, reveal, ai.id, least_valuable(ai.unrevealed_types))

    async def step(self, state: GameState) -> tuple[GameState, bool] | None:
        """
        Resolve the next pending AI decision.

        Returns None when nothing is waiting on an AI, else (state, accepted).
        """
        if state.winner is not None:
            return None
        if state.player_needs_to_reveal is not None:
            return await self._reveal(state)
        if state.challenge_or_block_phase is not None:
            return await self._respond(state)
        if state.pending_challenge_decision is not None:
            return await self._decide_challenge(state)
        if state.pending_assassination_confirmation is not None:
            return await self._confirm_assassination(state)
        if state.pending_exchange is not None:
            return await self._exchange(state)
        return None

    async def drive(self, state: GameState) -> GameState:
        """Resolve AI decisions until the game waits on a human or a trigger."""
        for _ in range(self.ctx.config.max_ai_steps):
            outcome = await self.step(state)
            if outcome is None:
                return state
            state, accepted = outcome
            if not accepted:
                logger.error("AI decision was rejected; stopping")
                return state
        logger.error("AI step limit of %d reached", self.ctx.config.max_ai_steps)
        return self.ctx.log(state, "AI step limit reached; waiting for input.", kind=EventKind.ERROR)
