"""
Turn Advancer - Resuming chains and passing the turn.

After every accepted transition the engine calls settle(): if nothing is
waiting on a player any more, a stored continuation is run, and once the
chain is fully resolved the turn passes to the next active player.
"""

from __future__ import annotations

from .context import RuleContext
from .errors import InvalidStateError
from .events import EventKind
from .phases import claim_survived
from .resolution import action_fails, block_succeeds, execute_action
from .reveal import settle_winner
from .state import (
    ActionFailsTurnAdvances,
    ActionProceeds,
    BlockFailsActionProceeds,
    BlockSucceeds,
    GameState,
)


def process_pending_action_after_reveal(state: GameState, ctx: RuleContext) -> GameState:
    """Run the continuation left behind by a resolved reveal."""
    continuation = state.pending_action_after_reveal
    if continuation is None or state.player_needs_to_reveal is not None:
        return state

    state = state._copy_with(pending_action_after_reveal=None)
    state = settle_winner(state, ctx)
    if state.winner is not None:
        return state

    if isinstance(continuation, ActionProceeds):
        state = claim_survived(
            state, continuation.claimant_id, continuation.action, continuation.target_id, ctx
        )
    elif isinstance(continuation, BlockSucceeds):
        state = block_succeeds(
            state,
            continuation.blocker_id,
            continuation.block,
            continuation.original_action_player_id,
            ctx,
        )
    elif isinstance(continuation, BlockFailsActionProceeds):
        actor = state.require_player(continuation.action_player_id)
        state = ctx.log(
            state,
            f"The block fails. {actor.name}'s {continuation.action.value} proceeds.",
            player_id=actor.id,
        )
        state = execute_action(
            state, continuation.action_player_id, continuation.action, continuation.target_id, ctx
        )
    elif isinstance(continuation, ActionFailsTurnAdvances):
        state = action_fails(state, continuation.claimant_id, continuation.failed_claim, ctx)
    else:
        raise InvalidStateError(f"Unknown continuation: {continuation!r}")

    return settle(state, ctx)


def settle(state: GameState, ctx: RuleContext) -> GameState:
    """Advance the turn once the declared action is fully resolved."""
    if state.winner is not None or state.player_needs_to_reveal is not None:
        return state
    if state.pending_action_after_reveal is not None:
        return process_pending_action_after_reveal(state, ctx)
    if state.active_phase_fields:
        return state
    # No action declared yet this turn
    if state.current_action is None:
        return state
    return advance_turn(state, ctx)


def next_active_index(state: GameState) -> int:
    """Seat index of the next active player after the current one."""
    n = len(state.players)
    for step in range(1, 2 * n + 1):
        index = (state.current_player_index + step) % n
        if state.players[index].is_active:
            return index
    raise InvalidStateError("No active player to pass the turn to")


def advance_turn(state: GameState, ctx: RuleContext) -> GameState:
    """
    Pass the turn to the next active player.

    An outstanding reveal blocks the turn; an outstanding continuation runs
    first. Every transient field is cleared before the turn passes.
    """
    if state.player_needs_to_reveal is not None:
        return state
    if state.pending_action_after_reveal is not None:
        return process_pending_action_after_reveal(state, ctx)

    state = settle_winner(state, ctx)
    if state.winner is not None:
        return state

    state = state.clear_transient()
    index = next_active_index(state)
    player = state.players[index]
    state = state._copy_with(
        current_player_index=index,
        needs_human_trigger_for_ai=player.is_ai,
    )
    return ctx.log(state, f"--- {player.name}'s turn ---", kind=EventKind.TURN, player_id=player.id)
