"""
Resolution - Effects of actions and blocks once nobody can stop them.

Each function takes a snapshot whose interaction phases are over and
applies the outcome. Any follow-up (an exchange selection, a reveal) is
left as a pending field; the turn advancer takes it from there.
"""

from __future__ import annotations

from .context import RuleContext
from .exchange import start_exchange
from .reveal import lose_influence
from .rules import ACTION_GAINS, ActionType, BlockType, Claim, action_for
from .state import GameState


def _collect(state: GameState, player_id: str, amount: int) -> tuple[GameState, int]:
    """Move up to amount coins from the treasury to a player."""
    player = state.require_player(player_id)
    amount = max(0, min(amount, state.treasury))
    state = state.with_player(player.with_money(player.money + amount))
    return state._copy_with(treasury=state.treasury - amount), amount


def execute_action(
    state: GameState,
    player_id: str,
    action: ActionType,
    target_id: str | None,
    ctx: RuleContext,
) -> GameState:
    """Apply the effect of an action that was allowed to happen."""
    state = state.clear_phases()
    player = state.require_player(player_id)
    if not player.is_active:
        return ctx.log(state, f"{player.name} is eliminated; {action.value} has no effect.",
                       player_id=player_id)

    if action in (ActionType.INCOME, ActionType.FOREIGN_AID, ActionType.TAX):
        state, amount = _collect(state, player_id, ACTION_GAINS[action])
        money = state.require_player(player_id).money
        if action == ActionType.INCOME:
            if amount == 0:
                return ctx.log(state, f"{player.name} takes Income, but treasury is empty.",
                               player_id=player_id)
            return ctx.log(state, f"{player.name} takes Income (+1 coin). Now has {money} coins.",
                           player_id=player_id)
        return ctx.log(
            state,
            f"{player.name}'s {action.value} succeeds (+{amount} coins). Now has {money} coins.",
            player_id=player_id,
        )

    if action == ActionType.EXCHANGE:
        return start_exchange(state, player_id, ctx)

    target = state.require_player(target_id)

    if action == ActionType.STEAL:
        amount = min(ACTION_GAINS[ActionType.STEAL], target.money)
        target = target.with_money(target.money - amount)
        player = player.with_money(player.money + amount)
        state = state.with_player(target).with_player(player)
        return ctx.log(
            state,
            f"{player.name} successfully Steals {amount} coins from {target.name}. "
            f"{player.name} now has {player.money}, {target.name} now has {target.money}.",
            player_id=player_id,
        )

    if not target.is_active:
        return ctx.log(state, f"{target.name} is already eliminated; {action.value} has no effect.",
                       player_id=player_id)

    if action == ActionType.ASSASSINATE:
        state = ctx.log(state, f"Assassination against {target.name} succeeds.", player_id=player_id)
    return lose_influence(state, target.id, None, ctx)


def block_succeeds(
    state: GameState,
    blocker_id: str,
    block: BlockType,
    original_action_player_id: str,
    ctx: RuleContext,
) -> GameState:
    """Cancel the blocked action. Costs already paid stay in the treasury."""
    blocker = state.require_player(blocker_id)
    actor = state.require_player(original_action_player_id)
    state = state.clear_phases()
    return ctx.log(
        state,
        f"{blocker.name}'s block is successful. {actor.name}'s {action_for(block).value} is cancelled.",
        player_id=blocker_id,
    )


def action_fails(state: GameState, claimant_id: str, claim: Claim, ctx: RuleContext) -> GameState:
    claimant = state.require_player(claimant_id)
    state = state.clear_phases()
    return ctx.log(state, f"{claimant.name}'s {claim.value} is cancelled.", player_id=claimant_id)
