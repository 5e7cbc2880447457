"""
Action Dispatcher - Validates and declares the current player's action.

Validation runs in a fixed order so players always see the most relevant
reason first. Costs are paid upfront; actions that can be answered open a
challenge/block phase, the rest resolve on the spot.
"""

from __future__ import annotations

from .context import RuleContext
from .errors import Rejected
from .phases import open_action_phase
from .resolution import execute_action
from .rules import (
    ACTION_COSTS,
    MUST_COUP_THRESHOLD,
    TARGETED_ACTIONS,
    ActionType,
)
from .state import CurrentAction, GameState


# Actions nobody can answer
UNOPPOSED_ACTIONS = frozenset({ActionType.INCOME, ActionType.COUP})


def available_actions(state: GameState, player_id: str) -> list[ActionType]:
    """
    Actions the player could legally declare right now, ignoring whose turn it is.

    With 10 or more coins and someone to target, Coup is the only option.
    """
    player = state.get_player(player_id)
    if player is None or not player.is_active:
        return []

    has_targets = bool(state.opponents_of(player_id))
    if player.money >= MUST_COUP_THRESHOLD and has_targets:
        return [ActionType.COUP]

    actions = []
    for action in ActionType:
        if action in TARGETED_ACTIONS and not has_targets:
            continue
        if player.money < ACTION_COSTS.get(action, 0):
            continue
        actions.append(action)
    return actions


def validate_action(
    state: GameState,
    player_id: str,
    action: ActionType,
    target_id: str | None,
) -> None:
    """Raise Rejected with the first reason the action is not allowed."""
    if state.winner is not None:
        raise Rejected("The game is over.")

    if state.current_player.id != player_id:
        raise Rejected("Not your turn.")

    if state.has_pending_phase:
        raise Rejected("Another action is still being resolved.")

    player = state.get_player(player_id)
    if player is None or not player.is_active:
        raise Rejected("You have been eliminated.")

    cost = ACTION_COSTS.get(action, 0)
    if player.money < cost:
        if action == ActionType.COUP:
            raise Rejected(f"Not enough money for Coup (need {cost}).")
        raise Rejected(f"Not enough money to {action.value} (need {cost}).")

    if (
        player.money >= MUST_COUP_THRESHOLD
        and action != ActionType.COUP
        and state.opponents_of(player_id)
    ):
        raise Rejected(f"Must perform Coup with {MUST_COUP_THRESHOLD} or more coins.")

    if action in TARGETED_ACTIONS:
        if target_id is None:
            raise Rejected(f"Action {action.value} requires a target.")
        target = state.get_player(target_id)
        if target is None:
            raise Rejected("Target player not found.")
        if target.id == player_id:
            raise Rejected(f"Cannot target self with {action.value}.")
        if not target.is_active:
            raise Rejected(f"Target {target.name} is already eliminated.")


def _announce(state: GameState, action: ActionType, target_id: str | None, ctx: RuleContext) -> GameState:
    player = state.current_player
    target = state.get_player(target_id)
    messages = {
        ActionType.FOREIGN_AID: f"{player.name} attempts Foreign Aid (+2 coins).",
        ActionType.TAX: f"{player.name} attempts to Tax (+3 coins).",
        ActionType.EXCHANGE: f"{player.name} attempts Exchange.",
    }
    if target is not None:
        messages.update({
            ActionType.COUP: f"{player.name} performs a Coup against {target.name} (-7 coins). "
                             f"Now has {player.money} coins.",
            ActionType.ASSASSINATE: f"{player.name} attempts to Assassinate {target.name} (-3 coins). "
                                    f"Now has {player.money} coins.",
            ActionType.STEAL: f"{player.name} attempts to Steal from {target.name}.",
        })
    message = messages.get(action)
    if message is None:
        return state
    return ctx.log(state, message, player_id=player.id)


def perform_action(
    state: GameState,
    player_id: str,
    action: ActionType,
    target_id: str | None,
    ctx: RuleContext,
) -> GameState:
    """Declare an action for the current player."""
    validate_action(state, player_id, action, target_id)
    if action not in TARGETED_ACTIONS:
        target_id = None

    player = state.require_player(player_id)
    cost = ACTION_COSTS.get(action, 0)
    state = state.with_player(player.with_money(player.money - cost))
    state = state._copy_with(
        treasury=state.treasury + cost,
        current_action=CurrentAction(
            player_id=player_id,
            action=action,
            target_id=target_id,
            cost=cost,
        ),
        needs_human_trigger_for_ai=False,
    )

    if action == ActionType.STEAL:
        target = state.require_player(target_id)
        if target.money == 0:
            # Nothing to take; the turn passes without a phase
            return ctx.log(
                state,
                f"{player.name} attempts to Steal from {target.name}, but they have no money.",
                player_id=player_id,
            )

    state = _announce(state, action, target_id, ctx)

    if action in UNOPPOSED_ACTIONS:
        return execute_action(state, player_id, action, target_id, ctx)
    return open_action_phase(state, player_id, action, target_id, ctx)
