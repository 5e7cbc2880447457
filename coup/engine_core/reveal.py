"""
Reveal Resolver - Losing influence, elimination and the winner check.

A player who loses a challenge or is hit by a Coup/Assassination reveals one
influence card. AI players and humans with a single card left reveal
immediately; a human with two cards is asked which one to give up, and the
resolution chain parks until they answer.
"""

from __future__ import annotations

import logging

from .context import RuleContext
from .errors import Rejected
from .events import EventKind
from .rules import CardType, least_valuable
from .state import GameState, Resumption


logger = logging.getLogger("coup.engine")


def force_reveal(
    state: GameState,
    player_id: str,
    ctx: RuleContext,
    preferred_type: CardType | None = None,
) -> tuple[GameState, CardType | None]:
    """
    Reveal one of a player's unrevealed cards.

    Picks the first unrevealed card of preferred_type, falling back to the
    first unrevealed card. Never raises: a player with nothing left to
    reveal gets a log entry and None.
    """
    player = state.get_player(player_id)
    if player is None:
        return ctx.log(state, f"Cannot reveal influence: player {player_id} not found.",
                       kind=EventKind.ERROR), None

    candidates = [i for i, c in enumerate(player.influence) if not c.revealed]
    if not candidates:
        return ctx.log(state, f"{player.name} has no more influence to reveal!",
                       kind=EventKind.ERROR, player_id=player_id), None

    index = candidates[0]
    if preferred_type is not None:
        for i in candidates:
            if player.influence[i].card_type == preferred_type:
                index = i
                break

    card = player.influence[index]
    influence = player.influence[:index] + (card.reveal(),) + player.influence[index + 1:]
    player = player.with_influence(influence)

    state = state.with_player(player)._copy_with(last_revealed_player_id=player_id)
    state = ctx.log(state, f"{player.name} revealed a {card.card_type.value}.",
                    kind=EventKind.REVEAL, player_id=player_id)
    if not player.is_active:
        state = ctx.log(state, f"{player.name} has been eliminated!",
                        kind=EventKind.ELIMINATION, player_id=player_id)
    return state, card.card_type


def check_for_winner(state: GameState) -> str | None:
    """
    Return the winner's id, or None while two or more players are active.

    If a single resolution chain leaves nobody standing, the player
    eliminated last wins.
    """
    active = state.active_players
    if len(active) == 1:
        return active[0].id
    if not active:
        return state.last_revealed_player_id
    return None


def declare_winner(state: GameState, winner_id: str, ctx: RuleContext) -> GameState:
    """End the game: set the winner and clear every pending field."""
    winner = state.require_player(winner_id)
    state = state.clear_transient()._copy_with(winner=winner_id, needs_human_trigger_for_ai=False)
    return ctx.log(state, f"{winner.name} has won the game!",
                   kind=EventKind.GAME_OVER, player_id=winner_id)


def settle_winner(state: GameState, ctx: RuleContext) -> GameState:
    """Declare the winner if the game just ended."""
    if state.winner is not None:
        return state
    winner_id = check_for_winner(state)
    if winner_id is None:
        return state
    return declare_winner(state, winner_id, ctx)


def lose_influence(
    state: GameState,
    player_id: str,
    continuation: Resumption | None,
    ctx: RuleContext,
) -> GameState:
    """
    Make a player give up one influence, then resume with continuation.

    The continuation is stored in pending_action_after_reveal; the turn
    advancer runs it once no reveal is outstanding. If the reveal ends the
    game, the continuation is dropped along with every other pending field.
    """
    player = state.require_player(player_id)
    state = state.clear_phases()

    if not player.is_active:
        state = ctx.log(state, f"{player.name} has no influence left to lose.", player_id=player_id)
        return state._copy_with(pending_action_after_reveal=continuation)

    if player.is_ai or player.influence_count == 1:
        preferred = least_valuable(player.unrevealed_types) if player.is_ai else None
        state, _ = force_reveal(state, player_id, ctx, preferred)
        state = settle_winner(state, ctx)
        if state.winner is not None:
            return state
        return state._copy_with(pending_action_after_reveal=continuation)

    state = ctx.log(state, f"{player.name} must choose an influence card to reveal.",
                    player_id=player_id)
    return state._copy_with(
        player_needs_to_reveal=player_id,
        pending_action_after_reveal=continuation,
    )


def complete_forced_reveal(
    state: GameState,
    player_id: str,
    card_type: CardType | None,
    ctx: RuleContext,
) -> tuple[GameState, CardType | None]:
    """
    Answer a pending reveal request.

    A card_type the player does not hold unrevealed falls back to their
    first unrevealed card. The continuation is left in place for the turn
    advancer.
    """
    if state.player_needs_to_reveal is None:
        raise Rejected("No influence reveal is pending.")
    if state.player_needs_to_reveal != player_id:
        player = state.get_player(player_id)
        raise Rejected(f"{player.name if player else player_id} does not need to reveal influence.")

    player = state.require_player(player_id)
    if card_type is not None and card_type not in player.unrevealed_types:
        logger.warning("%s has no unrevealed %s; revealing another card", player.name, card_type.value)
        card_type = None

    state = state._copy_with(player_needs_to_reveal=None)
    state, revealed = force_reveal(state, player_id, ctx, card_type)
    return settle_winner(state, ctx), revealed
