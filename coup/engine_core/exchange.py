"""
Exchange Resolver - The Ambassador's draw-two-keep-some action.
"""

from __future__ import annotations

from .context import RuleContext
from .deck import draw, return_and_reshuffle
from .errors import EmptyDeck, Rejected
from .rules import CARD_PREFERENCE, CardType
from .state import GameState, InfluenceCard, PendingExchange

EXCHANGE_DRAW_COUNT = 2


def start_exchange(state: GameState, player_id: str, ctx: RuleContext) -> GameState:
    """
    Draw up to two cards and open the selection.

    The pool is the player's unrevealed cards followed by the drawn ones.
    An empty deck just means fewer choices.
    """
    player = state.require_player(player_id)
    deck = state.deck
    drawn: list[CardType] = []
    for _ in range(EXCHANGE_DRAW_COUNT):
        try:
            card, deck = draw(deck)
        except EmptyDeck:
            state = ctx.log(state, f"The deck ran out; {player.name} draws only {len(drawn)} card(s).",
                            player_id=player_id)
            break
        drawn.append(card)

    pool = player.unrevealed_types + tuple(drawn)
    state = ctx.log(
        state,
        f"{player.name} draws {len(drawn)} card(s) for Exchange. "
        f"Choices: [{', '.join(c.value for c in pool)}].",
        player_id=player_id,
    )
    return state._copy_with(
        deck=deck,
        pending_exchange=PendingExchange(
            player_id=player_id,
            cards_to_choose=pool,
            drawn_count=len(drawn),
        ),
    )


def complete_exchange(
    state: GameState,
    player_id: str,
    indices: list[int],
    ctx: RuleContext,
) -> GameState:
    """
    Keep the pool cards at the given indices; return the rest to the deck.

    Exactly as many cards as the player has unrevealed must be kept.
    Revealed cards stay where they are.
    """
    pending = state.pending_exchange
    if pending is None:
        raise Rejected("No exchange is pending.")
    if pending.player_id != player_id:
        raise Rejected("It is not your exchange.")

    player = state.require_player(player_id)
    keep_count = player.influence_count
    if len(indices) != keep_count:
        raise Rejected(f"Must select exactly {keep_count} card(s) to keep.")
    if len(set(indices)) != len(indices):
        raise Rejected("Each card can only be kept once.")
    for i in indices:
        if not 0 <= i < len(pending.cards_to_choose):
            raise Rejected(f"Invalid card selected: {i}.")

    kept = [pending.cards_to_choose[i] for i in indices]
    returned = [c for i, c in enumerate(pending.cards_to_choose) if i not in indices]

    slots = iter(kept)
    influence = tuple(
        c if c.revealed else InfluenceCard(card_type=next(slots))
        for c in player.influence
    )
    state = state.with_player(player.with_influence(influence))

    deck = state.deck
    for card in returned:
        deck = return_and_reshuffle(deck, card, ctx.rng)

    state = state._copy_with(deck=deck, pending_exchange=None)
    return ctx.log(state, f"{player.name} completed Exchange, kept {keep_count} influence.",
                   player_id=player_id)


def preferred_exchange_indices(pool: tuple[CardType, ...], keep_count: int) -> list[int]:
    """Indices of the most valuable cards in the pool."""
    ranked = sorted(range(len(pool)), key=lambda i: CARD_PREFERENCE.index(pool[i]))
    return sorted(ranked[:keep_count])
