"""
Game State - The single immutable snapshot threaded through every operation.

Design principles:
- Immutable: frozen dataclasses, tuples for sequences
- Copy-on-write: every change returns a new snapshot via _copy_with
- Self-contained: players and cards are owned by the state holding them
- At most one pending phase is live at a time
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Union

from .errors import InvalidStateError
from .rules import (
    ActionType,
    BlockType,
    CardType,
    Claim,
    Response,
    Stage,
)


@dataclass(frozen=True)
class InfluenceCard:
    """A role card held by a player. Revealed cards are permanently inert."""
    card_type: CardType
    revealed: bool = False

    def reveal(self) -> InfluenceCard:
        return InfluenceCard(card_type=self.card_type, revealed=True)


@dataclass(frozen=True)
class Player:
    """
    A seat at the table.

    Players are never removed: elimination means every influence card
    has been revealed.
    """
    id: str
    name: str
    is_ai: bool = False
    money: int = 2
    influence: tuple[InfluenceCard, ...] = ()

    @property
    def unrevealed(self) -> tuple[InfluenceCard, ...]:
        return tuple(c for c in self.influence if not c.revealed)

    @property
    def unrevealed_types(self) -> tuple[CardType, ...]:
        return tuple(c.card_type for c in self.influence if not c.revealed)

    @property
    def revealed_types(self) -> tuple[CardType, ...]:
        return tuple(c.card_type for c in self.influence if c.revealed)

    @property
    def influence_count(self) -> int:
        return len(self.unrevealed)

    @property
    def is_active(self) -> bool:
        return any(not c.revealed for c in self.influence)

    def holds(self, *cards: CardType) -> bool:
        """Check for an unrevealed copy of any of the given cards."""
        return any(not c.revealed and c.card_type in cards for c in self.influence)

    def with_money(self, money: int) -> Player:
        return replace(self, money=money)

    def with_influence(self, influence: tuple[InfluenceCard, ...]) -> Player:
        return replace(self, influence=influence)


# ============================================================================
# Pending-phase records
# ============================================================================

@dataclass(frozen=True)
class CurrentAction:
    """Provenance of the action declared this turn."""
    player_id: str
    action: ActionType
    target_id: str | None = None
    cost: int = 0


@dataclass(frozen=True)
class ChallengeOrBlockPhase:
    """
    A live claim waiting for responses.

    claimant_id made the claim; for a block claim, that is the blocker.
    target_id is always the target of the original action.
    """
    claimant_id: str
    claim: Claim
    stage: Stage
    possible_responses: tuple[str, ...]
    valid_responses: tuple[Response, ...]
    target_id: str | None = None
    action_player_id: str | None = None
    responses: tuple[tuple[str, Response], ...] = ()

    def has_responded(self, player_id: str) -> bool:
        return any(pid == player_id for pid, _ in self.responses)

    @property
    def waiting_on(self) -> tuple[str, ...]:
        """Eligible responders who have not answered yet, in order."""
        return tuple(p for p in self.possible_responses if not self.has_responded(p))

    @property
    def all_responded(self) -> bool:
        return not self.waiting_on

    def with_response(self, player_id: str, response: Response) -> ChallengeOrBlockPhase:
        return replace(self, responses=self.responses + ((player_id, response),))


@dataclass(frozen=True)
class PendingChallengeDecision:
    """A challenge has been made; the challenged player must Proceed or Retreat."""
    challenged_player_id: str
    challenger_id: str
    claim: Claim
    original_action_player_id: str | None = None
    original_target_id: str | None = None


@dataclass(frozen=True)
class PendingAssassinationConfirmation:
    """The assassin decides whether to challenge a Contessa block."""
    assassin_id: str
    contessa_player_id: str


@dataclass(frozen=True)
class PendingExchange:
    """An Ambassador exchange waiting for the player's selection."""
    player_id: str
    cards_to_choose: tuple[CardType, ...]
    drawn_count: int = 0


# ============================================================================
# Resumption records (what happens once a forced reveal is done)
# ============================================================================

@dataclass(frozen=True)
class ActionProceeds:
    """A challenged action was proven; it now resolves."""
    claimant_id: str
    action: ActionType
    target_id: str | None = None


@dataclass(frozen=True)
class BlockSucceeds:
    """A challenged block was proven; the original action is cancelled."""
    blocker_id: str
    block: BlockType
    original_action_player_id: str


@dataclass(frozen=True)
class BlockFailsActionProceeds:
    """A block was disproved or abandoned; the original action resolves."""
    action_player_id: str
    action: ActionType
    target_id: str | None = None


@dataclass(frozen=True)
class ActionFailsTurnAdvances:
    """A claim was disproved or abandoned; the turn passes."""
    claimant_id: str
    failed_claim: Claim


Resumption = Union[ActionProceeds, BlockSucceeds, BlockFailsActionProceeds, ActionFailsTurnAdvances]


# Fields that must never be live at the same time
EXCLUSIVE_PHASE_FIELDS = (
    "challenge_or_block_phase",
    "pending_challenge_decision",
    "pending_assassination_confirmation",
    "pending_exchange",
    "player_needs_to_reveal",
)


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    The deck's top card is its last element. action_log keeps the most
    recent entries, newest last.
    """
    players: tuple[Player, ...]
    deck: tuple[CardType, ...] = ()
    treasury: int = 0
    current_player_index: int = 0
    action_log: tuple[str, ...] = ()
    winner: str | None = None
    needs_human_trigger_for_ai: bool = False

    current_action: CurrentAction | None = None
    challenge_or_block_phase: ChallengeOrBlockPhase | None = None
    pending_challenge_decision: PendingChallengeDecision | None = None
    pending_assassination_confirmation: PendingAssassinationConfirmation | None = None
    pending_exchange: PendingExchange | None = None
    player_needs_to_reveal: str | None = None
    pending_action_after_reveal: Resumption | None = None

    # Used for the last-eliminated-wins tie-break
    last_revealed_player_id: str | None = field(default=None, compare=False)

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def active_players(self) -> tuple[Player, ...]:
        return tuple(p for p in self.players if p.is_active)

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    @property
    def active_phase_fields(self) -> list[str]:
        """Names of the mutually exclusive phase fields currently set."""
        return [name for name in EXCLUSIVE_PHASE_FIELDS if getattr(self, name) is not None]

    @property
    def has_pending_phase(self) -> bool:
        return bool(self.active_phase_fields) or self.pending_action_after_reveal is not None

    def get_player(self, player_id: str | None) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def require_player(self, player_id: str | None) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise InvalidStateError(f"Player {player_id} not found")
        return player

    def player_index(self, player_id: str) -> int:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        raise InvalidStateError(f"Player {player_id} not found")

    def opponents_of(self, player_id: str) -> tuple[Player, ...]:
        """Active players other than player_id, in seat order."""
        return tuple(p for p in self.players if p.is_active and p.id != player_id)

    def with_player(self, player: Player) -> GameState:
        """Return new state with updated player."""
        new_players = tuple(player if p.id == player.id else p for p in self.players)
        return self._copy_with(players=new_players)

    def clear_phases(self) -> GameState:
        """Close every interaction phase, keeping provenance and continuation."""
        return self._copy_with(**{name: None for name in EXCLUSIVE_PHASE_FIELDS})

    def clear_transient(self) -> GameState:
        """Drop every pending phase and the action provenance."""
        return self._copy_with(
            current_action=None,
            challenge_or_block_phase=None,
            pending_challenge_decision=None,
            pending_assassination_confirmation=None,
            pending_exchange=None,
            player_needs_to_reveal=None,
            pending_action_after_reveal=None,
        )

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def card_total(state: GameState) -> int:
    """
    Cards accounted for in a snapshot.

    Counts every influence card (revealed or not), the deck, and the cards
    drawn into a pending exchange pool, which sit in neither place.
    """
    in_hands = sum(len(p.influence) for p in state.players)
    drawn = state.pending_exchange.drawn_count if state.pending_exchange else 0
    return in_hands + len(state.deck) + drawn


def validate_state(state: GameState) -> GameState:
    """
    Check structural invariants at the API boundary.

    Internal code assumes a snapshot that passed this check.
    Raises InvalidStateError on the first violation.
    """
    if not state.players:
        raise InvalidStateError("Game has no players")

    ids = [p.id for p in state.players]
    if len(set(ids)) != len(ids):
        raise InvalidStateError("Duplicate player ids")

    if not 0 <= state.current_player_index < len(state.players):
        raise InvalidStateError(
            f"current_player_index {state.current_player_index} out of range"
        )

    if state.treasury < 0:
        raise InvalidStateError("Treasury is negative")

    for p in state.players:
        if p.money < 0:
            raise InvalidStateError(f"{p.name} has negative money")
        if len(p.influence) > 2:
            raise InvalidStateError(f"{p.name} holds more than two influence cards")

    referenced: list[str | None] = []
    if state.current_action:
        referenced += [state.current_action.player_id, state.current_action.target_id]
    if state.challenge_or_block_phase:
        phase = state.challenge_or_block_phase
        referenced += [phase.claimant_id, phase.target_id, phase.action_player_id]
        referenced += list(phase.possible_responses)
    if state.pending_challenge_decision:
        decision = state.pending_challenge_decision
        referenced += [decision.challenged_player_id, decision.challenger_id]
    if state.pending_assassination_confirmation:
        confirmation = state.pending_assassination_confirmation
        referenced += [confirmation.assassin_id, confirmation.contessa_player_id]
    if state.pending_exchange:
        referenced.append(state.pending_exchange.player_id)
    if state.player_needs_to_reveal:
        referenced.append(state.player_needs_to_reveal)
    if state.winner:
        referenced.append(state.winner)

    for player_id in referenced:
        if player_id is not None and player_id not in ids:
            raise InvalidStateError(f"Phase data references unknown player {player_id}")

    if len(state.active_phase_fields) > 1:
        raise InvalidStateError(
            f"Multiple pending phases: {', '.join(state.active_phase_fields)}"
        )

    return state
