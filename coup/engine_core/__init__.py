"""
Engine Core - Immutable game state and the rules that transform it.

The engine is the runtime that:
1. Deals a new game
2. Validates and declares actions
3. Runs challenge / block phases
4. Resolves reveals, exchanges and continuations
5. Passes the turn

The async public API lives in coup.engine_core.engine.CoupEngine.
"""

from .state import (
    GameState,
    Player,
    InfluenceCard,
    CurrentAction,
    ChallengeOrBlockPhase,
    PendingChallengeDecision,
    PendingAssassinationConfirmation,
    PendingExchange,
    ActionProceeds,
    BlockSucceeds,
    BlockFailsActionProceeds,
    ActionFailsTurnAdvances,
    card_total,
    validate_state,
)
from .rules import (
    CardType,
    ActionType,
    BlockType,
    Response,
    Stage,
    ChallengeDecision,
    AssassinationDecision,
)
from .errors import CoupError, EmptyDeck, InvalidStateError, OracleError, Rejected
from .events import EventKind, GameEvent

__all__ = [
    "GameState",
    "Player",
    "InfluenceCard",
    "CurrentAction",
    "ChallengeOrBlockPhase",
    "PendingChallengeDecision",
    "PendingAssassinationConfirmation",
    "PendingExchange",
    "ActionProceeds",
    "BlockSucceeds",
    "BlockFailsActionProceeds",
    "ActionFailsTurnAdvances",
    "card_total",
    "validate_state",
    "CardType",
    "ActionType",
    "BlockType",
    "Response",
    "Stage",
    "ChallengeDecision",
    "AssassinationDecision",
    "CoupError",
    "EmptyDeck",
    "InvalidStateError",
    "OracleError",
    "Rejected",
    "EventKind",
    "GameEvent",
]
