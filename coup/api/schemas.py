"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a game client and the engine.
Requests reuse the engine's enums, so unknown actions, responses or card
names are rejected with 422 before they reach a game.

Error Codes:
- GAME_NOT_FOUND: Game does not exist or has been ended
- VALIDATION_ERROR: Request could not be used to start a game
- INTERNAL_ERROR: Unexpected failure in the host
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.rules import (
    ActionType,
    AssassinationDecision,
    CardType,
    ChallengeDecision,
    Response,
)


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    """Game status values."""
    YOUR_TURN = "your_turn"
    WAITING_RESPONSE = "waiting_response"
    WAITING_AI = "waiting_ai"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to deal a new game."""
    player_names: list[str] = Field(
        default_factory=lambda: ["Player"],
        description="Display names of the human players",
    )
    ai_count: int = Field(1, ge=0, le=5, description="Number of AI opponents")
    personality: str = Field("balanced", description="balanced, aggressive or cautious")
    seed: Optional[int] = Field(None, description="Seed for a reproducible game")


class ActionRequest(BaseModel):
    """Declare an action for the current player."""
    player_id: str
    action: ActionType
    target_id: Optional[str] = None


class ResponseRequest(BaseModel):
    """Respond to a live claim."""
    player_id: str
    response: Response


class ChallengeDecisionRequest(BaseModel):
    """Proceed with or retreat from a challenged claim."""
    player_id: str
    decision: ChallengeDecision


class AssassinationConfirmationRequest(BaseModel):
    """Accept or challenge a Contessa block."""
    player_id: str
    decision: AssassinationDecision


class ExchangeRequest(BaseModel):
    """Indices of the exchange pool to keep."""
    player_id: str
    indices: list[int]


class RevealRequest(BaseModel):
    """Choose the card to reveal after losing influence."""
    player_id: str
    card_type: Optional[CardType] = None


# =============================================================================
# Shared Models
# =============================================================================

class InfluenceInfo(BaseModel):
    """One influence card. Hidden cards have no card_type."""
    card_type: Optional[str] = None
    revealed: bool = False


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    name: str
    is_ai: bool
    money: int
    influence_count: int
    influence: list[InfluenceInfo] = Field(default_factory=list)
    is_active: bool = True
    is_current_turn: bool = False


class PendingInfo(BaseModel):
    """The decision the game is currently waiting on."""
    kind: str = Field(
        ...,
        description=(
            "challenge_or_block, challenge_decision, assassination_confirmation, "
            "exchange or reveal"
        ),
    )
    waiting_on: list[str] = Field(default_factory=list, description="Player IDs expected to act")
    claim: Optional[str] = None
    claimant_id: Optional[str] = None
    target_id: Optional[str] = None
    stage: Optional[str] = None
    valid_responses: list[str] = Field(default_factory=list)
    cards_to_choose: list[str] = Field(default_factory=list)
    keep_count: Optional[int] = None


class CurrentActionInfo(BaseModel):
    """The action declared this turn."""
    player_id: str
    action: str
    target_id: Optional[str] = None


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Full view of a game after the last call."""
    game_id: str
    status: GameStatus
    players: list[PlayerInfo]
    current_player_id: str
    treasury: int
    deck_size: int
    current_action: Optional[CurrentActionInfo] = None
    pending: Optional[PendingInfo] = None
    needs_human_trigger_for_ai: bool = False
    winner: Optional[PlayerInfo] = None
    action_log: list[str] = Field(default_factory=list)
    available_actions: list[str] = Field(
        default_factory=list, description="Legal actions for the viewer, if it is their turn"
    )

    api_version: str = "v1"


class RevealResponse(BaseModel):
    """Response after a forced reveal."""
    game: GameStateResponse
    revealed_card: Optional[str] = None


class GameListResponse(BaseModel):
    """Response listing stored games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response after ending a game."""
    success: bool
    game_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
