"""
API Module - HTTP interface for game clients.

Exposes the engine via REST API. A client:
1. Creates a game
2. Submits actions and decisions for its human players
3. Triggers AI turns when the game asks for it
4. Ends the game

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    ActionRequest,
    ResponseRequest,
    ChallengeDecisionRequest,
    AssassinationConfirmationRequest,
    ExchangeRequest,
    RevealRequest,
    # Responses
    GameStateResponse,
    RevealResponse,
    ErrorResponse,
    ErrorCode,
    # Shared
    PlayerInfo,
    PendingInfo,
)
from .service import APIService, game_view
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "ActionRequest",
    "ResponseRequest",
    "ChallengeDecisionRequest",
    "AssassinationConfirmationRequest",
    "ExchangeRequest",
    "RevealRequest",
    # Responses
    "GameStateResponse",
    "RevealResponse",
    "ErrorResponse",
    "ErrorCode",
    # Shared
    "PlayerInfo",
    "PendingInfo",
    # Service
    "APIService",
    "game_view",
    "create_app",
]
