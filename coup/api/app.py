"""
FastAPI Application - REST API for Coup game clients.

Endpoints:
    POST   /api/v1/games                                   Deal a new game
    GET    /api/v1/games                                   List games
    GET    /api/v1/games/{id}                              Get game state
    DELETE /api/v1/games/{id}                              End game
    POST   /api/v1/games/{id}/actions                      Declare an action
    POST   /api/v1/games/{id}/responses                    Allow, challenge or block
    POST   /api/v1/games/{id}/challenge-decision           Proceed or retreat
    POST   /api/v1/games/{id}/assassination-confirmation   Accept or challenge a Contessa block
    POST   /api/v1/games/{id}/exchange                     Keep cards after Exchange
    POST   /api/v1/games/{id}/reveal                       Reveal a card after losing influence
    POST   /api/v1/games/{id}/ai-turn                      Play the pending AI turn

AI Execution Flow:
    1. Pending AI answers (challenges, blocks, exchanges, reveals) are
       resolved inside every call before it returns
    2. When the returned game has needs_human_trigger_for_ai=true,
       the client calls POST /ai-turn (optionally ?until_human=true)

All responses are JSON with explicit Pydantic schemas. A request the rules
do not allow right now is not an HTTP error: the game comes back unchanged
with the reason as the newest action_log entry.
"""

from typing import Annotated, Optional, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService
from .schemas import (
    # Request models
    CreateGameRequest,
    ActionRequest,
    ResponseRequest,
    ChallengeDecisionRequest,
    AssassinationConfirmationRequest,
    ExchangeRequest,
    RevealRequest,
    # Response models
    GameStateResponse,
    RevealResponse,
    GameListResponse,
    EndGameResponse,
    HealthResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
)

# Environment configuration
COUP_ENV = os.getenv("COUP_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger("coup.api")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    is_production = COUP_ENV == "production"
    app = FastAPI(
        title="Coup Engine API",
        description="""
Rules engine for the card game Coup, with AI opponents.

## Turn Flow

1. The current player declares an action with `POST /actions`
2. Other players answer with `POST /responses`
3. A challenged player decides with `POST /challenge-decision`
4. A player who loses influence picks a card with `POST /reveal`
5. When `needs_human_trigger_for_ai` is set, call `POST /ai-turn`

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist or has been ended |
| `VALIDATION_ERROR` | Game could not be created from the request |
        """,
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def respond(result):
        if isinstance(result, ErrorResponse):
            return make_error_response(result.error_code, result.error, status_code=404)
        return result

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse, "description": "Unplayable player count"}},
        tags=["Games"],
        summary="Deal a new game",
    )
    async def create_game(request: CreateGameRequest) -> Union[GameStateResponse, JSONResponse]:
        """
        Deal a new game for the given human players plus AI opponents.

        The view is shown from the first human player's seat.
        """
        try:
            return await api_service.create_game(request)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List games",
    )
    async def list_games() -> GameListResponse:
        games = api_service.list_games()
        return GameListResponse(games=games, count=len(games))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(
        game_id: str,
        player_id: Annotated[Optional[str], Query(description="Hide other players' cards from this viewer")] = None,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Get the current state of a game."""
        return respond(api_service.get_game(game_id, player_id))

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="End a game",
    )
    async def end_game(
        game_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndGameResponse:
        """End a game and release its state."""
        success = api_service.end_game(game_id, reason)
        return EndGameResponse(success=success, game_id=game_id)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/actions",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Declare an action",
    )
    async def perform_action(game_id: str, request: ActionRequest):
        return respond(await api_service.perform_action(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/responses",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Allow, challenge or block a claim",
    )
    async def player_response(game_id: str, request: ResponseRequest):
        return respond(await api_service.respond(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/challenge-decision",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Proceed with or retreat from a challenged claim",
    )
    async def challenge_decision(game_id: str, request: ChallengeDecisionRequest):
        return respond(await api_service.challenge_decision(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/assassination-confirmation",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Accept or challenge a Contessa block",
    )
    async def assassination_confirmation(game_id: str, request: AssassinationConfirmationRequest):
        return respond(await api_service.assassination_confirmation(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/exchange",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Choose the cards to keep after Exchange",
    )
    async def exchange(game_id: str, request: ExchangeRequest):
        return respond(await api_service.exchange(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/reveal",
        response_model=RevealResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Reveal a card after losing influence",
    )
    async def reveal(game_id: str, request: RevealRequest):
        return respond(await api_service.reveal(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/ai-turn",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Play the pending AI turn",
    )
    async def ai_turn(
        game_id: str,
        player_id: Annotated[Optional[str], Query(description="Viewer for the returned state")] = None,
        until_human: Annotated[bool, Query(description="Keep playing AI turns until a human must act")] = False,
    ):
        return respond(await api_service.ai_turn(game_id, player_id, until_human))

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="coup-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Coup Engine API",
            "version": __version__,
            "docs": None if is_production else "/api/docs",
            "health": "/health",
        }

    logger.debug("Coup API created (env=%s)", COUP_ENV)
    return app


# For running directly: uvicorn coup.api.app:app
app = create_app()
