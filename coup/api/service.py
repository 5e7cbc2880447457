"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Formats snapshots for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Engine-level rejections are not errors here: they come back as log entries
in the returned game view.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union

from ..engine_core.actions import available_actions
from ..engine_core.state import GameState, Player
from ..session import Session, SessionManager
from .schemas import (
    ActionRequest,
    AssassinationConfirmationRequest,
    ChallengeDecisionRequest,
    CreateGameRequest,
    CurrentActionInfo,
    ErrorCode,
    ErrorResponse,
    ExchangeRequest,
    GameStateResponse,
    GameStatus,
    InfluenceInfo,
    PendingInfo,
    PlayerInfo,
    ResponseRequest,
    RevealRequest,
    RevealResponse,
)


def _not_found(game_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Game {game_id} not found",
        error_code=ErrorCode.GAME_NOT_FOUND,
    )


def _player_info(player: Player, state: GameState, viewer: Optional[str]) -> PlayerInfo:
    # Unrevealed cards stay hidden from everyone but their owner
    hidden = viewer is not None and viewer != player.id
    return PlayerInfo(
        player_id=player.id,
        name=player.name,
        is_ai=player.is_ai,
        money=player.money,
        influence_count=player.influence_count,
        influence=[
            InfluenceInfo(
                card_type=None if hidden and not card.revealed else card.card_type.value,
                revealed=card.revealed,
            )
            for card in player.influence
        ],
        is_active=player.is_active,
        is_current_turn=player.id == state.current_player.id,
    )


def pending_info(state: GameState, viewer: Optional[str] = None) -> Optional[PendingInfo]:
    """Describe the decision the snapshot is waiting on, if any."""
    if state.player_needs_to_reveal is not None:
        return PendingInfo(kind="reveal", waiting_on=[state.player_needs_to_reveal])

    phase = state.challenge_or_block_phase
    if phase is not None:
        return PendingInfo(
            kind="challenge_or_block",
            waiting_on=list(phase.waiting_on),
            claim=phase.claim.value,
            claimant_id=phase.claimant_id,
            target_id=phase.target_id,
            stage=phase.stage.value,
            valid_responses=[r.value for r in phase.valid_responses],
        )

    decision = state.pending_challenge_decision
    if decision is not None:
        return PendingInfo(
            kind="challenge_decision",
            waiting_on=[decision.challenged_player_id],
            claim=decision.claim.value,
            claimant_id=decision.challenged_player_id,
            target_id=decision.original_target_id,
        )

    confirmation = state.pending_assassination_confirmation
    if confirmation is not None:
        return PendingInfo(
            kind="assassination_confirmation",
            waiting_on=[confirmation.assassin_id],
            claim="Block Assassination",
            claimant_id=confirmation.contessa_player_id,
            target_id=confirmation.contessa_player_id,
        )

    exchange = state.pending_exchange
    if exchange is not None:
        owner = state.get_player(exchange.player_id)
        visible = viewer is None or viewer == exchange.player_id
        return PendingInfo(
            kind="exchange",
            waiting_on=[exchange.player_id],
            cards_to_choose=[c.value for c in exchange.cards_to_choose] if visible else [],
            keep_count=owner.influence_count if owner else None,
        )

    return None


def game_status(state: GameState) -> GameStatus:
    if state.winner is not None:
        return GameStatus.GAME_OVER
    if state.needs_human_trigger_for_ai:
        return GameStatus.WAITING_AI
    if state.has_pending_phase:
        return GameStatus.WAITING_RESPONSE
    return GameStatus.YOUR_TURN


def game_view(game_id: str, state: GameState, viewer: Optional[str] = None) -> GameStateResponse:
    """Convert a snapshot into the API view for one viewer."""
    winner = state.get_player(state.winner)
    current = state.current_action
    can_act = (
        viewer == state.current_player.id
        and state.winner is None
        and not state.has_pending_phase
    )
    return GameStateResponse(
        game_id=game_id,
        status=game_status(state),
        players=[_player_info(p, state, viewer) for p in state.players],
        current_player_id=state.current_player.id,
        treasury=state.treasury,
        deck_size=len(state.deck),
        current_action=CurrentActionInfo(
            player_id=current.player_id,
            action=current.action.value,
            target_id=current.target_id,
        ) if current else None,
        pending=pending_info(state, viewer),
        needs_human_trigger_for_ai=state.needs_human_trigger_for_ai,
        winner=_player_info(winner, state, viewer) if winner else None,
        action_log=list(state.action_log),
        available_actions=[a.value for a in available_actions(state, viewer)] if can_act else [],
    )


@dataclass
class APIService:
    """
    Main API service for game clients.

    Usage:
        service = APIService()

        # Deal a game
        game = await service.create_game(request)

        # Play
        game = await service.perform_action(game.game_id, request)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    async def create_game(self, request: CreateGameRequest) -> GameStateResponse:
        """
        Deal a new game.

        Raises ValueError for an unplayable player count.
        """
        session = await self.session_manager.create_session(
            player_names=request.player_names,
            ai_count=request.ai_count,
            personality=request.personality,
            seed=request.seed,
        )
        viewer = session.game_state.players[0].id if request.player_names else None
        return game_view(session.session_id, session.game_state, viewer)

    def get_game(self, game_id: str, viewer: Optional[str] = None) -> Union[GameStateResponse, ErrorResponse]:
        session = self.session_manager.get_session(game_id)
        if session is None:
            return _not_found(game_id)
        return game_view(game_id, session.game_state, viewer)

    def end_game(self, game_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(game_id, reason)

    def list_games(self) -> list[str]:
        return self.session_manager.list_sessions()

    async def _call(
        self,
        game_id: str,
        viewer: Optional[str],
        method: str,
        *args,
    ) -> Union[GameStateResponse, ErrorResponse]:
        session: Optional[Session] = self.session_manager.get_session(game_id)
        if session is None:
            return _not_found(game_id)
        await session.call(method, *args)
        return game_view(game_id, session.game_state, viewer)

    # =========================================================================
    # Player decisions
    # =========================================================================

    async def perform_action(self, game_id: str, request: ActionRequest):
        return await self._call(
            game_id, request.player_id, "perform_action",
            request.player_id, request.action, request.target_id,
        )

    async def respond(self, game_id: str, request: ResponseRequest):
        return await self._call(
            game_id, request.player_id, "handle_player_response",
            request.player_id, request.response,
        )

    async def challenge_decision(self, game_id: str, request: ChallengeDecisionRequest):
        return await self._call(
            game_id, request.player_id, "handle_challenge_decision",
            request.player_id, request.decision,
        )

    async def assassination_confirmation(self, game_id: str, request: AssassinationConfirmationRequest):
        return await self._call(
            game_id, request.player_id, "handle_assassination_confirmation",
            request.player_id, request.decision,
        )

    async def exchange(self, game_id: str, request: ExchangeRequest):
        return await self._call(
            game_id, request.player_id, "handle_exchange_selection",
            request.player_id, request.indices,
        )

    async def reveal(self, game_id: str, request: RevealRequest) -> Union[RevealResponse, ErrorResponse]:
        session = self.session_manager.get_session(game_id)
        if session is None:
            return _not_found(game_id)
        _, card = await session.call("handle_force_reveal", request.player_id, request.card_type)
        return RevealResponse(
            game=game_view(game_id, session.game_state, request.player_id),
            revealed_card=card.value if card else None,
        )

    async def ai_turn(
        self,
        game_id: str,
        viewer: Optional[str] = None,
        until_human: bool = False,
    ) -> Union[GameStateResponse, ErrorResponse]:
        """Play the pending AI turn, or every AI turn until a human must act."""
        session = self.session_manager.get_session(game_id)
        if session is None:
            return _not_found(game_id)
        if until_human:
            await session.run_ai_turns()
        else:
            await session.call("handle_ai_action")
        return game_view(game_id, session.game_state, viewer)
