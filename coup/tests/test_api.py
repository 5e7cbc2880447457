"""
Tests for API layer.

Tests:
- API service methods
- Per-viewer card hiding
- HTTP endpoints, status codes and error bodies
"""

import pytest
from fastapi.testclient import TestClient

from .. import __version__
from ..api.app import create_app
from ..api.schemas import (
    ActionRequest,
    CreateGameRequest,
    ErrorCode,
    ErrorResponse,
    GameStatus,
    ResponseRequest,
    RevealRequest,
)
from ..api.service import APIService, game_view, pending_info
from ..config import CoupConfig
from ..engine_core.rules import ActionType, Response
from ..engine_core.state import PendingExchange
from ..session import SessionManager
from .conftest import AMBASSADOR, ASSASSIN, CAPTAIN, CONTESSA, DUKE, make_player, make_state


@pytest.fixture
def service():
    """API service whose games start with the first seat."""
    return APIService(SessionManager(CoupConfig(random_start=False)))


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def two_player_request(**kwargs):
    return CreateGameRequest(player_names=["Alice", "Bob"], ai_count=0, seed=5, **kwargs)


class TestAPIService:
    """Tests for APIService."""

    def test_create_game(self, service, run):
        """Can create a game via the service."""
        game = run(service.create_game(two_player_request()))

        assert game.game_id in service.list_games()
        assert game.status == GameStatus.YOUR_TURN
        assert game.current_player_id == "player-0"
        assert game.treasury == 46
        assert game.deck_size == 21
        assert "Income" in game.available_actions
        assert game.action_log[0] == "Game started!"

    def test_get_nonexistent_game(self, service):
        """Getting a nonexistent game returns an error."""
        response = service.get_game("nonexistent-id")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.GAME_NOT_FOUND

    def test_tax_then_allow(self, service, run):
        """Tax waits for a response, then pays out."""
        game = run(service.create_game(two_player_request()))
        game = run(service.perform_action(
            game.game_id, ActionRequest(player_id="player-0", action=ActionType.TAX)
        ))
        assert game.status == GameStatus.WAITING_RESPONSE
        assert game.pending.kind == "challenge_or_block"
        assert game.pending.waiting_on == ["player-1"]
        assert game.pending.valid_responses == ["Allow", "Challenge"]
        assert game.available_actions == []

        game = run(service.respond(
            game.game_id, ResponseRequest(player_id="player-1", response=Response.ALLOW)
        ))
        assert game.players[0].money == 5
        assert game.current_player_id == "player-1"
        assert game.pending is None

    def test_rejection_is_not_an_error(self, service, run):
        """A rejected action comes back as a log entry."""
        game = run(service.create_game(two_player_request()))
        game = run(service.perform_action(
            game.game_id, ActionRequest(player_id="player-1", action=ActionType.INCOME)
        ))
        assert game.action_log[-1] == "Not your turn."
        assert game.players[1].money == 2

    def test_reveal_without_request_is_rejected(self, service, run):
        """Revealing with no request is rejected."""
        game = run(service.create_game(two_player_request()))
        response = run(service.reveal(game.game_id, RevealRequest(player_id="player-1")))
        assert response.revealed_card is None
        assert "No influence reveal" in response.game.action_log[-1]

    def test_actions_on_missing_game(self, service, run):
        """Actions on a missing game return an error."""
        response = run(service.perform_action(
            "missing", ActionRequest(player_id="player-0", action=ActionType.INCOME)
        ))
        assert response.error_code == ErrorCode.GAME_NOT_FOUND

    def test_ai_turn_until_human(self, service, run):
        """AI turns can run until the human is up."""
        game = run(service.create_game(CreateGameRequest(player_names=["Alice"], ai_count=2, seed=1)))
        game = run(service.perform_action(
            game.game_id, ActionRequest(player_id="player-0", action=ActionType.INCOME)
        ))
        if game.status == GameStatus.WAITING_AI:
            game = run(service.ai_turn(game.game_id, "player-0", until_human=True))
        assert not game.needs_human_trigger_for_ai

    def test_end_game(self, service, run):
        """Can end a game."""
        game = run(service.create_game(two_player_request()))
        assert service.end_game(game.game_id)
        assert service.list_games() == []


class TestGameView:
    """Tests for formatting snapshots for a viewer."""

    def test_opponent_cards_hidden(self, two_humans):
        """Opponent cards are hidden from the viewer."""
        view = game_view("g", two_humans, viewer="p1")
        mine, theirs = view.players
        assert [c.card_type for c in mine.influence] == ["Duke", "Captain"]
        assert [c.card_type for c in theirs.influence] == [None, None]
        assert mine.is_current_turn and not theirs.is_current_turn

    def test_revealed_cards_always_shown(self):
        """Revealed cards are shown to everyone."""
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN]),
            make_player("p2", [ASSASSIN, CONTESSA], revealed=(0,)),
        )
        theirs = game_view("g", state, viewer="p1").players[1]
        assert [c.card_type for c in theirs.influence] == ["Assassin", None]
        assert theirs.influence_count == 1

    def test_no_viewer_sees_everything(self, two_humans):
        """With no viewer every card is shown."""
        view = game_view("g", two_humans)
        assert view.players[1].influence[1].card_type == "Contessa"
        assert view.available_actions == []

    def test_exchange_pool_only_for_owner(self, two_humans):
        """Only the exchanging player sees the pool."""
        state = two_humans._copy_with(
            pending_exchange=PendingExchange("p1", (DUKE, CAPTAIN, AMBASSADOR, CONTESSA), drawn_count=2),
            deck=two_humans.deck[:-2],
        )
        assert pending_info(state, "p1").cards_to_choose == ["Duke", "Captain", "Ambassador", "Contessa"]
        assert pending_info(state, "p1").keep_count == 2
        assert pending_info(state, "p2").cards_to_choose == []

    def test_winner(self, two_humans):
        """A finished game reports its winner."""
        view = game_view("g", two_humans._copy_with(winner="p2"), viewer="p1")
        assert view.status == GameStatus.GAME_OVER
        assert view.winner.player_id == "p2"


class TestHTTP:
    """Tests for the FastAPI app."""

    def create(self, client, **body):
        payload = {"player_names": ["Alice", "Bob"], "ai_count": 0, "seed": 5, **body}
        return client.post("/api/v1/games", json=payload)

    def test_create_and_get(self, client):
        """Can create and fetch a game over HTTP."""
        response = self.create(client)
        assert response.status_code == 201
        game_id = response.json()["game_id"]

        response = client.get(f"/api/v1/games/{game_id}", params={"player_id": "player-1"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "your_turn"
        assert body["players"][0]["influence"][0]["card_type"] is None
        assert body["players"][1]["influence"][0]["card_type"] is not None

    def test_unplayable_count(self, client):
        """An unplayable player count returns 400."""
        response = self.create(client, player_names=["Alice"])
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_ai_count_bounds(self, client):
        """An out-of-range AI count returns 422."""
        assert self.create(client, ai_count=9).status_code == 422

    def test_game_not_found(self, client):
        """A missing game returns 404."""
        response = client.get("/api/v1/games/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GAME_NOT_FOUND"

        response = client.post("/api/v1/games/nope/actions", json={"player_id": "p", "action": "Income"})
        assert response.status_code == 404

    def test_unknown_action_is_422(self, client):
        """An unknown action name returns 422."""
        game_id = self.create(client).json()["game_id"]
        response = client.post(
            f"/api/v1/games/{game_id}/actions",
            json={"player_id": "player-0", "action": "Dance"},
        )
        assert response.status_code == 422

    def test_steal_flow(self, client):
        """Steal goes through challenge then block decision."""
        game_id = self.create(client).json()["game_id"]
        response = client.post(
            f"/api/v1/games/{game_id}/actions",
            json={"player_id": "player-0", "action": "Steal", "target_id": "player-1"},
        )
        body = response.json()
        assert body["pending"]["claim"] == "Steal"
        assert body["pending"]["stage"] == "challenge_action"
        assert body["pending"]["valid_responses"] == ["Allow", "Challenge"]

        allow = {"player_id": "player-1", "response": "Allow"}
        body = client.post(f"/api/v1/games/{game_id}/responses", json=allow).json()
        assert body["pending"]["stage"] == "block_decision"
        assert body["pending"]["valid_responses"] == ["Allow", "Block Stealing"]

        body = client.post(f"/api/v1/games/{game_id}/responses", json=allow).json()
        assert [p["money"] for p in body["players"]] == [4, 0]
        assert body["current_player_id"] == "player-1"

    def test_list_and_delete(self, client):
        """Can list and delete games."""
        game_id = self.create(client).json()["game_id"]
        body = client.get("/api/v1/games").json()
        assert body == {"games": [game_id], "count": 1}

        assert client.delete(f"/api/v1/games/{game_id}").json() == {"success": True, "game_id": game_id}
        assert client.delete(f"/api/v1/games/{game_id}").json()["success"] is False

    def test_ai_turn(self, client):
        """Can trigger AI turns over HTTP."""
        game_id = self.create(client, player_names=["Alice"], ai_count=1).json()["game_id"]
        client.post(
            f"/api/v1/games/{game_id}/actions",
            json={"player_id": "player-0", "action": "Income"},
        )
        response = client.post(
            f"/api/v1/games/{game_id}/ai-turn",
            params={"player_id": "player-0", "until_human": "true"},
        )
        assert response.status_code == 200
        assert response.json()["needs_human_trigger_for_ai"] is False

    def test_health(self, client):
        """Health check reports the service and version."""
        body = client.get("/health").json()
        assert body == {"status": "healthy", "service": "coup-engine", "version": __version__}

    def test_root(self, client):
        """The root lists the endpoints."""
        assert client.get("/").json()["health"] == "/health"
