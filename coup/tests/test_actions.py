"""
Tests for declaring actions.

Tests:
- Legal action lists
- Validation order and messages
- Costs paid upfront and phases opened
"""

import pytest

from ..engine_core.actions import available_actions, perform_action, validate_action
from ..engine_core.errors import Rejected
from ..engine_core.rules import ActionType, Response, Stage
from ..engine_core.state import CurrentAction
from .conftest import AMBASSADOR, ASSASSIN, CAPTAIN, CONTESSA, DUKE, make_player, make_state


class TestAvailableActions:
    """Tests for the legal action list."""

    def test_poor_player(self, two_humans):
        """A player with 2 coins cannot Assassinate or Coup."""
        actions = available_actions(two_humans, "p1")
        assert ActionType.INCOME in actions
        assert ActionType.STEAL in actions
        assert ActionType.ASSASSINATE not in actions
        assert ActionType.COUP not in actions

    def test_assassinate_affordable_at_three(self):
        """Assassinate is available at 3 coins."""
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN], money=3),
            make_player("p2", [ASSASSIN, CONTESSA]),
        )
        assert ActionType.ASSASSINATE in available_actions(state, "p1")

    def test_must_coup_at_ten(self):
        """Coup is the only action at 10 coins."""
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN], money=10),
            make_player("p2", [ASSASSIN, CONTESSA]),
        )
        assert available_actions(state, "p1") == [ActionType.COUP]

    def test_eliminated_player_has_none(self):
        """An eliminated player has no actions."""
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN]),
            make_player("p2", [ASSASSIN, CONTESSA], revealed=(0, 1)),
        )
        assert available_actions(state, "p2") == []


class TestValidateAction:
    """Tests for validation messages."""

    def test_not_your_turn(self, two_humans):
        """Acting out of turn is rejected."""
        with pytest.raises(Rejected, match="Not your turn."):
            validate_action(two_humans, "p2", ActionType.INCOME, None)

    def test_game_over(self, two_humans):
        """Acting after the game ends is rejected."""
        state = two_humans._copy_with(winner="p1")
        with pytest.raises(Rejected, match="game is over"):
            validate_action(state, "p1", ActionType.INCOME, None)

    def test_pending_phase_blocks_new_action(self, two_humans):
        """A new action waits for the pending one."""
        state = two_humans._copy_with(player_needs_to_reveal="p2")
        with pytest.raises(Rejected, match="still being resolved"):
            validate_action(state, "p1", ActionType.INCOME, None)

    def test_not_enough_money_for_coup(self, two_humans):
        """Coup needs 7 coins."""
        with pytest.raises(Rejected, match=r"Not enough money for Coup \(need 7\)."):
            validate_action(two_humans, "p1", ActionType.COUP, "p2")

    def test_not_enough_money_to_assassinate(self, two_humans):
        """Assassinate needs 3 coins."""
        with pytest.raises(Rejected, match="need 3"):
            validate_action(two_humans, "p1", ActionType.ASSASSINATE, "p2")

    def test_must_coup(self):
        """Any other action is rejected at 10 coins."""
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN], money=10),
            make_player("p2", [ASSASSIN, CONTESSA]),
        )
        with pytest.raises(Rejected, match="Must perform Coup with 10 or more coins."):
            validate_action(state, "p1", ActionType.TAX, None)

    @pytest.mark.parametrize("target, message", [
        (None, "requires a target"),
        ("nobody", "Target player not found"),
        ("p1", "Cannot target self"),
    ])
    def test_bad_targets(self, two_humans, target, message):
        """Missing, unknown and self targets are rejected."""
        with pytest.raises(Rejected, match=message):
            validate_action(two_humans, "p1", ActionType.STEAL, target)

    def test_eliminated_target(self, three_humans):
        """An eliminated player cannot be targeted."""
        state = three_humans.with_player(
            make_player("p3", [AMBASSADOR, DUKE], revealed=(0, 1))
        )
        with pytest.raises(Rejected, match="already eliminated"):
            validate_action(state, "p1", ActionType.STEAL, "p3")


class TestPerformAction:
    """Tests for declaring an action."""

    def test_assassinate_pays_upfront(self, ctx):
        """The Assassinate cost goes to the treasury at once."""
        state = make_state(
            make_player("p1", [ASSASSIN, CAPTAIN], money=3),
            make_player("p2", [DUKE, CONTESSA]),
        )
        treasury = state.treasury
        state = perform_action(state, "p1", ActionType.ASSASSINATE, "p2", ctx)
        assert state.get_player("p1").money == 0
        assert state.treasury == treasury + 3
        assert state.current_action == CurrentAction("p1", ActionType.ASSASSINATE, "p2", cost=3)

    def test_tax_opens_challenge_phase(self, three_humans, ctx):
        """Tax asks every other player to allow or challenge."""
        state = perform_action(three_humans, "p1", ActionType.TAX, None, ctx)
        phase = state.challenge_or_block_phase
        assert phase.stage == Stage.CHALLENGE_ACTION
        assert phase.claimant_id == "p1"
        assert phase.possible_responses == ("p2", "p3")
        assert phase.valid_responses == (Response.ALLOW, Response.CHALLENGE)
        assert state.action_log[-1] == "P1 attempts to Tax (+3 coins)."

    def test_foreign_aid_can_only_be_blocked(self, three_humans, ctx):
        """Foreign Aid can be blocked but not challenged."""
        state = perform_action(three_humans, "p1", ActionType.FOREIGN_AID, None, ctx)
        assert state.challenge_or_block_phase.valid_responses == (
            Response.ALLOW, Response.BLOCK_FOREIGN_AID,
        )

    def test_income_resolves_at_once(self, two_humans, ctx):
        """Income opens no phase."""
        state = perform_action(two_humans, "p1", ActionType.INCOME, None, ctx)
        assert state.get_player("p1").money == 3
        assert state.challenge_or_block_phase is None

    def test_target_dropped_for_untargeted_action(self, three_humans, ctx):
        """A target given with Tax is ignored."""
        state = perform_action(three_humans, "p1", ActionType.TAX, "p2", ctx)
        assert state.current_action.target_id is None

    def test_clears_ai_trigger(self, ctx):
        """Declaring an action clears the AI trigger."""
        state = make_state(
            make_player("ai", [DUKE, CAPTAIN], is_ai=True),
            make_player("p2", [ASSASSIN, CONTESSA]),
            needs_human_trigger_for_ai=True,
        )
        state = perform_action(state, "ai", ActionType.INCOME, None, ctx)
        assert state.needs_human_trigger_for_ai is False
