"""
Tests for AI players inside the engine.

Tests:
- AI turns started through handle_ai_action
- AI answers to claims, challenges, Contessa blocks and exchanges
- Oracle failures, timeouts and unusable answers fall back to defaults
"""

import random

from ..bots.policy import ActionDecision
from ..config import CoupConfig
from ..engine_core.engine import CoupEngine
from ..engine_core.events import EventKind
from ..engine_core.rules import ActionType, AssassinationDecision, ChallengeDecision, Response
from ..engine_core.state import card_total
from .conftest import (
    AMBASSADOR,
    ASSASSIN,
    CAPTAIN,
    CONTESSA,
    DUKE,
    FailingOracle,
    MalformedOracle,
    ScriptedOracle,
    SlowOracle,
    make_player,
    make_state,
)


def human_vs_ai(ai_cards=(ASSASSIN, CONTESSA), human_money=2, ai_money=2, current=0):
    return make_state(
        make_player("p1", [DUKE, CAPTAIN], money=human_money),
        make_player("ai", list(ai_cards), money=ai_money, is_ai=True, name="Bot"),
        current=current,
        needs_human_trigger_for_ai=current == 1,
    )


def engine_with(oracle, **config):
    return CoupEngine(
        oracle=oracle,
        config=CoupConfig(**{"oracle_timeout_seconds": 0.5, **config}),
        rng=random.Random(3),
    )


class TestAITurn:
    """Tests for handle_ai_action."""

    def test_ai_takes_income_and_passes(self, engine, run):
        """An AI turn takes Income and passes back to the human."""
        state = run(engine.handle_ai_action(human_vs_ai(current=1)))
        assert state.get_player("ai").money == 3
        assert state.current_player.id == "p1"
        assert state.needs_human_trigger_for_ai is False
        assert "AI (Bot) chose action: Income" in state.action_log

    def test_human_turn_sets_trigger_for_ai(self, engine, run):
        """Passing the turn to an AI sets the trigger."""
        state = run(engine.perform_action(human_vs_ai(), "p1", ActionType.INCOME))
        assert state.current_player.id == "ai"
        assert state.needs_human_trigger_for_ai is True

    def test_non_ai_player_is_an_error(self, engine, run):
        """Triggering an AI turn for a human is an error."""
        state = run(engine.handle_ai_action(human_vs_ai()))
        assert state.action_log[-1].startswith("Error: handle_ai_action called for non-AI player")

    def test_invalid_action_falls_back_to_income(self, run):
        """An unknown AI action falls back to Income."""
        oracle = ScriptedOracle(actions=[ActionDecision(action="Fly", reasoning="why not")])
        state = run(engine_with(oracle).handle_ai_action(human_vs_ai(current=1)))
        assert "AI (Bot) chose invalid action 'Fly'. Defaulting to Income." in state.action_log
        assert state.get_player("ai").money == 3

    def test_unaffordable_action_falls_back(self, run):
        """An unaffordable AI action falls back to Income."""
        oracle = ScriptedOracle(actions=[ActionDecision(action=ActionType.COUP, target="p1")])
        state = run(engine_with(oracle).handle_ai_action(human_vs_ai(current=1)))
        assert state.get_player("ai").money == 3

    def test_target_by_name(self, run):
        """AI targets can be given by name."""
        oracle = ScriptedOracle(actions=[ActionDecision(action=ActionType.COUP, target="P1")])
        state = run(engine_with(oracle).handle_ai_action(human_vs_ai(current=1, ai_money=7)))
        assert state.player_needs_to_reveal == "p1"
        assert state.get_player("ai").money == 0

    def test_invalid_target_picks_opponent(self, run):
        """An unknown AI target is replaced by an opponent."""
        oracle = ScriptedOracle(actions=[ActionDecision(action=ActionType.COUP, target="ghost")])
        state = run(engine_with(oracle).handle_ai_action(human_vs_ai(current=1, ai_money=7)))
        assert any("target 'ghost' invalid" in line for line in state.action_log)
        assert state.player_needs_to_reveal == "p1"

    def test_forced_coup(self, run):
        """An AI with 10 coins must Coup."""
        oracle = ScriptedOracle()
        state = run(engine_with(oracle).handle_ai_action(human_vs_ai(current=1, ai_money=10)))
        assert state.get_player("ai").money == 3
        assert state.player_needs_to_reveal == "p1"

    def test_finished_game_untouched(self, engine, run):
        """A finished game is returned unchanged."""
        state = human_vs_ai(current=1)._copy_with(winner="ai")
        assert run(engine.handle_ai_action(state)) == state


class TestAIResponses:
    """Tests for AI answers to pending decisions."""

    def test_ai_challenge_loses_to_real_duke(self, run):
        """An AI challenging a real Duke loses a card."""
        oracle = ScriptedOracle(challenges=[True])
        engine = engine_with(oracle)
        state = run(engine.perform_action(human_vs_ai(), "p1", ActionType.TAX))
        assert state.pending_challenge_decision.challenger_id == "ai"

        state = run(engine.handle_challenge_decision(state, "p1", ChallengeDecision.PROCEED))
        ai = state.get_player("ai")
        # The AI gives up its least valuable card
        assert ai.revealed_types == (ASSASSIN,)
        assert state.get_player("p1").money == 5
        assert state.current_player.id == "ai"
        assert state.needs_human_trigger_for_ai is True
        assert card_total(state) == 25

    def test_ai_allows(self, run):
        """An AI that does not challenge lets Tax through."""
        oracle = ScriptedOracle()
        state = run(engine_with(oracle).perform_action(human_vs_ai(), "p1", ActionType.TAX))
        assert state.get_player("p1").money == 5
        assert [kind for kind, _ in oracle.asked] == ["challenge"]

    def test_ai_blocks_foreign_aid(self, run):
        """An AI can block Foreign Aid."""
        oracle = ScriptedOracle(blocks=[True])
        engine = engine_with(oracle)
        state = run(engine.perform_action(human_vs_ai(), "p1", ActionType.FOREIGN_AID))
        phase = state.challenge_or_block_phase
        assert phase.claimant_id == "ai"
        assert phase.waiting_on == ("p1",)

        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))
        assert state.get_player("p1").money == 2
        assert state.current_player.id == "ai"

    def test_challenged_ai_without_card_retreats(self, run):
        """A challenged AI without the card retreats."""
        oracle = ScriptedOracle(actions=[ActionDecision(action=ActionType.TAX)])
        engine = engine_with(oracle)
        state = run(engine.handle_ai_action(human_vs_ai(current=1)))
        assert state.challenge_or_block_phase.waiting_on == ("p1",)

        state = run(engine.handle_player_response(state, "p1", Response.CHALLENGE))
        assert "Bot backs down from the challenge." in state.action_log
        assert state.get_player("ai").money == 2
        assert state.get_player("ai").influence_count == 2
        assert state.current_player.id == "p1"

    def test_challenged_ai_with_card_proceeds(self, run):
        """A challenged AI with the card proves it."""
        oracle = ScriptedOracle(actions=[ActionDecision(action=ActionType.TAX)])
        engine = engine_with(oracle)
        state = run(engine.handle_ai_action(human_vs_ai(ai_cards=(DUKE, CONTESSA), current=1)))
        state = run(engine.handle_player_response(state, "p1", Response.CHALLENGE))
        assert state.player_needs_to_reveal == "p1"

        state, _ = run(engine.handle_force_reveal(state, "p1", CAPTAIN))
        assert state.get_player("ai").money == 5
        assert state.current_player.id == "p1"

    def test_ai_assassin_challenges_contessa(self, run):
        """An AI Assassin can challenge a Contessa block."""
        oracle = ScriptedOracle(
            actions=[ActionDecision(action=ActionType.ASSASSINATE, target="p1")],
            challenges=[True],
        )
        engine = engine_with(oracle)
        state = run(engine.handle_ai_action(human_vs_ai(ai_cards=(ASSASSIN, DUKE), ai_money=3, current=1)))
        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))
        state = run(engine.handle_player_response(state, "p1", Response.BLOCK_ASSASSINATION))

        assert state.pending_challenge_decision.challenged_player_id == "p1"
        assert state.pending_challenge_decision.challenger_id == "ai"

    def test_ai_assassin_accepts_block_on_failure(self, run):
        """A failing oracle accepts a Contessa block."""
        oracle = FailingOracle()
        engine = engine_with(oracle)
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN]),
            make_player("ai", [ASSASSIN, DUKE], money=3, is_ai=True, name="Bot"),
            current=1,
        )
        state = run(engine.perform_action(state, "ai", ActionType.ASSASSINATE, "p1"))
        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))
        state = run(engine.handle_player_response(state, "p1", Response.BLOCK_ASSASSINATION))

        assert state.pending_assassination_confirmation is None
        assert state.get_player("p1").influence_count == 2
        assert state.current_player.id == "p1"

    def test_human_assassin_gets_confirmation(self, run):
        """A human Assassin is asked about a Contessa block."""
        oracle = ScriptedOracle(blocks=[True])
        engine = engine_with(oracle)
        state = human_vs_ai(human_money=3)
        state = run(engine.perform_action(state, "p1", ActionType.ASSASSINATE, "ai"))
        assert state.pending_assassination_confirmation.contessa_player_id == "ai"

        state = run(engine.handle_assassination_confirmation(
            state, "p1", AssassinationDecision.CHALLENGE_CONTESSA
        ))
        # The AI holds Contessa and proves it; the human loses a card
        assert state.player_needs_to_reveal == "p1"

    def test_ai_exchange_invalid_selection(self, run):
        """A bad AI exchange choice keeps its best cards."""
        oracle = ScriptedOracle(
            actions=[ActionDecision(action=ActionType.EXCHANGE)],
            exchanges=[[7, 8]],
        )
        engine = engine_with(oracle)
        state = run(engine.handle_ai_action(human_vs_ai(current=1)))
        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))

        assert any("invalid Exchange selection" in line for line in state.action_log)
        assert state.pending_exchange is None
        assert state.get_player("ai").influence_count == 2
        assert state.current_player.id == "p1"
        assert card_total(state) == 25


class TestOracleFailures:
    """Tests for conservative defaults."""

    def test_failing_oracle_allows(self, run):
        """A failing oracle allows the claim and reports an error."""
        events = []
        engine = CoupEngine(
            oracle=FailingOracle(),
            config=CoupConfig(oracle_timeout_seconds=0.5),
            rng=random.Random(1),
            hooks=[events.append],
        )
        state = run(engine.perform_action(human_vs_ai(), "p1", ActionType.TAX))
        assert state.get_player("p1").money == 5
        assert any(e.kind == EventKind.ERROR for e in events)

    def test_failing_oracle_takes_income(self, run):
        """A failing oracle takes Income on its turn."""
        state = run(engine_with(FailingOracle()).handle_ai_action(human_vs_ai(current=1)))
        assert state.get_player("ai").money == 3
        assert any("could not decide" in line for line in state.action_log)

    def test_slow_oracle_times_out(self, run):
        """A slow oracle times out and takes Income."""
        engine = engine_with(SlowOracle(), oracle_timeout_seconds=0.05)
        state = run(engine.handle_ai_action(human_vs_ai(current=1)))
        assert any("took too long" in line for line in state.action_log)
        assert state.get_player("ai").money == 3

    def test_failing_exchange_keeps_best(self, run):
        """A failing exchange choice keeps the best cards."""
        oracle = FailingOracle()
        engine = engine_with(oracle)
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN]),
            make_player("ai", [AMBASSADOR, CAPTAIN], is_ai=True, name="Bot"),
            current=1,
        )
        state = run(engine.perform_action(state, "ai", ActionType.EXCHANGE))
        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))
        ai = state.get_player("ai")
        # Top of the deck is Contessa, Contessa
        assert ai.unrevealed_types == (CONTESSA, CONTESSA)

    def test_step_limit(self, run):
        """The step limit stops the AI loop and waits."""
        oracle = ScriptedOracle()
        engine = engine_with(oracle, max_ai_steps=0)
        state = run(engine.perform_action(human_vs_ai(), "p1", ActionType.TAX))
        assert state.action_log[-1] == "AI step limit reached; waiting for input."
        assert state.challenge_or_block_phase is not None


class TestUnusableAnswers:
    """Tests for oracle answers of the wrong type."""

    def test_raw_challenge_answer_allows(self, run):
        """A dict answer to a Tax claim is treated as Allow."""
        state = run(engine_with(MalformedOracle()).perform_action(human_vs_ai(), "p1", ActionType.TAX))
        assert state.get_player("p1").money == 5
        assert state.current_player.id == "ai"
        assert "AI (Bot) gave an unusable answer; using the default." in state.action_log
        assert not any(line.startswith("Error:") for line in state.action_log)

    def test_raw_block_answer_allows(self, run):
        """A bare bool answer to Foreign Aid lets the action through."""
        state = run(engine_with(MalformedOracle()).perform_action(human_vs_ai(), "p1", ActionType.FOREIGN_AID))
        assert state.get_player("p1").money == 4
        assert state.challenge_or_block_phase is None
        assert state.current_player.id == "ai"

    def test_raw_action_answer_takes_income(self, run):
        """A dict in place of an ActionDecision falls back to Income."""
        state = run(engine_with(MalformedOracle()).handle_ai_action(human_vs_ai(current=1)))
        assert state.get_player("ai").money == 3
        assert state.current_player.id == "p1"

    def test_raw_confirmation_answer_accepts_block(self, run):
        """A dict answer to a Contessa block accepts the block."""
        engine = engine_with(MalformedOracle())
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN]),
            make_player("ai", [ASSASSIN, DUKE], money=3, is_ai=True, name="Bot"),
            current=1,
        )
        state = run(engine.perform_action(state, "ai", ActionType.ASSASSINATE, "p1"))
        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))
        state = run(engine.handle_player_response(state, "p1", Response.BLOCK_ASSASSINATION))

        assert state.pending_assassination_confirmation is None
        assert state.get_player("p1").influence_count == 2
        assert state.current_player.id == "p1"

    def test_non_iterable_exchange_keeps_best(self, run):
        """An int in place of kept indices keeps the best cards."""
        engine = engine_with(MalformedOracle())
        state = make_state(
            make_player("p1", [DUKE, CAPTAIN]),
            make_player("ai", [AMBASSADOR, CAPTAIN], is_ai=True, name="Bot"),
            current=1,
        )
        state = run(engine.perform_action(state, "ai", ActionType.EXCHANGE))
        state = run(engine.handle_player_response(state, "p1", Response.ALLOW))

        assert state.pending_exchange is None
        assert state.get_player("ai").unrevealed_types == (CONTESSA, CONTESSA)
        assert card_total(state) == 25
