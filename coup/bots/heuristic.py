"""
Heuristic Oracle - A scripted Coup player.

Scores each option on a 0-100 confidence scale and picks the best one,
with a little seeded noise so it is not fully predictable. Strategy:
- Coup when forced, or to finish off an opponent with one influence left
- Prefer claims backed by cards it actually holds
- Never bluff a card whose every copy is already accounted for
- Challenge claims that are visibly impossible, or that look risky for
  the claimant; hold back when losing the challenge would eliminate it
- Block with the right card; bluff blocks only with influence to spare
"""

from __future__ import annotations
import logging
import random

from ..engine_core.rules import ActionType, BlockType, CardType, cards_proving, required_card_for
from .personality import BALANCED, Personality
from .policy import (
    ActionContext,
    ActionDecision,
    BlockContext,
    BlockDecisionResult,
    ChallengeContext,
    ChallengeDecisionResult,
    DecisionOracle,
    OpponentInfo,
)


logger = logging.getLogger("coup.bots")


def game_phase(context: ActionContext) -> str:
    """'start', 'mid' or 'end', judged from what has been revealed so far."""
    active = len(context.opponents) + 1
    if active <= 2:
        return "end"
    if len(context.hand) < 2 or any(o.revealed_cards for o in context.opponents):
        return "mid"
    return "start"


def exhausted(card: CardType, visible: dict[CardType, int], copies_per_card: int) -> bool:
    """Every copy of the card is revealed or in our own hand."""
    return visible.get(card, 0) >= copies_per_card


class HeuristicOracle(DecisionOracle):
    """Rule-based strategy with a configurable personality."""

    def __init__(self, personality: Personality = BALANCED, seed: int | None = None):
        self.personality = personality
        self.rng = random.Random(seed)

    def _noise(self) -> int:
        spread = self.personality.randomness
        return self.rng.randint(-spread, spread) if spread > 0 else 0

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _pick_target(self, context: ActionContext, action: ActionType) -> OpponentInfo | None:
        if not context.opponents:
            return None
        if action == ActionType.STEAL:
            return max(context.opponents, key=lambda o: (o.money, -o.influence_count))
        vulnerable = [o for o in context.opponents if o.influence_count == 1]
        if vulnerable:
            return max(vulnerable, key=lambda o: o.money)
        return max(context.opponents, key=lambda o: (o.money, o.influence_count))

    def _score(self, context: ActionContext, action: ActionType, phase: str) -> tuple[int, str]:
        """Confidence and reasoning for one action."""
        holds = required_card_for(action) in context.hand
        bluff_blocked = (
            required_card_for(action) is not None
            and not holds
            and exhausted(required_card_for(action), context.visible_cards, context.copies_per_card)
        )
        if bluff_blocked:
            return 0, f"Cannot bluff {action.value}: every {required_card_for(action).value} is accounted for."

        aggression = int(self.personality.aggression * 20) - 10
        influence = len(context.hand)

        if action == ActionType.TAX:
            score = 90 if holds else (65 if phase == "start" else 55)
            if context.money < 3:
                score += 10
            return score, f"Tax ({'have Duke' if holds else 'bluffing Duke'})."

        if action == ActionType.STEAL:
            rich = [o for o in context.opponents if o.money > 0]
            if not rich:
                return 0, "No one to steal from."
            score = 85 if holds else (60 if phase == "start" else 50)
            if max(o.money for o in rich) > context.money:
                score += 10
            return score + aggression, f"Steal ({'have Captain' if holds else 'bluffing Captain'})."

        if action == ActionType.EXCHANGE:
            score = 80 if holds else (60 if influence > 1 else 40)
            return score, f"Exchange ({'have Ambassador' if holds else 'bluffing Ambassador'})."

        if action == ActionType.FOREIGN_AID:
            score = 75 if phase == "start" else 50
            if any(CardType.DUKE in o.revealed_cards for o in context.opponents):
                score -= 15
            return score, "Foreign Aid, blockable by a Duke."

        if action == ActionType.INCOME:
            return 40, "Income is the safest option."

        if action == ActionType.COUP:
            vulnerable = any(o.influence_count == 1 for o in context.opponents)
            return (95 if vulnerable else 70) + aggression, "Coup cannot be stopped."

        if action == ActionType.ASSASSINATE:
            vulnerable = any(o.influence_count == 1 for o in context.opponents)
            if vulnerable:
                score = 85 if (phase == "end" or influence > 1) else 70
            else:
                score = 60
            if not holds:
                score -= 10
            return score + aggression, f"Assassinate ({'have Assassin' if holds else 'bluffing Assassin'})."

        return 0, ""

    async def select_action(self, context: ActionContext) -> ActionDecision:
        if not context.available_actions:
            raise ValueError("No legal actions available")

        if context.available_actions == [ActionType.COUP]:
            target = self._pick_target(context, ActionType.COUP)
            return ActionDecision(
                action=ActionType.COUP,
                target=target.player_id if target else None,
                reasoning=f"Must perform Coup with {context.money} coins.",
            )

        phase = game_phase(context)
        best_action, best_score, best_reason = ActionType.INCOME, -1, "Defaulting to Income."
        for action in context.available_actions:
            score, reason = self._score(context, action, phase)
            score = max(0, min(100, score + self._noise()))
            if score > best_score:
                best_action, best_score, best_reason = action, score, reason

        target = self._pick_target(context, best_action)
        logger.debug("%s picks %s (%d): %s", context.player_name, best_action.value, best_score, best_reason)
        return ActionDecision(
            action=best_action,
            target=target.player_id if target else None,
            reasoning=f"{best_reason} Confidence: {best_score}%.",
        )

    # ------------------------------------------------------------------
    # Challenges
    # ------------------------------------------------------------------

    async def challenge_reasoning(self, context: ChallengeContext) -> ChallengeDecisionResult:
        proving = cards_proving(context.claim)
        if not proving:
            return ChallengeDecisionResult(False, "Claim cannot be challenged.")
        if not context.hand:
            return ChallengeDecisionResult(False, "No influence left.")

        if all(exhausted(c, context.visible_cards, context.copies_per_card) for c in proving):
            return ChallengeDecisionResult(
                True,
                f"Every copy of {' and '.join(c.value for c in proving)} is accounted for; "
                f"{context.claimant.name} must be bluffing.",
            )

        if context.claim == ActionType.ASSASSINATE and context.is_target and len(context.hand) == 1:
            return ChallengeDecisionResult(False, "Prioritizing survival; will not challenge the Assassin.")

        claimant = context.claimant
        belief = 60 if context.cost_paid > 0 else 50
        reasons = []

        if len(context.hand) == 1:
            belief += 30
            reasons.append("losing would eliminate me")
        if claimant.influence_count == 1:
            belief -= 20
            reasons.append(f"{claimant.name} has 1 influence")
        if claimant.money >= 7:
            belief += 10
            reasons.append(f"{claimant.name} is close to a Coup")
        if any(c in context.hand for c in proving):
            belief -= 10
            reasons.append("I hold one of the claimed cards myself")

        # Regress toward an even chance: opponents bluff about half the time
        belief = 50 + (belief - 50) // 2
        belief = max(0, min(100, belief + self._noise()))

        should = belief < self.personality.challenge_threshold
        reasons.append(f"belief in the claim {belief}%")
        return ChallengeDecisionResult(should, "; ".join(reasons).capitalize() + ".")

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def block_reasoning(self, context: BlockContext) -> BlockDecisionResult:
        truthful = any(c in context.hand for c in cards_proving(context.block))
        influence = len(context.hand)

        if truthful:
            return BlockDecisionResult(True, f"Can truthfully {context.block.value}.")

        if context.block == BlockType.BLOCK_ASSASSINATION and influence == 1:
            return BlockDecisionResult(False, "Cannot risk a Contessa bluff with one influence.")

        if influence <= 1:
            return BlockDecisionResult(False, "Cannot bluff a block with one influence.")

        if self.rng.random() < self.personality.bluff_rate:
            return BlockDecisionResult(True, f"Bluffing {context.block.value}.")
        return BlockDecisionResult(False, f"Not bluffing {context.block.value}.")
