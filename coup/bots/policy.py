"""
Decision Oracle - Interface for AI decision-making.

An oracle answers the questions the engine asks an AI player:
- Which action to take on its turn
- Whether to challenge a claim
- Whether to block an action
- Which cards to keep after an Exchange

Oracles are async: a remote model may take a while to answer. They only
ever see what the AI player could see at the table, packed into the
context objects below.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
import random

from ..engine_core.exchange import preferred_exchange_indices
from ..engine_core.rules import ActionType, BlockType, CardType, Claim
from ..engine_core.state import GameState


# ============================================================================
# What the AI can see
# ============================================================================

@dataclass
class OpponentInfo:
    """Public information about another active player."""
    player_id: str
    name: str
    money: int
    influence_count: int
    revealed_cards: list[CardType] = field(default_factory=list)


@dataclass
class ActionContext:
    """Everything needed to pick an action for the AI's turn."""
    player_id: str
    player_name: str
    money: int
    hand: list[CardType]
    opponents: list[OpponentInfo]
    available_actions: list[ActionType]
    game_state: str = ""
    visible_cards: dict[CardType, int] = field(default_factory=dict)
    copies_per_card: int = 5


@dataclass
class ChallengeContext:
    """A claim the AI may challenge."""
    player_id: str
    player_name: str
    hand: list[CardType]
    claim: Claim
    claimant: OpponentInfo
    target_name: str | None = None
    is_target: bool = False
    cost_paid: int = 0
    game_state: str = ""
    visible_cards: dict[CardType, int] = field(default_factory=dict)
    copies_per_card: int = 5


@dataclass
class BlockContext:
    """An action the AI may block."""
    player_id: str
    player_name: str
    hand: list[CardType]
    money: int
    action: ActionType
    block: BlockType
    actor: OpponentInfo
    game_state: str = ""


@dataclass
class ExchangeContext:
    """An Exchange pool the AI keeps cards from."""
    player_id: str
    player_name: str
    pool: list[CardType]
    keep_count: int
    game_state: str = ""


# ============================================================================
# Answers
# ============================================================================

@dataclass
class ActionDecision:
    """
    The action an oracle picked.

    action may be a raw string from a remote model; target may be a player
    name or id. The engine validates both and falls back when they are
    unusable.
    """
    action: ActionType | str
    target: str | None = None
    reasoning: str = ""


@dataclass
class ChallengeDecisionResult:
    should_challenge: bool
    reasoning: str = ""


@dataclass
class BlockDecisionResult:
    should_block: bool
    reasoning: str = ""


class DecisionOracle(ABC):
    """
    Abstract base class for AI decision makers.

    Implementations can range from scripted heuristics to remote language
    models. Any exception raised here is caught by the engine, which then
    falls back to a conservative default.
    """

    @abstractmethod
    async def select_action(self, context: ActionContext) -> ActionDecision:
        """Pick the action for the AI's turn."""

    @abstractmethod
    async def challenge_reasoning(self, context: ChallengeContext) -> ChallengeDecisionResult:
        """Decide whether to challenge a claim."""

    @abstractmethod
    async def block_reasoning(self, context: BlockContext) -> BlockDecisionResult:
        """Decide whether to block an action."""

    async def choose_exchange(self, context: ExchangeContext) -> list[int]:
        """Indices of the pool cards to keep. Keeps the strongest cards by default."""
        return preferred_exchange_indices(tuple(context.pool), context.keep_count)

    def get_name(self) -> str:
        """Get the oracle's name/identifier."""
        return self.__class__.__name__


class RandomOracle(DecisionOracle):
    """
    Random oracle - picks uniformly among the legal options.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None, challenge_rate: float = 0.2, block_rate: float = 0.3):
        self.rng = random.Random(seed)
        self.challenge_rate = challenge_rate
        self.block_rate = block_rate

    async def select_action(self, context: ActionContext) -> ActionDecision:
        if not context.available_actions:
            raise ValueError("No legal actions available")
        action = self.rng.choice(context.available_actions)
        target = self.rng.choice(context.opponents).player_id if context.opponents else None
        return ActionDecision(action=action, target=target, reasoning="Selected randomly")

    async def challenge_reasoning(self, context: ChallengeContext) -> ChallengeDecisionResult:
        return ChallengeDecisionResult(
            should_challenge=self.rng.random() < self.challenge_rate,
            reasoning="Decided randomly",
        )

    async def block_reasoning(self, context: BlockContext) -> BlockDecisionResult:
        return BlockDecisionResult(
            should_block=self.rng.random() < self.block_rate,
            reasoning="Decided randomly",
        )

    async def choose_exchange(self, context: ExchangeContext) -> list[int]:
        return sorted(self.rng.sample(range(len(context.pool)), context.keep_count))


class AllowAllOracle(DecisionOracle):
    """
    Passive oracle - takes Income and never challenges or blocks.

    Used for deterministic tests.
    """

    async def select_action(self, context: ActionContext) -> ActionDecision:
        action = ActionType.INCOME if ActionType.INCOME in context.available_actions else context.available_actions[0]
        target = context.opponents[0].player_id if context.opponents else None
        return ActionDecision(action=action, target=target, reasoning="Always plays it safe")

    async def challenge_reasoning(self, context: ChallengeContext) -> ChallengeDecisionResult:
        return ChallengeDecisionResult(should_challenge=False, reasoning="Never challenges")

    async def block_reasoning(self, context: BlockContext) -> BlockDecisionResult:
        return BlockDecisionResult(should_block=False, reasoning="Never blocks")


# ============================================================================
# Context builders
# ============================================================================

def describe_game_state(state: GameState, player_id: str | None = None) -> str:
    """Plain-text summary of the table from one player's point of view."""
    lines = ["Current Game State:"]
    player = state.get_player(player_id)
    if player is not None:
        hidden = ", ".join(c.value for c in player.unrevealed_types) or "None"
        revealed = ", ".join(c.value for c in player.revealed_types) or "None"
        lines.append(
            f"You are {player.name}. Money: {player.money}. "
            f"Unrevealed Influence: [{hidden}]. Revealed Influence: [{revealed}]."
        )
    else:
        lines.append("Generating context (not specific to one player).")

    lines.append("All Players Status:")
    for p in state.players:
        influence = ", ".join(
            f"Revealed {c.card_type.value}" if c.revealed else "Hidden" for c in p.influence
        )
        status = "(Active)" if p.is_active else "(Eliminated)"
        kind = "AI" if p.is_ai else "Human"
        lines.append(f"- {p.name} ({kind}) {status}: {p.money} coins, Influence: [{influence}]")

    lines.append(f"Deck has {len(state.deck)} cards left.")
    lines.append(f"Treasury has {state.treasury} coins.")

    if state.current_action:
        actor = state.require_player(state.current_action.player_id)
        target = state.get_player(state.current_action.target_id)
        targeting = f" targeting {target.name}" if target else ""
        lines.append(
            f"Current Action Just Performed: {actor.name} performs "
            f"{state.current_action.action.value}{targeting}."
        )

    phase = state.challenge_or_block_phase
    if phase:
        claimant = state.require_player(phase.claimant_id)
        target = state.get_player(phase.target_id)
        targeting = f" targeting {target.name}" if target else ""
        waiting = ", ".join(state.require_player(pid).name for pid in phase.waiting_on)
        responses = "; ".join(
            f"{state.require_player(pid).name}: {r.value}" for pid, r in phase.responses
        ) or "None"
        lines.append(
            f"Challenge/Block Phase: {claimant.name}'s attempt to perform/claim "
            f"{phase.claim.value}{targeting} is being considered. "
            f"Possible responses needed from: {waiting}. Current responses: {responses}."
        )

    if state.pending_exchange:
        chooser = state.require_player(state.pending_exchange.player_id)
        pool = ", ".join(c.value for c in state.pending_exchange.cards_to_choose)
        lines.append(f"Pending Exchange: {chooser.name} is choosing cards from [{pool}].")

    recent = state.action_log[-5:]
    lines.append(f"Recent Action Log Summary ({len(recent)} entries):")
    lines.extend(f"  - {entry}" for entry in recent)
    lines.append(f"It is currently {state.current_player.name}'s turn.")
    return "\n".join(lines) + "\n"


def opponent_info(state: GameState, player_id: str) -> OpponentInfo:
    player = state.require_player(player_id)
    return OpponentInfo(
        player_id=player.id,
        name=player.name,
        money=player.money,
        influence_count=player.influence_count,
        revealed_cards=list(player.revealed_types),
    )


def visible_cards(state: GameState, player_id: str) -> dict[CardType, int]:
    """Card copies the player can account for: every revealed card plus their own hand."""
    counts: Counter[CardType] = Counter()
    for p in state.players:
        counts.update(p.revealed_types)
    player = state.get_player(player_id)
    if player is not None:
        counts.update(player.unrevealed_types)
    return dict(counts)


def build_action_context(
    state: GameState,
    player_id: str,
    available: list[ActionType],
    copies_per_card: int = 5,
) -> ActionContext:
    player = state.require_player(player_id)
    return ActionContext(
        player_id=player.id,
        player_name=player.name,
        money=player.money,
        hand=list(player.unrevealed_types),
        opponents=[opponent_info(state, p.id) for p in state.opponents_of(player_id)],
        available_actions=list(available),
        game_state=describe_game_state(state, player_id),
        visible_cards=visible_cards(state, player_id),
        copies_per_card=copies_per_card,
    )


def build_challenge_context(
    state: GameState,
    player_id: str,
    claimant_id: str,
    claim: Claim,
    target_id: str | None = None,
    copies_per_card: int = 5,
) -> ChallengeContext:
    player = state.require_player(player_id)
    target = state.get_player(target_id)
    current = state.current_action
    cost = current.cost if current and current.player_id == claimant_id and current.action == claim else 0
    return ChallengeContext(
        player_id=player.id,
        player_name=player.name,
        hand=list(player.unrevealed_types),
        claim=claim,
        claimant=opponent_info(state, claimant_id),
        target_name=target.name if target else None,
        is_target=target_id == player_id,
        cost_paid=cost,
        game_state=describe_game_state(state, player_id),
        visible_cards=visible_cards(state, player_id),
        copies_per_card=copies_per_card,
    )


def build_block_context(
    state: GameState,
    player_id: str,
    actor_id: str,
    action: ActionType,
    block: BlockType,
) -> BlockContext:
    player = state.require_player(player_id)
    return BlockContext(
        player_id=player.id,
        player_name=player.name,
        hand=list(player.unrevealed_types),
        money=player.money,
        action=action,
        block=block,
        actor=opponent_info(state, actor_id),
        game_state=describe_game_state(state, player_id),
    )


def build_exchange_context(state: GameState, player_id: str) -> ExchangeContext:
    player = state.require_player(player_id)
    pending = state.pending_exchange
    pool = list(pending.cards_to_choose) if pending else []
    return ExchangeContext(
        player_id=player.id,
        player_name=player.name,
        pool=pool,
        keep_count=player.influence_count,
        game_state=describe_game_state(state, player_id),
    )
