"""
Rule Tables - Static mappings between claims and influence cards.

Pure lookups, no state. Every action, block, response and stage is a
closed enum so invalid combinations are rejected by lookup, not by
string matching.
"""

from __future__ import annotations
from enum import Enum


class CardType(Enum):
    """Influence card characters."""
    DUKE = "Duke"
    ASSASSIN = "Assassin"
    CAPTAIN = "Captain"
    AMBASSADOR = "Ambassador"
    CONTESSA = "Contessa"


ALL_CARDS: tuple[CardType, ...] = tuple(CardType)


class ActionType(Enum):
    """The seven base actions."""
    INCOME = "Income"
    FOREIGN_AID = "Foreign Aid"
    COUP = "Coup"
    TAX = "Tax"
    ASSASSINATE = "Assassinate"
    STEAL = "Steal"
    EXCHANGE = "Exchange"


class BlockType(Enum):
    """Counter-claims that cancel an action."""
    BLOCK_FOREIGN_AID = "Block Foreign Aid"
    BLOCK_STEALING = "Block Stealing"
    BLOCK_ASSASSINATION = "Block Assassination"


class Response(Enum):
    """What a responder may answer to a live claim."""
    ALLOW = "Allow"
    CHALLENGE = "Challenge"
    BLOCK_FOREIGN_AID = "Block Foreign Aid"
    BLOCK_STEALING = "Block Stealing"
    BLOCK_ASSASSINATION = "Block Assassination"

    @property
    def block(self) -> BlockType | None:
        """The block this response declares, if any."""
        try:
            return BlockType(self.value)
        except ValueError:
            return None

    @classmethod
    def for_block(cls, block: BlockType) -> Response:
        return cls(block.value)


class Stage(Enum):
    """Interaction stages of a challenge/block phase."""
    CHALLENGE_ACTION = "challenge_action"
    BLOCK_DECISION = "block_decision"
    CHALLENGE_BLOCK = "challenge_block"


class ChallengeDecision(Enum):
    """Choice of a challenged player."""
    PROCEED = "Proceed"
    RETREAT = "Retreat"


class AssassinationDecision(Enum):
    """Choice of an assassin facing a Contessa block."""
    CHALLENGE_CONTESSA = "Challenge Contessa"
    ACCEPT_BLOCK = "Accept Block"


Claim = ActionType | BlockType


ACTION_COSTS: dict[ActionType, int] = {
    ActionType.COUP: 7,
    ActionType.ASSASSINATE: 3,
}

ACTION_GAINS: dict[ActionType, int] = {
    ActionType.INCOME: 1,
    ActionType.FOREIGN_AID: 2,
    ActionType.TAX: 3,
    ActionType.STEAL: 2,
}

TARGETED_ACTIONS = frozenset({
    ActionType.COUP,
    ActionType.ASSASSINATE,
    ActionType.STEAL,
})

# Blocks only the target may declare
TARGET_ONLY_BLOCKS = frozenset({
    BlockType.BLOCK_STEALING,
    BlockType.BLOCK_ASSASSINATION,
})

MUST_COUP_THRESHOLD = 10

_REQUIRED_CARD: dict[Claim, CardType] = {
    ActionType.TAX: CardType.DUKE,
    ActionType.ASSASSINATE: CardType.ASSASSIN,
    ActionType.STEAL: CardType.CAPTAIN,
    ActionType.EXCHANGE: CardType.AMBASSADOR,
    BlockType.BLOCK_FOREIGN_AID: CardType.DUKE,
    BlockType.BLOCK_STEALING: CardType.CAPTAIN,
    BlockType.BLOCK_ASSASSINATION: CardType.CONTESSA,
}

_ALTERNATE_CARDS: dict[Claim, tuple[CardType, ...]] = {
    BlockType.BLOCK_STEALING: (CardType.AMBASSADOR,),
}

_BLOCK_FOR: dict[ActionType, BlockType] = {
    ActionType.FOREIGN_AID: BlockType.BLOCK_FOREIGN_AID,
    ActionType.STEAL: BlockType.BLOCK_STEALING,
    ActionType.ASSASSINATE: BlockType.BLOCK_ASSASSINATION,
}

_ACTION_FOR: dict[BlockType, ActionType] = {
    block: action for action, block in _BLOCK_FOR.items()
}


def required_card_for(claim: Claim) -> CardType | None:
    """Primary card that justifies a claim; None if not challengeable."""
    return _REQUIRED_CARD.get(claim)


def cards_proving(claim: Claim) -> tuple[CardType, ...]:
    """All cards that prove a claim, primary card first."""
    primary = _REQUIRED_CARD.get(claim)
    if primary is None:
        return ()
    return (primary,) + _ALTERNATE_CARDS.get(claim, ())


def is_challengeable(claim: Claim) -> bool:
    return claim in _REQUIRED_CARD


def block_for(action: ActionType) -> BlockType | None:
    """Block that counters an action, if any."""
    return _BLOCK_FOR.get(action)


def action_for(block: BlockType) -> ActionType:
    """Action that a block counters."""
    return _ACTION_FOR[block]


def claim_name(claim: Claim) -> str:
    return claim.value


# Most valuable first. Used by AI players to decide what to keep or lose.
CARD_PREFERENCE: tuple[CardType, ...] = (
    CardType.DUKE,
    CardType.CONTESSA,
    CardType.ASSASSIN,
    CardType.CAPTAIN,
    CardType.AMBASSADOR,
)


def least_valuable(cards: tuple[CardType, ...]) -> CardType | None:
    """The card an AI player would give up first."""
    if not cards:
        return None
    return max(cards, key=CARD_PREFERENCE.index)
