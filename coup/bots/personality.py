"""
Bot Personalities - Configurable play styles.

Personalities adjust:
- Aggression (attack opponents vs build coins)
- Bluffing (how readily the bot claims cards it does not hold)
- Suspicion (how readily it challenges)
- Randomness (for unpredictability)
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Personality:
    """A play style for the heuristic oracle."""
    name: str
    description: str = ""

    aggression: float = 0.5  # 0 = passive, 1 = aggressive
    bluff_rate: float = 0.3  # Chance to bluff a block it cannot back up
    challenge_threshold: int = 45  # Challenge when belief in the claim drops below this
    randomness: int = 5  # +/- points of noise on every score


BALANCED = Personality(
    name="Balanced",
    description="Well-rounded play style, bluffs occasionally",
)


AGGRESSIVE = Personality(
    name="Aggressive",
    description="Attacks early and challenges often",
    aggression=0.8,
    bluff_rate=0.5,
    challenge_threshold=55,
    randomness=8,
)


CAUTIOUS = Personality(
    name="Cautious",
    description="Sticks to cards it holds and rarely challenges",
    aggression=0.2,
    bluff_rate=0.05,
    challenge_threshold=30,
    randomness=3,
)


PERSONALITIES = {
    "balanced": BALANCED,
    "aggressive": AGGRESSIVE,
    "cautious": CAUTIOUS,
}


def get_personality(name: str) -> Personality:
    """Get a personality by name."""
    return PERSONALITIES.get(name.lower(), BALANCED)
