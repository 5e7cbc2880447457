"""
Engine configuration.

Defaults follow the standard Coup rules. Every field can be overridden
through a ``COUP_*`` environment variable via ``CoupConfig.from_env()``.
"""

from __future__ import annotations
from dataclasses import dataclass
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CoupConfig:
    """
    Tunable engine parameters.

    refund_cost_on_retreat decides what happens to a cost paid upfront
    (Assassinate's 3 coins) when the challenged claimant retreats instead
    of proving the claim. Off by default: the coins stay in the treasury.
    """
    copies_per_card: int = 5
    starting_money: int = 2
    total_coins: int = 50
    log_capacity: int = 50
    refund_cost_on_retreat: bool = False
    oracle_timeout_seconds: float = 30.0
    random_start: bool = True
    max_ai_steps: int = 200

    @classmethod
    def from_env(cls) -> CoupConfig:
        """Build a config from COUP_* environment variables."""
        defaults = cls()
        return cls(
            copies_per_card=int(os.getenv("COUP_COPIES_PER_CARD", defaults.copies_per_card)),
            starting_money=int(os.getenv("COUP_STARTING_MONEY", defaults.starting_money)),
            total_coins=int(os.getenv("COUP_TOTAL_COINS", defaults.total_coins)),
            log_capacity=int(os.getenv("COUP_LOG_CAPACITY", defaults.log_capacity)),
            refund_cost_on_retreat=_env_bool(
                "COUP_REFUND_COST_ON_RETREAT", defaults.refund_cost_on_retreat
            ),
            oracle_timeout_seconds=float(
                os.getenv("COUP_ORACLE_TIMEOUT_SECONDS", defaults.oracle_timeout_seconds)
            ),
            random_start=_env_bool("COUP_RANDOM_START", defaults.random_start),
            max_ai_steps=int(os.getenv("COUP_MAX_AI_STEPS", defaults.max_ai_steps)),
        )


DEFAULT_CONFIG = CoupConfig()
