"""
Rule context - Everything a transition needs besides the state itself.

Bundles the engine configuration, the random source and the event hooks
so rule functions stay pure with respect to the snapshot they receive.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from ..config import CoupConfig, DEFAULT_CONFIG
from .events import EventHook, EventKind, create_error_state, log_action
from .state import GameState


@dataclass
class RuleContext:
    config: CoupConfig = DEFAULT_CONFIG
    rng: random.Random = field(default_factory=random.Random)
    hooks: tuple[EventHook, ...] = ()

    def log(
        self,
        state: GameState,
        message: str,
        kind: EventKind = EventKind.LOG,
        player_id: str | None = None,
    ) -> GameState:
        return log_action(
            state,
            message,
            capacity=self.config.log_capacity,
            hooks=self.hooks,
            kind=kind,
            player_id=player_id,
        )

    def reject(self, state: GameState, message: str, player_id: str | None = None) -> GameState:
        """Log a rejected request without touching anything else."""
        return self.log(state, message, kind=EventKind.REJECTED, player_id=player_id)

    def error_state(self, message: str, last_good: GameState) -> GameState:
        return create_error_state(
            message,
            last_good,
            capacity=self.config.log_capacity,
            hooks=self.hooks,
        )
