"""
Events - The action log and its observers.

Every human-readable log line is also published as a structured GameEvent
to injected hooks and mirrored to the "coup.engine" logger. The in-state
log is bounded; hooks see everything.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable
import logging

from .state import GameState


logger = logging.getLogger("coup.engine")


class EventKind(Enum):
    """Category of a log entry."""
    LOG = "log"
    TURN = "turn"
    REVEAL = "reveal"
    ELIMINATION = "elimination"
    GAME_OVER = "game_over"
    REJECTED = "rejected"
    ERROR = "error"
    AI = "ai"


@dataclass(frozen=True)
class GameEvent:
    """Structured mirror of one action log entry."""
    kind: EventKind
    message: str
    player_id: str | None = None


EventHook = Callable[[GameEvent], None]


_LEVELS = {
    EventKind.REJECTED: logging.WARNING,
    EventKind.ERROR: logging.ERROR,
}


def emit(event: GameEvent, hooks: Iterable[EventHook] = ()) -> None:
    """Publish an event to the logger and every hook."""
    logger.log(_LEVELS.get(event.kind, logging.DEBUG), "[Game Log] %s", event.message)
    for hook in hooks:
        hook(event)


def log_action(
    state: GameState,
    message: str,
    *,
    capacity: int = 50,
    hooks: Iterable[EventHook] = (),
    kind: EventKind = EventKind.LOG,
    player_id: str | None = None,
) -> GameState:
    """Append a message to the bounded action log and publish it."""
    emit(GameEvent(kind=kind, message=message, player_id=player_id), hooks)
    new_log = (state.action_log + (message,))[-capacity:] if capacity > 0 else ()
    return state._copy_with(action_log=new_log)


def create_error_state(
    message: str,
    last_good: GameState,
    *,
    capacity: int = 50,
    hooks: Iterable[EventHook] = (),
) -> GameState:
    """
    Recover from an invariant violation.

    Returns the last known good snapshot with the error logged and every
    transient phase cleared, so the host can keep playing.
    """
    state = last_good.clear_transient()._copy_with(needs_human_trigger_for_ai=False)
    state = log_action(
        state,
        f"Error: {message}",
        capacity=capacity,
        hooks=hooks,
        kind=EventKind.ERROR,
    )
    if state.winner is not None or not 0 <= state.current_player_index < len(state.players):
        return state
    # The next player may be an AI waiting for a trigger
    if state.current_player.is_ai and state.current_player.is_active:
        state = state._copy_with(needs_human_trigger_for_ai=True)
    return state
