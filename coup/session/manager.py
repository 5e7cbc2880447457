"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Host creates a session → a new game is dealt
2. During the game:
   - Human players submit actions and decisions through the session
   - Every call goes through the engine and replaces the stored snapshot
   - AI turns are started when the snapshot asks for a trigger
3. Game ends → the session is marked over; the host may end it
4. Ended sessions are removed, ALL state deleted

PERSISTENCE RULES:
- NO database
- Game state is ephemeral (session-scoped only)
- Calls on one session are serialized with a per-session lock
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import asyncio
import logging
import random
import time
import uuid

from ..bots import HeuristicOracle, DecisionOracle, get_personality
from ..config import CoupConfig, DEFAULT_CONFIG
from ..engine_core.engine import CoupEngine
from ..engine_core.events import EventHook
from ..engine_core.state import GameState


logger = logging.getLogger("coup.session")


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # A winner has been declared
    ABANDONED = "abandoned"  # Host ended the game early


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The engine (oracle, config and random source)
    - The current canonical game state
    - Session metadata

    The session is destroyed when the game ends.
    State is NOT persisted.
    """
    session_id: str
    engine: CoupEngine
    game_state: GameState
    created_at: float

    state: SessionState = SessionState.ACTIVE
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state == SessionState.ACTIVE

    def is_human_turn(self) -> bool:
        """Check if the current player is a human."""
        return self.game_state.winner is None and not self.game_state.current_player.is_ai

    async def call(self, method: str, *args) -> Any:
        """
        Run one engine entry point against the stored snapshot.

        The new snapshot replaces the stored one; the raw engine result is
        returned (a state, or a (state, card) pair for reveals).
        """
        async with self.lock:
            result = await getattr(self.engine, method)(self.game_state, *args)
            self.game_state = result[0] if isinstance(result, tuple) else result
            if self.game_state.winner is not None and self.state == SessionState.ACTIVE:
                self.state = SessionState.GAME_OVER
                logger.info("Session %s finished; winner %s", self.session_id, self.game_state.winner)
            return result

    async def run_ai_turns(self, limit: int = 50) -> GameState:
        """Play consecutive AI turns until a human must act or the game ends."""
        for _ in range(limit):
            if self.game_state.winner is not None or not self.game_state.needs_human_trigger_for_ai:
                break
            await self.call("handle_ai_action")
        return self.game_state


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a freshly dealt game
    - Track active sessions
    - Clean up completed sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, config: CoupConfig = DEFAULT_CONFIG):
        self.config = config
        self._sessions: dict[str, Session] = {}

    async def create_session(
        self,
        player_names: list[str],
        ai_count: int = 1,
        personality: str = "balanced",
        seed: int | None = None,
        oracle: DecisionOracle | None = None,
        hooks: list[EventHook] | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            player_names: Display names of the human players
            ai_count: Number of AI players
            personality: Personality for the default heuristic oracle
            seed: Optional seed for dealing and AI randomness
            oracle: Optional decision oracle replacing the heuristic one
            hooks: Optional observers of every log entry

        Raises:
            ValueError: unplayable player count
        """
        session_id = str(uuid.uuid4())

        if oracle is None:
            oracle = HeuristicOracle(personality=get_personality(personality), seed=seed)
        engine = CoupEngine(
            oracle=oracle,
            config=self.config,
            rng=random.Random(seed),
            hooks=list(hooks or ()),
        )
        game_state = await engine.initialize_game(player_names, ai_count)

        session = Session(
            session_id=session_id,
            engine=engine,
            game_state=game_state,
            created_at=time.time(),
            metadata={"personality": personality, "seed": seed},
        )
        self._sessions[session_id] = session
        logger.info("Session %s created with %d player(s)", session_id, game_state.num_players)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and clean up.

        The session is removed from memory.
        No persistence.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if session.state == SessionState.ACTIVE:
            session.state = SessionState.ABANDONED
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[str]:
        """List IDs of all stored sessions."""
        return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove finished sessions older than max_age.

        Called periodically to free memory.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
