"""
Session module - Ephemeral, in-memory game sessions.

Sessions:
- Own one engine and the current snapshot
- Serialize calls with a per-session lock
- Are destroyed when the host ends them
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
