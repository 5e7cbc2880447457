"""
Bots module - AI player implementations.

Provides:
- DecisionOracle: Interface for AI decision-making
- HeuristicOracle: Scripted strategy with configurable personalities
- LLMOracle: Decisions delegated to a language model
- AIOrchestrator: Runs AI decisions through the engine
"""

from .policy import (
    DecisionOracle,
    ActionDecision,
    ChallengeDecisionResult,
    BlockDecisionResult,
    RandomOracle,
    AllowAllOracle,
    describe_game_state,
)
from .personality import Personality, PERSONALITIES, get_personality
from .heuristic import HeuristicOracle
from .llm import LLMOracle
from .orchestrator import AIOrchestrator

__all__ = [
    "DecisionOracle",
    "ActionDecision",
    "ChallengeDecisionResult",
    "BlockDecisionResult",
    "RandomOracle",
    "AllowAllOracle",
    "describe_game_state",
    "Personality",
    "PERSONALITIES",
    "get_personality",
    "HeuristicOracle",
    "LLMOracle",
    "AIOrchestrator",
]
