"""
Coup - Rules engine for the Coup social deduction card game.

A turn-based, immutable-state engine for mixed human and AI matches.
The engine provides:
- Deck handling and dealing
- Action validation and dispatch
- Challenge / block resolution with forced reveals
- Ambassador exchanges
- AI orchestration through pluggable decision oracles
"""

__version__ = "0.1.0"
