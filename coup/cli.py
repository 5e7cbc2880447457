"""
Coup CLI - Command-line interface for the engine.

Usage:
    coup simulate --games N --players N [--seed S]   Play AI-only games
    coup play --name NAME --bots N                   Play against AI opponents
    coup serve [--host H] [--port P]                 Run the HTTP API
"""

from __future__ import annotations
from collections import Counter
import argparse
import asyncio
import logging
import sys

from .config import CoupConfig
from .engine_core.actions import available_actions
from .engine_core.events import GameEvent
from .engine_core.rules import (
    TARGETED_ACTIONS,
    AssassinationDecision,
    ChallengeDecision,
)
from .engine_core.state import GameState
from .session import Session, SessionManager


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Coup - Rules engine with AI opponents",
        prog="coup",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log engine events")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play AI-only games")
    simulate_parser.add_argument("--games", type=int, default=10, help="Number of games")
    simulate_parser.add_argument("--players", type=int, default=4, help="AI players per game (2-6)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for the first game")
    simulate_parser.add_argument("--personality", default="balanced", help="AI personality")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play against AI opponents")
    play_parser.add_argument("--name", default="Player", help="Your display name")
    play_parser.add_argument("--bots", type=int, default=2, help="Number of AI opponents")
    play_parser.add_argument("--seed", type=int, default=None, help="Seed for the deal")
    play_parser.add_argument("--personality", default="balanced", help="AI personality")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "play":
        return cmd_play(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


# =============================================================================
# simulate
# =============================================================================

async def simulate_game(manager: SessionManager, players: int, seed: int | None, personality: str) -> GameState:
    """Deal an AI-only game and trigger AI turns until someone wins."""
    session = await manager.create_session([], ai_count=players, personality=personality, seed=seed)
    try:
        await session.run_ai_turns(limit=1000)
        return session.game_state
    finally:
        manager.end_session(session.session_id)


def cmd_simulate(args):
    """Play AI-only games and print the results."""
    if not 2 <= args.players <= 6:
        print(f"Error: --players must be between 2 and 6, got {args.players}")
        sys.exit(1)

    manager = SessionManager(config=CoupConfig.from_env())
    wins: Counter[str] = Counter()
    unfinished = 0

    async def run_all():
        nonlocal unfinished
        for game in range(args.games):
            seed = None if args.seed is None else args.seed + game
            state = await simulate_game(manager, args.players, seed, args.personality)
            winner = state.get_player(state.winner)
            if winner is None:
                unfinished += 1
                print(f"Game {game + 1}: no winner")
            else:
                wins[winner.name] += 1
                print(f"Game {game + 1}: {winner.name} wins")

    asyncio.run(run_all())

    print(f"\nPlayed {args.games} game(s) with {args.players} AI players")
    for name, count in sorted(wins.items()):
        print(f"  {name}: {count}")
    if unfinished:
        print(f"  unfinished: {unfinished}")
    return wins


# =============================================================================
# play
# =============================================================================

def _choose(prompt: str, options: list[str]) -> int:
    """Ask for one option by number. Returns its index."""
    while True:
        print(prompt)
        for i, option in enumerate(options, start=1):
            print(f"  {i}. {option}")
        answer = input("> ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        print("Please enter one of the numbers above.")


def _choose_many(prompt: str, options: list[str], count: int) -> list[int]:
    """Ask for count distinct options by number."""
    while True:
        print(prompt)
        for i, option in enumerate(options, start=1):
            print(f"  {i}. {option}")
        parts = input("> ").replace(",", " ").split()
        if all(p.isdigit() for p in parts):
            picks = [int(p) - 1 for p in parts]
            if len(picks) == count and len(set(picks)) == count and all(0 <= p < len(options) for p in picks):
                return picks
        print(f"Please enter {count} different number(s).")


def _print_table(state: GameState, human_id: str):
    print()
    for p in state.players:
        cards = ", ".join(
            f"{c.card_type.value}{' (revealed)' if c.revealed else ''}"
            if c.revealed or p.id == human_id else "?"
            for c in p.influence
        )
        marker = "*" if p.id == state.current_player.id else " "
        print(f"{marker} {p.name:<14} coins={p.money:<2} [{cards}]")
    print(f"  Treasury: {state.treasury}  Deck: {len(state.deck)}")


async def _human_step(session: Session, human_id: str) -> bool:
    """Ask the human for the decision the game waits on. False if none."""
    state = session.game_state
    human = state.require_player(human_id)

    if state.player_needs_to_reveal == human_id:
        options = list(human.unrevealed_types)
        pick = _choose("You must reveal an influence card:", [c.value for c in options])
        await session.call("handle_force_reveal", human_id, options[pick])
        return True

    phase = state.challenge_or_block_phase
    if phase is not None and human_id in phase.waiting_on:
        claimant = state.require_player(phase.claimant_id)
        options = list(phase.valid_responses)
        pick = _choose(f"{claimant.name} claims {phase.claim.value}. Your response:", [r.value for r in options])
        await session.call("handle_player_response", human_id, options[pick])
        return True

    decision = state.pending_challenge_decision
    if decision is not None and decision.challenged_player_id == human_id:
        options = list(ChallengeDecision)
        pick = _choose(f"Your {decision.claim.value} was challenged:", [d.value for d in options])
        await session.call("handle_challenge_decision", human_id, options[pick])
        return True

    confirmation = state.pending_assassination_confirmation
    if confirmation is not None and confirmation.assassin_id == human_id:
        options = list(AssassinationDecision)
        contessa = state.require_player(confirmation.contessa_player_id)
        pick = _choose(f"{contessa.name} blocks with Contessa:", [d.value for d in options])
        await session.call("handle_assassination_confirmation", human_id, options[pick])
        return True

    exchange = state.pending_exchange
    if exchange is not None and exchange.player_id == human_id:
        picks = _choose_many(
            f"Choose {human.influence_count} card(s) to keep:",
            [c.value for c in exchange.cards_to_choose],
            human.influence_count,
        )
        await session.call("handle_exchange_selection", human_id, picks)
        return True

    if state.current_player.id == human_id and not state.has_pending_phase:
        actions = available_actions(state, human_id)
        action = actions[_choose("Your turn. Choose an action:", [a.value for a in actions])]
        target_id = None
        if action in TARGETED_ACTIONS:
            targets = list(state.opponents_of(human_id))
            target_id = targets[_choose("Choose a target:", [t.name for t in targets])].id
        await session.call("perform_action", human_id, action, target_id)
        return True

    return False


async def play_game(session: Session, human_id: str):
    """Interactive loop for one human against AI players."""
    while True:
        state = session.game_state
        if state.winner is not None:
            winner = state.require_player(state.winner)
            print(f"\n{winner.name} wins!")
            return state

        if state.needs_human_trigger_for_ai:
            await session.call("handle_ai_action")
            continue

        _print_table(state, human_id)
        if not await _human_step(session, human_id):
            print("The game is waiting on nobody; stopping.")
            return session.game_state


def _print_event(event: GameEvent):
    print(event.message)


def cmd_play(args):
    """Start an interactive game."""
    async def run():
        manager = SessionManager(config=CoupConfig.from_env())
        session = await manager.create_session(
            [args.name],
            ai_count=args.bots,
            personality=args.personality,
            seed=args.seed,
            hooks=[_print_event],
        )
        human_id = session.game_state.players[0].id
        try:
            return await play_game(session, human_id)
        finally:
            manager.end_session(session.session_id)

    try:
        return asyncio.run(run())
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except (EOFError, KeyboardInterrupt):
        print("\nGoodbye.")


# =============================================================================
# serve
# =============================================================================

def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("coup.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
