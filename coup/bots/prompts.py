"""
Oracle Prompts - Prompt templates for language-model players.

Each template asks for a single JSON object so the reply can be validated
with pydantic before the engine trusts it.
"""

from dataclasses import dataclass

from ..engine_core.rules import ActionType


COUP_RULEBOOK = """
Coup rules summary:
- Each player starts with 2 hidden influence cards and 2 coins. Lose both and you are out.
- Income: take 1 coin. Cannot be blocked or challenged.
- Foreign Aid: take 2 coins. Can be blocked by anyone claiming Duke.
- Coup: pay 7 coins, target loses an influence. Mandatory with 10 or more coins.
- Tax (Duke): take 3 coins.
- Assassinate (Assassin): pay 3 coins, target loses an influence. Blocked by Contessa.
- Steal (Captain): take up to 2 coins from a target. Blocked by Captain or Ambassador.
- Exchange (Ambassador): draw 2 cards, keep as many as you had, return the rest.
- Any character claim, including a block, can be challenged. If the claimant shows the
  card, the challenger loses an influence and the claimant swaps the shown card for a new
  one. Otherwise the claimant loses an influence and the claim fails.
"""


@dataclass
class OraclePrompts:
    """Collection of prompts for AI decisions."""

    @staticmethod
    def select_action() -> str:
        """Prompt to pick an action for the AI's turn."""
        return """
You are {player_name}, an AI player in the card game Coup. It is your turn.

{rulebook}

Your money: {money}
Your unrevealed influence: [{hand}]
Opponents:
{opponents}

Available actions: [{available_actions}]

{game_state}

Pick one of the available actions. Bluffing is allowed.
Output as JSON:
{{
    "action": "one of the available actions",
    "target": "opponent name, only for Coup, Assassinate or Steal",
    "reasoning": "string"
}}
"""

    @staticmethod
    def challenge() -> str:
        """Prompt to decide whether to challenge a claim."""
        return """
You are {player_name}, an AI player in the card game Coup.
{claimant_name} claims {claim}{target_clause}.
{claimant_name} has {claimant_influence} unrevealed influence and {claimant_money} coins.

{rulebook}

Your unrevealed influence: [{hand}]

{game_state}

Decide whether to challenge. Losing a challenge costs you an influence.
Output as JSON:
{{
    "shouldChallenge": true or false,
    "reasoning": "string"
}}
"""

    @staticmethod
    def block() -> str:
        """Prompt to decide whether to block an action."""
        return """
You are {player_name}, an AI player in the card game Coup.
{actor_name} performs {action}. You may answer with {block}.
{actor_name} has {actor_influence} unrevealed influence and {actor_money} coins.

{rulebook}

Your unrevealed influence: [{hand}]
Your money: {money}

{game_state}

Decide whether to block. A block can be challenged; a bluffed block that is
challenged costs you an influence.
Output as JSON:
{{
    "shouldBlock": true or false,
    "reasoning": "string"
}}
"""


def format_opponents(opponents) -> str:
    lines = []
    for o in opponents:
        revealed = ", ".join(c.value for c in o.revealed_cards) or "None"
        lines.append(
            f"- {o.name}: {o.money} coins, {o.influence_count} influence, revealed [{revealed}]"
        )
    return "\n".join(lines) or "- None"


def render_action_prompt(context) -> str:
    return OraclePrompts.select_action().format(
        player_name=context.player_name,
        rulebook=COUP_RULEBOOK.strip(),
        money=context.money,
        hand=", ".join(c.value for c in context.hand),
        opponents=format_opponents(context.opponents),
        available_actions=", ".join(
            a.value if isinstance(a, ActionType) else str(a) for a in context.available_actions
        ),
        game_state=context.game_state,
    )


def render_challenge_prompt(context) -> str:
    target_clause = f" against {context.target_name}" if context.target_name else ""
    return OraclePrompts.challenge().format(
        player_name=context.player_name,
        claimant_name=context.claimant.name,
        claim=context.claim.value,
        target_clause=target_clause,
        claimant_influence=context.claimant.influence_count,
        claimant_money=context.claimant.money,
        rulebook=COUP_RULEBOOK.strip(),
        hand=", ".join(c.value for c in context.hand),
        game_state=context.game_state,
    )


def render_block_prompt(context) -> str:
    return OraclePrompts.block().format(
        player_name=context.player_name,
        actor_name=context.actor.name,
        action=context.action.value,
        block=context.block.value,
        actor_influence=context.actor.influence_count,
        actor_money=context.actor.money,
        rulebook=COUP_RULEBOOK.strip(),
        hand=", ".join(c.value for c in context.hand),
        money=context.money,
        game_state=context.game_state,
    )
