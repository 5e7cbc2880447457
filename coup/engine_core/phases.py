"""
Challenge/Block Phase Engine - Claims, counter-claims and challenges.

A claim (an action needing a character, Foreign Aid, or a block) opens a
ChallengeOrBlockPhase listing who may answer and how. Answers are collected
in seat order until one of them settles the claim:

    challenge_action  ->  block_decision  ->  (action executes)
           |                   |
           v                   v
    pending_challenge_decision      challenge_block / assassination confirmation

A challenge moves to pending_challenge_decision, where the challenged
player proves the claim or retreats. Whoever loses the challenge loses
influence, and the chain resumes through a continuation record.
"""

from __future__ import annotations

from .context import RuleContext
from .deck import draw, return_and_reshuffle
from .errors import Rejected
from .resolution import block_succeeds, execute_action
from .reveal import lose_influence
from .rules import (
    ActionType,
    AssassinationDecision,
    BlockType,
    CardType,
    ChallengeDecision,
    Response,
    Stage,
    TARGET_ONLY_BLOCKS,
    action_for,
    block_for,
    cards_proving,
)
from .state import (
    ActionFailsTurnAdvances,
    ActionProceeds,
    BlockFailsActionProceeds,
    BlockSucceeds,
    ChallengeOrBlockPhase,
    GameState,
    InfluenceCard,
    PendingAssassinationConfirmation,
    PendingChallengeDecision,
)


# ============================================================================
# Opening claims
# ============================================================================

def open_action_phase(
    state: GameState,
    player_id: str,
    action: ActionType,
    target_id: str | None,
    ctx: RuleContext,
) -> GameState:
    """
    Give every other active player a chance to answer an action.

    Foreign Aid can only be blocked (it claims no character); the other
    character actions can only be challenged at this stage.
    """
    responders = tuple(p.id for p in state.opponents_of(player_id))
    if not responders:
        return claim_survived(state, player_id, action, target_id, ctx)

    if action == ActionType.FOREIGN_AID:
        valid = (Response.ALLOW, Response.BLOCK_FOREIGN_AID)
    else:
        valid = (Response.ALLOW, Response.CHALLENGE)

    phase = ChallengeOrBlockPhase(
        claimant_id=player_id,
        claim=action,
        stage=Stage.CHALLENGE_ACTION,
        possible_responses=responders,
        valid_responses=valid,
        target_id=target_id,
        action_player_id=player_id,
    )
    return state.clear_phases()._copy_with(challenge_or_block_phase=phase)


def claim_survived(
    state: GameState,
    claimant_id: str,
    action: ActionType,
    target_id: str | None,
    ctx: RuleContext,
) -> GameState:
    """
    An action claim was allowed or proven.

    Steal and Assassinate still give the target a chance to block, unless
    the target is out of the game by now.
    """
    block = block_for(action)
    target = state.get_player(target_id)
    if block in TARGET_ONLY_BLOCKS and target is not None and target.is_active:
        phase = ChallengeOrBlockPhase(
            claimant_id=claimant_id,
            claim=action,
            stage=Stage.BLOCK_DECISION,
            possible_responses=(target.id,),
            valid_responses=(Response.ALLOW, Response.for_block(block)),
            target_id=target.id,
            action_player_id=claimant_id,
        )
        state = ctx.log(state, f"{target.name} may block the {action.value}.", player_id=target.id)
        return state.clear_phases()._copy_with(challenge_or_block_phase=phase)

    claimant = state.require_player(claimant_id)
    state = ctx.log(state, f"{claimant.name}'s {action.value} attempt succeeds.", player_id=claimant_id)
    return execute_action(state, claimant_id, action, target_id, ctx)


def _open_block(
    state: GameState,
    phase: ChallengeOrBlockPhase,
    blocker_id: str,
    block: BlockType,
    ctx: RuleContext,
) -> GameState:
    """The block becomes the new claim."""
    actor_id = phase.action_player_id or phase.claimant_id
    actor = state.require_player(actor_id)
    blocker = state.require_player(blocker_id)
    state = state.clear_phases()

    if block == BlockType.BLOCK_ASSASSINATION:
        state = ctx.log(
            state,
            f"{actor.name} must decide whether to challenge {blocker.name}'s Contessa.",
            player_id=actor_id,
        )
        return state._copy_with(
            pending_assassination_confirmation=PendingAssassinationConfirmation(
                assassin_id=actor_id,
                contessa_player_id=blocker_id,
            )
        )

    # The original actor answers first
    responders = (actor_id,) + tuple(
        p.id for p in state.opponents_of(blocker_id) if p.id != actor_id
    )
    block_phase = ChallengeOrBlockPhase(
        claimant_id=blocker_id,
        claim=block,
        stage=Stage.CHALLENGE_BLOCK,
        possible_responses=responders,
        valid_responses=(Response.ALLOW, Response.CHALLENGE),
        target_id=phase.target_id,
        action_player_id=actor_id,
    )
    state = ctx.log(
        state,
        f"{actor.name} can now challenge {blocker.name}'s attempt to {block.value}.",
        player_id=actor_id,
    )
    return state._copy_with(challenge_or_block_phase=block_phase)


def _open_challenge(
    state: GameState,
    phase: ChallengeOrBlockPhase,
    challenger_id: str,
    ctx: RuleContext,
) -> GameState:
    challenger = state.require_player(challenger_id)
    claimant = state.require_player(phase.claimant_id)
    decision = PendingChallengeDecision(
        challenged_player_id=claimant.id,
        challenger_id=challenger_id,
        claim=phase.claim,
        original_action_player_id=phase.action_player_id,
        original_target_id=phase.target_id,
    )
    state = ctx.log(
        state,
        f"{challenger.name} challenges {claimant.name}'s {phase.claim.value}!",
        player_id=challenger_id,
    )
    return state.clear_phases()._copy_with(pending_challenge_decision=decision)


def _conclude(state: GameState, phase: ChallengeOrBlockPhase, ctx: RuleContext) -> GameState:
    """Everyone has answered without a challenge."""
    for player_id, response in phase.responses:
        if response.block is not None:
            return _open_block(state, phase, player_id, response.block, ctx)

    if isinstance(phase.claim, BlockType):
        return block_succeeds(
            state, phase.claimant_id, phase.claim, phase.action_player_id or phase.claimant_id, ctx
        )

    if phase.stage == Stage.BLOCK_DECISION:
        claimant = state.require_player(phase.claimant_id)
        state = ctx.log(state, f"No block. {claimant.name}'s {phase.claim.value} proceeds.",
                        player_id=phase.claimant_id)
        return execute_action(state, phase.claimant_id, phase.claim, phase.target_id, ctx)

    return claim_survived(state, phase.claimant_id, phase.claim, phase.target_id, ctx)


# ============================================================================
# Answers
# ============================================================================

def handle_player_response(
    state: GameState,
    player_id: str,
    response: Response,
    ctx: RuleContext,
) -> GameState:
    """Record one answer to the live claim and move on if it settles it."""
    phase = state.challenge_or_block_phase
    if phase is None:
        raise Rejected("There is no claim to respond to.")

    player = state.get_player(player_id)
    name = player.name if player else player_id
    if player_id not in phase.possible_responses:
        raise Rejected(f"Invalid response: Player {name} cannot respond now.")
    if phase.has_responded(player_id):
        raise Rejected(f"{name} has already responded.")
    if response not in phase.valid_responses:
        raise Rejected(f"Cannot respond {response.value} to {phase.claim.value}.")

    state = ctx.log(state, f"{name} responds: {response.value}.", player_id=player_id)
    phase = phase.with_response(player_id, response)

    if response == Response.CHALLENGE:
        return _open_challenge(state, phase, player_id, ctx)

    if response.block is not None and not (
        Response.CHALLENGE in phase.valid_responses and phase.waiting_on
    ):
        return _open_block(state, phase, player_id, response.block, ctx)

    if phase.all_responded:
        return _conclude(state, phase, ctx)
    return state._copy_with(challenge_or_block_phase=phase)


def handle_challenge_decision(
    state: GameState,
    player_id: str,
    decision: ChallengeDecision,
    ctx: RuleContext,
) -> GameState:
    """
    The challenged player proves the claim or backs down.

    Proving shows the card, shuffles it back and draws a replacement; the
    challenger then loses influence. Failing to prove costs the claimant
    influence. Retreating costs nothing but the claim fails.
    """
    pending = state.pending_challenge_decision
    if pending is None:
        raise Rejected("No challenge is waiting for a decision.")
    if pending.challenged_player_id != player_id:
        raise Rejected("Only the challenged player can decide.")

    claim = pending.claim
    claimant = state.require_player(player_id)
    challenger = state.require_player(pending.challenger_id)

    if isinstance(claim, BlockType):
        actor_id = pending.original_action_player_id or pending.challenger_id
        on_success = BlockSucceeds(
            blocker_id=player_id,
            block=claim,
            original_action_player_id=actor_id,
        )
        on_failure = BlockFailsActionProceeds(
            action_player_id=actor_id,
            action=action_for(claim),
            target_id=pending.original_target_id,
        )
    else:
        on_success = ActionProceeds(
            claimant_id=player_id,
            action=claim,
            target_id=pending.original_target_id,
        )
        on_failure = ActionFailsTurnAdvances(claimant_id=player_id, failed_claim=claim)

    state = state.clear_phases()

    if decision == ChallengeDecision.RETREAT:
        state = ctx.log(state, f"{claimant.name} backs down from the challenge.", player_id=player_id)
        state = _refund_on_retreat(state, player_id, ctx)
        return state._copy_with(pending_action_after_reveal=on_failure)

    proof = next((c for c in cards_proving(claim) if claimant.holds(c)), None)
    if proof is None:
        state = ctx.log(
            state,
            f"{claimant.name} cannot prove the challenge with "
            f"{' or '.join(c.value for c in cards_proving(claim))} and loses influence.",
            player_id=player_id,
        )
        return lose_influence(state, player_id, on_failure, ctx)

    state = ctx.log(state, f"{claimant.name} reveals {proof.value} to prove the challenge wrong.",
                    player_id=player_id)
    state = _replace_proven_card(state, player_id, proof, ctx)
    state = ctx.log(state, f"{challenger.name} loses the challenge and must reveal influence.",
                    player_id=challenger.id)
    return lose_influence(state, challenger.id, on_success, ctx)


def _replace_proven_card(
    state: GameState,
    player_id: str,
    proof: CardType,
    ctx: RuleContext,
) -> GameState:
    """Shuffle the shown card back into the deck and draw a replacement."""
    player = state.require_player(player_id)
    index = next(
        i for i, c in enumerate(player.influence) if not c.revealed and c.card_type == proof
    )
    deck = return_and_reshuffle(state.deck, proof, ctx.rng)
    replacement, deck = draw(deck)
    influence = player.influence[:index] + (InfluenceCard(replacement),) + player.influence[index + 1:]
    state = state.with_player(player.with_influence(influence))._copy_with(deck=deck)
    return ctx.log(state, f"{player.name} shuffles back {proof.value} and draws a new card.",
                   player_id=player_id)


def _refund_on_retreat(state: GameState, player_id: str, ctx: RuleContext) -> GameState:
    """Return an upfront cost to a retreating claimant, if configured."""
    current = state.current_action
    if not ctx.config.refund_cost_on_retreat or current is None:
        return state
    if current.player_id != player_id or current.cost <= 0:
        return state

    refund = min(current.cost, state.treasury)
    player = state.require_player(player_id)
    state = state.with_player(player.with_money(player.money + refund))
    state = state._copy_with(treasury=state.treasury - refund)
    return ctx.log(state, f"{player.name} is refunded {refund} coins.", player_id=player_id)


def handle_assassination_confirmation(
    state: GameState,
    player_id: str,
    decision: AssassinationDecision,
    ctx: RuleContext,
) -> GameState:
    """The assassin challenges the Contessa or lets the block stand."""
    pending = state.pending_assassination_confirmation
    if pending is None:
        raise Rejected("No Contessa block is waiting for confirmation.")
    if pending.assassin_id != player_id:
        raise Rejected("Only the assassin can answer the Contessa block.")

    assassin = state.require_player(player_id)
    contessa = state.require_player(pending.contessa_player_id)
    state = state.clear_phases()

    if decision == AssassinationDecision.ACCEPT_BLOCK:
        return block_succeeds(state, contessa.id, BlockType.BLOCK_ASSASSINATION, player_id, ctx)

    target_id = state.current_action.target_id if state.current_action else contessa.id
    challenge = PendingChallengeDecision(
        challenged_player_id=contessa.id,
        challenger_id=player_id,
        claim=BlockType.BLOCK_ASSASSINATION,
        original_action_player_id=player_id,
        original_target_id=target_id,
    )
    state = ctx.log(state, f"{assassin.name} challenges {contessa.name}'s Contessa!", player_id=player_id)
    return state._copy_with(pending_challenge_decision=challenge)
