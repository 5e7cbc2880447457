"""
LLM Oracle - Delegates AI decisions to a language model.

The model itself is injected as an async completion callable
(prompt in, text out), so any provider client can be plugged in. Replies
must contain a JSON object; they are validated with pydantic and any
problem is raised as OracleError for the engine to fall back on.
"""

from __future__ import annotations
from typing import Awaitable, Callable, Optional
import json
import logging
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..engine_core.errors import OracleError
from .policy import (
    ActionContext,
    ActionDecision,
    BlockContext,
    BlockDecisionResult,
    ChallengeContext,
    ChallengeDecisionResult,
    DecisionOracle,
)
from .prompts import render_action_prompt, render_block_prompt, render_challenge_prompt


logger = logging.getLogger("coup.bots")

Completion = Callable[[str], Awaitable[str]]

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class ActionReply(BaseModel):
    action: str
    target: Optional[str] = None
    reasoning: str = ""


class ChallengeReply(BaseModel):
    should_challenge: bool = Field(alias="shouldChallenge")
    reasoning: str = ""

    model_config = ConfigDict(populate_by_name=True)


class BlockReply(BaseModel):
    should_block: bool = Field(alias="shouldBlock")
    reasoning: str = ""

    model_config = ConfigDict(populate_by_name=True)


def parse_reply(text: str, model: type[BaseModel]) -> BaseModel:
    """Pull the JSON object out of a model reply and validate it."""
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        raise OracleError(f"No JSON object in reply: {text!r}")
    try:
        return model.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise OracleError(f"Invalid reply: {e}") from e


class LLMOracle(DecisionOracle):
    """Oracle backed by a language model completion function."""

    def __init__(self, complete: Completion):
        self.complete = complete

    async def _ask(self, prompt: str, model: type[BaseModel]) -> BaseModel:
        reply = await self.complete(prompt)
        logger.debug("Model reply: %s", reply)
        return parse_reply(reply, model)

    async def select_action(self, context: ActionContext) -> ActionDecision:
        reply = await self._ask(render_action_prompt(context), ActionReply)
        return ActionDecision(action=reply.action, target=reply.target, reasoning=reply.reasoning)

    async def challenge_reasoning(self, context: ChallengeContext) -> ChallengeDecisionResult:
        reply = await self._ask(render_challenge_prompt(context), ChallengeReply)
        return ChallengeDecisionResult(reply.should_challenge, reply.reasoning)

    async def block_reasoning(self, context: BlockContext) -> BlockDecisionResult:
        reply = await self._ask(render_block_prompt(context), BlockReply)
        return BlockDecisionResult(reply.should_block, reply.reasoning)
