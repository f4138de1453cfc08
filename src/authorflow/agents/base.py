"""Base agent interfaces."""

from __future__ import annotations

import asyncio

from authorflow.context.requests import PromptPayload
from authorflow.llm.client import Completion, CompletionClient
from authorflow.logging import get_logger, log_exception

logger = get_logger(__name__)


class AgentError(RuntimeError):
    """An agent call failed; workflow state must stay as it was before the call."""


class AgentInvocationError(AgentError):
    """The model call itself failed (network, auth, rate limit, timeout)."""


class AgentValidationError(AgentError):
    """The model answered, but the structured output was unusable."""


class BaseAgent:
    """Base class for agents.

    Agents are stateless: a call's only effect is its return value. Calls are never retried
    here; the caller decides whether to ask the user to try again.
    """

    name = "agent"

    def __init__(self, llm: CompletionClient, *, temperature: float = 0.2) -> None:
        self._llm = llm
        self._temperature = temperature

    async def _invoke(self, payload: PromptPayload, *, action: str) -> Completion:
        """Send one payload, offloading the blocking client to a worker thread."""

        logger.debug("%s: %s (%d turns)", self.name, action, len(payload.messages))
        try:
            return await asyncio.to_thread(
                self._llm.complete,
                payload.messages,
                system=payload.system,
                temperature=self._temperature,
                grounded=payload.grounded,
            )
        except Exception as exc:
            log_exception(logger, f"{self.name} call failed", action=action)
            raise AgentInvocationError(f"Failed to {action}.") from exc
