"""Writer agent.

Drafts prose for one section, either as a continuation of the section's chat or as a single
turn, and produces the tailored persona prompt used as its system instruction.
"""

from __future__ import annotations

from authorflow.agents.base import BaseAgent
from authorflow.context.assembler import (
    initial_draft_payload,
    tailored_prompt_payload,
    writer_payload,
)
from authorflow.context.requests import (
    CreateTailoredPromptRequest,
    GenerateContentRequest,
    GenerateInitialDraftRequest,
)
from authorflow.logging import get_logger

logger = get_logger(__name__)


class WriterAgent(BaseAgent):
    """Writer agent."""

    name = "writer"

    async def generate_content(self, request: GenerateContentRequest) -> str:
        """Continue the section conversation.

        Raises:
            ValueError: If the message history is empty.
            AgentInvocationError: The model call failed.
        """

        payload = writer_payload(request)
        completion = await self._invoke(payload, action="generate content from AI Agent")
        return completion.text

    async def generate_initial_draft(self, request: GenerateInitialDraftRequest) -> str:
        """Write a first draft from a single instruction."""

        completion = await self._invoke(
            initial_draft_payload(request), action="generate content from AI Agent"
        )
        return completion.text

    async def create_tailored_prompt(self, request: CreateTailoredPromptRequest) -> str:
        """Return the coordinator prompt followed by a section-specific persona."""

        completion = await self._invoke(
            tailored_prompt_payload(request), action="create a tailored system prompt"
        )
        persona = completion.text.strip()
        return f"{request.coordinator_prompt}\n\n---\n\n{persona}"
