"""Outliner agent.

Proposes and edits the document structure as a markdown list, and converts the final draft
into the structured outline forest.
"""

from __future__ import annotations

import json

from authorflow.agents.base import AgentValidationError, BaseAgent
from authorflow.context.assembler import outliner_payload, parse_payload
from authorflow.context.requests import GenerateOutlineRequest, ParseOutlineRequest
from authorflow.llm.client import CompletionClient
from authorflow.logging import get_logger
from authorflow.models.outline import Outline
from authorflow.outline.tree import attach_metadata
from authorflow.utils.tags import parse_json_payload

logger = get_logger(__name__)


class OutlinerAgent(BaseAgent):
    """Outliner agent."""

    name = "outliner"

    def __init__(
        self,
        llm: CompletionClient,
        *,
        temperature: float = 0.4,
        parser_temperature: float = 0.0,
    ) -> None:
        super().__init__(llm, temperature=temperature)
        self._parser = _OutlineParser(llm, temperature=parser_temperature)

    async def generate_outline(self, request: GenerateOutlineRequest) -> str:
        """Return the complete replacement markdown outline."""

        completion = await self._invoke(outliner_payload(request), action="generate outline")
        return completion.text.strip()

    async def parse_outline(self, request: ParseOutlineRequest) -> Outline:
        """Convert a markdown outline into nodes with ids, levels and ``Outline`` status.

        Raises:
            AgentInvocationError: The model call failed.
            AgentValidationError: The answer was not a JSON array.
        """

        return await self._parser.parse(request)


class _OutlineParser(BaseAgent):
    name = "outline-parser"

    async def parse(self, request: ParseOutlineRequest) -> Outline:
        completion = await self._invoke(parse_payload(request), action="parse outline")
        try:
            data = parse_json_payload(completion.text)
        except json.JSONDecodeError as exc:
            raise AgentValidationError("Outline parser did not return valid JSON.") from exc
        if not isinstance(data, list):
            raise AgentValidationError("AI response is not a valid JSON array for the outline.")
        outline = attach_metadata(data)
        logger.info("Parsed outline with %d top-level sections", len(outline))
        return outline
