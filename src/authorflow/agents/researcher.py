"""Research agent.

Runs a search-grounded completion and decodes the free-text answer into at most three
results. Decoding is isolated in :mod:`authorflow.utils.research`.
"""

from __future__ import annotations

from authorflow.agents.base import BaseAgent
from authorflow.context.assembler import research_payload
from authorflow.context.requests import ResearchTopicRequest
from authorflow.llm.client import CompletionClient
from authorflow.logging import get_logger
from authorflow.models.section import ResearchResult
from authorflow.utils.ids import research_stamp
from authorflow.utils.research import (
    DEFAULT_SUMMARY,
    PLACEHOLDER_URL,
    extract_candidates,
    merge_citations,
)

logger = get_logger(__name__)


class ResearchAgent(BaseAgent):
    """Research agent."""

    name = "researcher"

    def __init__(
        self,
        llm: CompletionClient,
        *,
        temperature: float = 0.2,
        placeholder_url: str = PLACEHOLDER_URL,
        default_summary: str = DEFAULT_SUMMARY,
    ) -> None:
        super().__init__(llm, temperature=temperature)
        self._placeholder_url = placeholder_url
        self._default_summary = default_summary

    async def research_topic(self, request: ResearchTopicRequest) -> list[ResearchResult]:
        completion = await self._invoke(research_payload(request), action="research topic with AI Agent")
        candidates = extract_candidates(completion.text, default_summary=self._default_summary)
        results = merge_citations(
            candidates,
            completion.citations,
            stamp=research_stamp(),
            max_results=request.max_results,
            placeholder_url=self._placeholder_url,
        )
        logger.info(
            "Research decoded %d candidates, kept %d (%d citations)",
            len(candidates),
            len(results),
            len(completion.citations),
        )
        return results
