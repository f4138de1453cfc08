"""OpenAI-compatible LLM client.

This wraps the `openai` Python SDK behind a minimal text-completion contract: chat turns and an
optional system instruction in, text and optional grounding citations out. Plain completions use
the Chat Completions API; grounded completions use the Responses API with the hosted web search
tool, whose ``url_citation`` annotations become :class:`GroundingCitation` entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Protocol, Sequence

from openai import OpenAI

from authorflow.config import Settings
from authorflow.logging import get_logger

logger = get_logger(__name__)

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A chat message."""

    role: Role
    content: str


@dataclass(frozen=True)
class GroundingCitation:
    """A source reference returned alongside a search-grounded completion."""

    title: str | None = None
    uri: str | None = None


@dataclass(frozen=True)
class Completion:
    """Model output."""

    text: str
    citations: tuple[GroundingCitation, ...] = field(default_factory=tuple)


class CompletionClient(Protocol):
    """Anything the agents can send a prompt to."""

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system: str | None = None,
        temperature: float = 0.2,
        grounded: bool = False,
    ) -> Completion:
        """Generate a completion."""


class LLMClient:
    """LLM client using the OpenAI-compatible APIs."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        if not settings.openai_api_key:
            raise ValueError(
                "Missing AUTHORFLOW_OPENAI_API_KEY. "
                "Set it in environment variables or a .env file."
            )

        self._client = OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            max_retries=settings.openai_max_retries,
        )

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system: str | None = None,
        temperature: float = 0.2,
        grounded: bool = False,
    ) -> Completion:
        """Generate a completion.

        Args:
            messages: Chat turns, oldest first.
            system: Optional system instruction.
            temperature: Sampling temperature.
            grounded: Enable web search and collect citations.

        Returns:
            The completion text and any grounding citations.
        """

        if grounded:
            return self._complete_grounded(messages, system=system, temperature=temperature)

        payload: list[dict[str, str]] = []
        if system:
            payload.append({"role": "system", "content": system})
        payload.extend({"role": m.role, "content": m.content} for m in messages)
        resp = self._client.chat.completions.create(
            model=self._settings.openai_model,
            messages=payload,
            temperature=temperature,
            timeout=self._settings.openai_timeout_s,
        )
        choice = resp.choices[0]
        if not choice.message or choice.message.content is None:
            return Completion(text="")
        return Completion(text=choice.message.content)

    def _complete_grounded(
        self, messages: Sequence[ChatMessage], *, system: str | None, temperature: float
    ) -> Completion:
        resp = self._client.responses.create(
            model=self._settings.openai_search_model,
            input=[{"role": m.role, "content": m.content} for m in messages],
            instructions=system,
            tools=[{"type": "web_search_preview"}],
            temperature=temperature,
            timeout=self._settings.openai_timeout_s,
        )
        citations = tuple(_iter_url_citations(resp.output))
        logger.debug("Grounded completion returned %d citations", len(citations))
        return Completion(text=resp.output_text or "", citations=citations)


def _iter_url_citations(output: Iterable[Any]) -> Iterable[GroundingCitation]:
    """Distinct cited sources in the order they are first cited.

    A source cited several times in one answer is yielded once, so the n-th citation is the
    n-th distinct source rather than the n-th annotation. Research results are paired with
    citations by that position.
    """

    seen: set[str] = set()
    for item in output:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for ann in getattr(part, "annotations", None) or []:
                if getattr(ann, "type", None) != "url_citation":
                    continue
                url = getattr(ann, "url", None)
                if not url or url in seen:
                    continue
                seen.add(url)
                yield GroundingCitation(title=getattr(ann, "title", None), uri=url)
