"""Typed requests for the agent invocation contracts.

Each request carries fully resolved text; building one never touches the model. The context
assembler creates them from workflow state and turns them into :class:`PromptPayload` values.
"""

from __future__ import annotations

from dataclasses import dataclass

from authorflow.llm.client import ChatMessage
from authorflow.models.section import Message


@dataclass(frozen=True)
class PromptPayload:
    """Exactly what is sent to the model for one call."""

    messages: tuple[ChatMessage, ...]
    system: str | None = None
    grounded: bool = False


@dataclass(frozen=True)
class GenerateOutlineRequest:
    """Outliner turn: rewrite the whole markdown outline."""

    outline_draft: str
    instruction: str
    coordinator_prompt: str


@dataclass(frozen=True)
class ParseOutlineRequest:
    """Convert a markdown outline into the structured forest."""

    outline_text: str


@dataclass(frozen=True)
class WriterContext:
    """Context parts spliced into the writer's latest user turn, in prompt order."""

    global_knowledge: str = ""
    research: str = ""
    references: str = ""


@dataclass(frozen=True)
class GenerateContentRequest:
    """Writer turn continuing a section conversation."""

    messages: tuple[Message, ...]
    context: WriterContext
    system_instruction: str | None = None


@dataclass(frozen=True)
class GenerateInitialDraftRequest:
    """Writer single-turn draft for a section with no prior conversation."""

    instruction: str
    context: WriterContext
    system_instruction: str | None = None


@dataclass(frozen=True)
class ResearchTopicRequest:
    """Grounded web research on one topic."""

    topic: str
    max_results: int = 3


@dataclass(frozen=True)
class CreateTailoredPromptRequest:
    """Ask for a section-specific writer persona."""

    document_title: str
    outline_structure: str
    section_title: str
    coordinator_prompt: str
