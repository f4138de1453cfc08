"""Per-section content models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Sender = Literal["user", "agent"]


class Message(BaseModel):
    """One chat turn in a section or outliner conversation."""

    model_config = ConfigDict(frozen=True)

    sender: Sender
    text: str


class ResearchResult(BaseModel):
    """A summarized web result attached to a section."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    url: str
    summary: str


class SessionFile(BaseModel):
    """An artifact uploaded for one section's working session. Never persisted."""

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = Field(default=0, ge=0)
    media_type: str | None = None


class SectionContent(BaseModel):
    """Working state of one outline section, keyed by the section id."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    messages: tuple[Message, ...] = ()
    context_ids: tuple[str, ...] = ()
    session_files: tuple[SessionFile, ...] = Field(default=(), exclude=True)
    research_results: tuple[ResearchResult, ...] = ()
    system_prompt: str | None = None
