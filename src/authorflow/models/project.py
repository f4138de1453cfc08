"""Project and document models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from authorflow.models.outline import OutlineNode
from authorflow.models.section import Message, SectionContent

DEFAULT_COORDINATOR_PROMPT = (
    "You are the Coordinator Agent for a content authoring project. Your master instruction is "
    "to ensure all generated content is clear, coherent, and consistent. The overall goal is to "
    "produce a high-quality, professional document."
)


class KnowledgeFile(BaseModel):
    """A project-level knowledge source and its extracted text."""

    model_config = ConfigDict(frozen=True)

    name: str
    text: str


class Document(BaseModel):
    """One authoring unit (a "flow"): an outline, its section contents and the outliner chat."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    coordinator_prompt: str | None = None
    outline: tuple[OutlineNode, ...] = ()
    contents: dict[str, SectionContent] = Field(default_factory=dict)
    outline_draft: str = ""
    outliner_messages: tuple[Message, ...] = ()


class Project(BaseModel):
    """A project owns its documents and the project-wide coordinator directive."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    coordinator_prompt: str = DEFAULT_COORDINATOR_PROMPT
    global_knowledge_files: tuple[KnowledgeFile, ...] = ()
    global_knowledge_context: str = ""
    documents: dict[str, Document] = Field(default_factory=dict)

    def effective_coordinator_prompt(self, document: Document) -> str:
        """Return the document override when set, else the project directive."""

        if document.coordinator_prompt is not None:
            return document.coordinator_prompt
        return self.coordinator_prompt
