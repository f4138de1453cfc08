"""Workbench commands.

Commands are plain values; :func:`authorflow.workflow.reducer.reduce` applies them. Commands
that touch a document name it by id so that an agent result is applied to whatever the state
is when the result arrives, not to the state captured when the call started.
"""

from __future__ import annotations

from dataclasses import dataclass

from authorflow.models.outline import OutlineNode
from authorflow.models.project import KnowledgeFile, Project
from authorflow.models.section import Message, ResearchResult, SessionFile
from authorflow.workflow.state import AgentStatus


@dataclass(frozen=True)
class CreateProject:
    project_id: str
    name: str
    document_id: str
    document_name: str = "Main"


@dataclass(frozen=True)
class LoadProject:
    project: Project


@dataclass(frozen=True)
class SelectProject:
    project_id: str


@dataclass(frozen=True)
class CloseProject:
    pass


@dataclass(frozen=True)
class SetCoordinatorPrompt:
    project_id: str
    text: str


@dataclass(frozen=True)
class SetGlobalKnowledgeFiles:
    project_id: str
    files: tuple[KnowledgeFile, ...]


@dataclass(frozen=True)
class AddGlobalKnowledgeFiles:
    project_id: str
    files: tuple[KnowledgeFile, ...]


@dataclass(frozen=True)
class CreateDocument:
    project_id: str
    document_id: str
    name: str


@dataclass(frozen=True)
class SelectDocument:
    project_id: str
    document_id: str


@dataclass(frozen=True)
class DeleteDocument:
    project_id: str
    document_id: str


@dataclass(frozen=True)
class DocumentCommand:
    project_id: str
    document_id: str


@dataclass(frozen=True)
class SetDocumentCoordinatorPrompt(DocumentCommand):
    text: str | None


@dataclass(frozen=True)
class EditOutlineDraft(DocumentCommand):
    text: str


@dataclass(frozen=True)
class AppendOutlinerMessage(DocumentCommand):
    message: Message


@dataclass(frozen=True)
class ApplyOutlineDraft(DocumentCommand):
    draft: str
    reply: Message


@dataclass(frozen=True)
class ApplyFinalizedOutline(DocumentCommand):
    outline: tuple[OutlineNode, ...]
    reply: Message


@dataclass(frozen=True)
class SelectSection(DocumentCommand):
    section_id: str


@dataclass(frozen=True)
class DeselectSection:
    pass


@dataclass(frozen=True)
class EditSectionContent(DocumentCommand):
    section_id: str
    text: str


@dataclass(frozen=True)
class ToggleContextReference(DocumentCommand):
    section_id: str
    ref_id: str
    included: bool


@dataclass(frozen=True)
class SetSessionFiles(DocumentCommand):
    section_id: str
    files: tuple[SessionFile, ...]


@dataclass(frozen=True)
class ApplySystemPrompt(DocumentCommand):
    section_id: str
    prompt: str


@dataclass(frozen=True)
class InvalidateSystemPrompt(DocumentCommand):
    section_id: str


@dataclass(frozen=True)
class BeginSectionGeneration(DocumentCommand):
    """Move the section to ``Writing`` and log the user turn together."""

    section_id: str
    message: Message


@dataclass(frozen=True)
class ApplyGeneratedContent(DocumentCommand):
    section_id: str
    content: str
    reply: Message


@dataclass(frozen=True)
class AppendSectionMessage(DocumentCommand):
    section_id: str
    message: Message


@dataclass(frozen=True)
class ApplyResearchResults(DocumentCommand):
    section_id: str
    results: tuple[ResearchResult, ...]


@dataclass(frozen=True)
class CommitSection(DocumentCommand):
    section_id: str


@dataclass(frozen=True)
class SetAgentStatus:
    key: str
    status: AgentStatus


Command = (
    CreateProject
    | LoadProject
    | SelectProject
    | CloseProject
    | SetCoordinatorPrompt
    | SetGlobalKnowledgeFiles
    | AddGlobalKnowledgeFiles
    | CreateDocument
    | SelectDocument
    | DeleteDocument
    | DocumentCommand
    | DeselectSection
    | SetAgentStatus
)
