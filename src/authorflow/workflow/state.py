"""Workbench state container."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from authorflow.models.project import Document, Project

OUTLINE_TARGET = "outline"


class AgentKind(str, Enum):
    OUTLINER = "outliner"
    WRITER = "writer"
    RESEARCH = "research"


class AgentStatus(str, Enum):
    """``ERROR`` accepts the next command exactly like ``IDLE``."""

    IDLE = "idle"
    THINKING = "thinking"
    ERROR = "error"


def agent_key(kind: AgentKind, project_id: str, document_id: str, target: str = OUTLINE_TARGET) -> str:
    """Key of one agent working on one target (a section id, or the outline)."""

    return f"{kind.value}:{project_id}:{document_id}:{target}"


class WorkbenchState(BaseModel):
    """Everything the UI renders. Replaced wholesale on every transition."""

    model_config = ConfigDict(frozen=True)

    projects: dict[str, Project] = Field(default_factory=dict)
    active_project_id: str | None = None
    active_document_id: str | None = None
    active_section_id: str | None = None
    agent_status: dict[str, AgentStatus] = Field(default_factory=dict)

    @property
    def active_project(self) -> Project | None:
        if self.active_project_id is None:
            return None
        return self.projects.get(self.active_project_id)

    @property
    def active_document(self) -> Document | None:
        project = self.active_project
        if project is None or self.active_document_id is None:
            return None
        return project.documents.get(self.active_document_id)

    def status_of(self, key: str) -> AgentStatus:
        return self.agent_status.get(key, AgentStatus.IDLE)

    def snapshot(self) -> dict[str, str | int | None]:
        return {
            "projects": len(self.projects),
            "active_project_id": self.active_project_id,
            "active_document_id": self.active_document_id,
            "active_section_id": self.active_section_id,
            "busy_agents": sum(1 for s in self.agent_status.values() if s is AgentStatus.THINKING),
        }
