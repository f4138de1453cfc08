"""Pydantic models used across the project."""

from __future__ import annotations

from authorflow.models.outline import Outline, OutlineNode, SectionStatus
from authorflow.models.project import DEFAULT_COORDINATOR_PROMPT, Document, KnowledgeFile, Project
from authorflow.models.section import Message, ResearchResult, SectionContent, SessionFile

__all__ = [
    "DEFAULT_COORDINATOR_PROMPT",
    "Document",
    "KnowledgeFile",
    "Message",
    "Outline",
    "OutlineNode",
    "Project",
    "ResearchResult",
    "SectionContent",
    "SectionStatus",
    "SessionFile",
]
