"""Outline tree models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SectionStatus(str, Enum):
    """Per-section lifecycle. Transitions only move forward."""

    OUTLINE = "outline"
    WRITING = "writing"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [SectionStatus.OUTLINE, SectionStatus.WRITING, SectionStatus.COMPLETED]


class OutlineNode(BaseModel):
    """One heading of the finalized document outline.

    ``id`` is the hierarchical path of 1-based sibling indices (``"2.1"``) and ``level`` is
    the depth from the top of the forest (0 for roots). Nodes are immutable; updates build
    new nodes along the path to the changed one.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    level: int = Field(ge=0)
    status: SectionStatus = SectionStatus.OUTLINE
    children: tuple["OutlineNode", ...] = ()


Outline = tuple[OutlineNode, ...]
