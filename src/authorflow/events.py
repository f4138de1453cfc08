"""User-visible notifications.

The workbench emits one notification per user-visible outcome (success or failure of a
command). Notifications can be recorded to JSONL so a session can be audited later.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationLevel(str, Enum):
    """Severity shown to the user."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class NotificationTopic(str, Enum):
    """Which part of the workflow produced a notification."""

    PROJECT = "project"
    KNOWLEDGE = "knowledge"
    OUTLINER = "outliner"
    FINALIZE = "finalize"
    PROMPT = "prompt"
    WRITER = "writer"
    RESEARCH = "research"
    COMMIT = "commit"
    EXPORT = "export"


class Notification(BaseModel):
    """A single notification."""

    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))

    level: NotificationLevel
    topic: NotificationTopic
    message: str
    metadata: dict[str, str | int | float | bool | None] = Field(default_factory=dict)
