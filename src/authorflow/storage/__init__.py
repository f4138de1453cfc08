"""Persistence."""

from __future__ import annotations

from authorflow.storage.project_store import ProjectNotFoundError, ProjectStore

__all__ = ["ProjectNotFoundError", "ProjectStore"]
