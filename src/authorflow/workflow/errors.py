"""Workflow errors."""

from __future__ import annotations


class WorkflowError(RuntimeError):
    """A command cannot run in the current workflow state."""


class NoActiveProjectError(WorkflowError):
    pass


class NoActiveDocumentError(WorkflowError):
    pass


class NoActiveSectionError(WorkflowError):
    pass


class UnknownEntityError(WorkflowError):
    """A project, document or section id does not exist."""


class AgentBusyError(WorkflowError):
    """The same agent is already working on the same target."""
