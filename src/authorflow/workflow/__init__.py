"""Project/document/section workflow."""

from __future__ import annotations

from authorflow.workflow.errors import (
    AgentBusyError,
    NoActiveDocumentError,
    NoActiveProjectError,
    NoActiveSectionError,
    UnknownEntityError,
    WorkflowError,
)
from authorflow.workflow.reducer import reduce
from authorflow.workflow.state import AgentKind, AgentStatus, WorkbenchState, agent_key
from authorflow.workflow.workbench import Workbench

__all__ = [
    "AgentBusyError",
    "AgentKind",
    "AgentStatus",
    "NoActiveDocumentError",
    "NoActiveProjectError",
    "NoActiveSectionError",
    "UnknownEntityError",
    "Workbench",
    "WorkbenchState",
    "WorkflowError",
    "agent_key",
    "reduce",
]
