"""Agents."""

from __future__ import annotations

from authorflow.agents.base import AgentError, AgentInvocationError, AgentValidationError, BaseAgent
from authorflow.agents.outliner import OutlinerAgent
from authorflow.agents.researcher import ResearchAgent
from authorflow.agents.writer import WriterAgent

__all__ = [
    "AgentError",
    "AgentInvocationError",
    "AgentValidationError",
    "BaseAgent",
    "OutlinerAgent",
    "ResearchAgent",
    "WriterAgent",
]
