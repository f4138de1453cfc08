"""Prompt assembly for the outliner, writer and research agents."""

from __future__ import annotations

from authorflow.context.assembler import (
    AgentContextView,
    assemble_outliner_request,
    assemble_tailored_prompt_request,
    assemble_writer_context,
    build_global_knowledge_context,
    build_reference_context,
    build_research_context,
    compose_system_instruction,
    default_instruction,
    document_title,
    describe_outliner_context,
    describe_writer_context,
    fallback_system_prompt,
    initial_draft_payload,
    resolve_system_instruction,
    outliner_payload,
    parse_payload,
    research_payload,
    tailored_prompt_payload,
    writer_payload,
)
from authorflow.context.requests import (
    CreateTailoredPromptRequest,
    GenerateContentRequest,
    GenerateInitialDraftRequest,
    GenerateOutlineRequest,
    ParseOutlineRequest,
    PromptPayload,
    ResearchTopicRequest,
    WriterContext,
)

__all__ = [
    "AgentContextView",
    "CreateTailoredPromptRequest",
    "GenerateContentRequest",
    "GenerateInitialDraftRequest",
    "GenerateOutlineRequest",
    "ParseOutlineRequest",
    "PromptPayload",
    "ResearchTopicRequest",
    "WriterContext",
    "assemble_outliner_request",
    "assemble_tailored_prompt_request",
    "assemble_writer_context",
    "build_global_knowledge_context",
    "build_reference_context",
    "build_research_context",
    "compose_system_instruction",
    "default_instruction",
    "document_title",
    "describe_outliner_context",
    "describe_writer_context",
    "fallback_system_prompt",
    "initial_draft_payload",
    "resolve_system_instruction",
    "outliner_payload",
    "parse_payload",
    "research_payload",
    "tailored_prompt_payload",
    "writer_payload",
]
