"""Context assembly.

Every function here is pure: given the current project, document and target section it
composes the exact text the model receives. Context parts are emitted in a fixed order
(global knowledge, research, cross-references, then the instruction) and any empty part is
left out entirely.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from pydantic import BaseModel, Field

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
from authorflow.llm.client import ChatMessage
from authorflow.memory.section_store import Contents, get_section
from authorflow.models.outline import OutlineNode
from authorflow.models.project import Document, KnowledgeFile, Project
from authorflow.models.section import Message, ResearchResult
from authorflow.outline.tree import find, format_outline
from authorflow.prompts import (
    FALLBACK_PERSONA,
    OUTLINE_PARSER_SYSTEM_PROMPT,
    OUTLINER_SYSTEM_PROMPT,
    RESEARCH_PROMPT,
    TAILORED_PROMPT_REQUEST,
)

SECTION_SEPARATOR = "\n\n---\n\n"
UNTITLED_DOCUMENT = "Untitled Document"
EMPTY_DRAFT = "(empty)"
PENDING_SYSTEM_PROMPT = "Generating tailored prompt..."
EMPTY_DRAFT_HINT = "(The outline draft is empty. Provide a topic to begin.)"


def build_global_knowledge_context(files: Iterable[KnowledgeFile]) -> str:
    """Concatenate project knowledge, each file under a provenance header."""

    return "\n\n".join(
        f"--- GLOBAL KNOWLEDGE SOURCE: {f.name} ---\n{f.text}" for f in files
    )


def build_research_context(results: Iterable[ResearchResult]) -> str:
    return "\n\n".join(
        f"--- RESEARCH RESULT: {r.title} ---\nURL: {r.url}\nSummary: {r.summary}" for r in results
    )


def build_reference_context(
    outline: Sequence[OutlineNode],
    contents: Contents,
    section_id: str,
    context_ids: Iterable[str],
) -> str:
    """Concatenate other sections' content, each under its title.

    The target section itself, ids no longer present in the outline and sections without
    content are skipped. Duplicates are emitted once.
    """

    blocks: list[str] = []
    seen: set[str] = set()
    for ref_id in context_ids:
        if ref_id == section_id or ref_id in seen:
            continue
        seen.add(ref_id)
        node = find(outline, ref_id)
        content = get_section(contents, ref_id).content
        if node is None or not content:
            continue
        blocks.append(f"--- REF: {node.title} ---\n{content}")
    return "\n\n".join(blocks)


def default_instruction(title: str) -> str:
    return f'Write the content for the section titled "{title}".'


def compose_system_instruction(coordinator_prompt: str, persona: str) -> str:
    """Coordinator directive followed by an agent persona."""

    return f"{coordinator_prompt}{SECTION_SEPARATOR}{persona}"


def fallback_system_prompt(coordinator_prompt: str, section_title: str) -> str:
    """Generic writer persona used when the tailored prompt cannot be produced."""

    return f"{coordinator_prompt}\n\n{FALLBACK_PERSONA.format(title=section_title)}"


def compose_user_turn(instruction: str, context: WriterContext) -> str:
    """Wrap an instruction with the non-empty context parts."""

    parts = [p for p in (context.global_knowledge, context.research, context.references) if p]
    framed = f'User instruction: "{instruction}"'
    if not parts:
        return framed
    return "\n\n".join(parts) + "\n\n---\n" + framed


def writer_payload(request: GenerateContentRequest) -> PromptPayload:
    """Chat history with fresh context spliced into the last user turn only.

    Raises:
        ValueError: If the history is empty.
    """

    if not request.messages:
        raise ValueError("Cannot generate content with an empty message history.")

    turns = [_to_chat(m) for m in request.messages]
    last = request.messages[-1]
    if last.sender == "user":
        turns[-1] = ChatMessage(role="user", content=compose_user_turn(last.text, request.context))
    return PromptPayload(messages=tuple(turns), system=request.system_instruction)


def initial_draft_payload(request: GenerateInitialDraftRequest) -> PromptPayload:
    content = compose_user_turn(request.instruction, request.context)
    return PromptPayload(
        messages=(ChatMessage(role="user", content=content),),
        system=request.system_instruction,
    )


def outliner_payload(request: GenerateOutlineRequest) -> PromptPayload:
    prompt = (
        "Current Outline (Markdown):\n"
        f"{request.outline_draft or EMPTY_DRAFT}\n\n"
        "---\n"
        f'User Command: "{request.instruction}"'
    )
    return PromptPayload(
        messages=(ChatMessage(role="user", content=prompt),),
        system=compose_system_instruction(request.coordinator_prompt, OUTLINER_SYSTEM_PROMPT),
    )


def parse_payload(request: ParseOutlineRequest) -> PromptPayload:
    prompt = (
        "Please convert the following Markdown outline to the specified JSON format. "
        "Ensure you add hierarchical numbering to each title.\n\n"
        "Markdown Outline:\n"
        f"{request.outline_text}"
    )
    return PromptPayload(
        messages=(ChatMessage(role="user", content=prompt),),
        system=OUTLINE_PARSER_SYSTEM_PROMPT,
    )


def research_payload(request: ResearchTopicRequest) -> PromptPayload:
    prompt = RESEARCH_PROMPT.format(max_results=request.max_results, topic=request.topic)
    return PromptPayload(messages=(ChatMessage(role="user", content=prompt),), grounded=True)


def tailored_prompt_payload(request: CreateTailoredPromptRequest) -> PromptPayload:
    prompt = TAILORED_PROMPT_REQUEST.format(
        coordinator_prompt=request.coordinator_prompt,
        document_title=request.document_title,
        outline_structure=request.outline_structure,
        section_title=request.section_title,
    )
    return PromptPayload(messages=(ChatMessage(role="user", content=prompt),))


def document_title(document: Document) -> str:
    """The first root heading names the document; fall back to the document name."""

    if document.outline:
        return document.outline[0].title
    return document.name or UNTITLED_DOCUMENT


def assemble_outliner_request(
    project: Project, document: Document, instruction: str
) -> GenerateOutlineRequest:
    return GenerateOutlineRequest(
        outline_draft=document.outline_draft,
        instruction=instruction,
        coordinator_prompt=project.effective_coordinator_prompt(document),
    )


def assemble_tailored_prompt_request(
    project: Project, document: Document, section_id: str
) -> CreateTailoredPromptRequest | None:
    """Build the persona request for a section, or ``None`` if the section is gone."""

    node = find(document.outline, section_id)
    if node is None:
        return None
    return CreateTailoredPromptRequest(
        document_title=document_title(document),
        outline_structure=format_outline(document.outline),
        section_title=node.title,
        coordinator_prompt=project.effective_coordinator_prompt(document),
    )


def assemble_writer_context(
    project: Project,
    document: Document,
    section_id: str,
    context_ids: Iterable[str] | None = None,
) -> WriterContext:
    """Resolve every context part for one section.

    ``context_ids`` defaults to the references stored on the section.
    """

    section = get_section(document.contents, section_id)
    ids = section.context_ids if context_ids is None else tuple(context_ids)
    return WriterContext(
        global_knowledge=project.global_knowledge_context,
        research=build_research_context(section.research_results),
        references=build_reference_context(document.outline, document.contents, section_id, ids),
    )


def resolve_system_instruction(project: Project, document: Document, section_id: str) -> str:
    """Cached tailored prompt, or the generic fallback when none was computed."""

    section = get_section(document.contents, section_id)
    if section.system_prompt:
        return section.system_prompt
    node = find(document.outline, section_id)
    title = node.title if node is not None else section_id
    return fallback_system_prompt(project.effective_coordinator_prompt(document), title)


class ReferenceView(BaseModel):
    title: str
    content: str


class AgentContextView(BaseModel):
    """What an agent will see, for display next to the conversation."""

    coordinator_prompt: str
    global_knowledge: list[str] = Field(default_factory=list)
    system_prompt: str
    document_outline: str
    session_knowledge: list[str] = Field(default_factory=list)
    selected_references: list[ReferenceView] = Field(default_factory=list)
    research_context: list[ResearchResult] = Field(default_factory=list)


def describe_outliner_context(project: Project, document: Document) -> AgentContextView:
    return AgentContextView(
        coordinator_prompt=project.effective_coordinator_prompt(document),
        global_knowledge=[f.name for f in project.global_knowledge_files],
        system_prompt=OUTLINER_SYSTEM_PROMPT,
        document_outline=document.outline_draft or EMPTY_DRAFT_HINT,
    )


def describe_writer_context(
    project: Project, document: Document, section_id: str
) -> AgentContextView | None:
    """Context inspector for the active section; ``None`` if the section does not exist."""

    if find(document.outline, section_id) is None:
        return None
    section = get_section(document.contents, section_id)
    references: list[ReferenceView] = []
    for ref_id in section.context_ids:
        node = find(document.outline, ref_id)
        content = get_section(document.contents, ref_id).content
        if ref_id != section_id and node is not None and content:
            references.append(ReferenceView(title=node.title, content=content))
    return AgentContextView(
        coordinator_prompt=project.effective_coordinator_prompt(document),
        global_knowledge=[f.name for f in project.global_knowledge_files],
        system_prompt=section.system_prompt or PENDING_SYSTEM_PROMPT,
        document_outline=format_outline(document.outline, marker_id=section_id),
        session_knowledge=[f.name for f in section.session_files],
        selected_references=references,
        research_context=list(section.research_results),
    )


def _to_chat(message: Message) -> ChatMessage:
    return ChatMessage(role="user" if message.sender == "user" else "assistant", content=message.text)
