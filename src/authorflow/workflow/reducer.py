"""Pure state transitions.

``reduce(state, command)`` returns the next :class:`WorkbenchState`. Nothing is mutated in
place: each transition rebuilds only the project, document, section and outline path it
touches. Commands aimed at a project or document that no longer exists leave the state
unchanged, which is how late agent results for deleted targets are dropped.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from authorflow.context.assembler import build_global_knowledge_context
from authorflow.logging import get_logger
from authorflow.memory.section_store import (
    append_messages,
    get_section,
    set_research_results,
    set_session_files,
    toggle_reference,
    update_section,
)
from authorflow.models.outline import SectionStatus
from authorflow.models.project import Document, KnowledgeFile, Project
from authorflow.models.section import Message
from authorflow.outline.tree import advance_status, find, iter_nodes
from authorflow.workflow import commands as c
from authorflow.workflow.state import AgentStatus, WorkbenchState

logger = get_logger(__name__)

StateHandler = Callable[[WorkbenchState, Any], WorkbenchState]
DocumentHandler = Callable[[Document, Any], Document]

_STATE_HANDLERS: dict[type, StateHandler] = {}
_DOCUMENT_HANDLERS: dict[type, DocumentHandler] = {}

H = TypeVar("H")


def outliner_greeting(project_name: str) -> Message:
    return Message(
        sender="agent",
        text=f'I am the Outliner Agent for project "{project_name}". What is the topic of your document?',
    )


def reduce(state: WorkbenchState, command: Any) -> WorkbenchState:
    """Apply one command.

    Raises:
        TypeError: For objects that are not workbench commands.
    """

    handler = _STATE_HANDLERS.get(type(command))
    if handler is not None:
        return handler(state, command)
    doc_handler = _DOCUMENT_HANDLERS.get(type(command))
    if doc_handler is not None:
        return _apply_to_document(state, command, doc_handler)
    raise TypeError(f"unsupported command: {type(command).__name__}")


def _on_state(command_type: type) -> Callable[[H], H]:
    def register(fn: H) -> H:
        _STATE_HANDLERS[command_type] = fn  # type: ignore[assignment]
        return fn

    return register


def _on_document(command_type: type) -> Callable[[H], H]:
    def register(fn: H) -> H:
        _DOCUMENT_HANDLERS[command_type] = fn  # type: ignore[assignment]
        return fn

    return register


def _replace_project(state: WorkbenchState, project: Project, **updates: Any) -> WorkbenchState:
    projects = dict(state.projects)
    projects[project.id] = project
    return state.model_copy(update={"projects": projects, **updates})


def _apply_to_document(
    state: WorkbenchState, command: c.DocumentCommand, handler: DocumentHandler
) -> WorkbenchState:
    project = state.projects.get(command.project_id)
    document = project.documents.get(command.document_id) if project is not None else None
    if project is None or document is None:
        logger.warning(
            "Dropping %s for missing document %s/%s",
            type(command).__name__,
            command.project_id,
            command.document_id,
        )
        return state

    updated = handler(document, command)
    if updated is document:
        return state

    documents = dict(project.documents)
    documents[document.id] = updated
    new_state = _replace_project(state, project.model_copy(update={"documents": documents}))

    # A restructured outline may no longer contain the selected section.
    if (
        new_state.active_document_id == document.id
        and new_state.active_project_id == project.id
        and new_state.active_section_id is not None
        and find(updated.outline, new_state.active_section_id) is None
    ):
        new_state = new_state.model_copy(update={"active_section_id": None})
    return new_state


# -- projects ---------------------------------------------------------------------------------


@_on_state(c.CreateProject)
def _create_project(state: WorkbenchState, cmd: c.CreateProject) -> WorkbenchState:
    document = Document(
        id=cmd.document_id,
        name=cmd.document_name,
        outliner_messages=(outliner_greeting(cmd.name),),
    )
    project = Project(id=cmd.project_id, name=cmd.name, documents={document.id: document})
    return _replace_project(
        state,
        project,
        active_project_id=project.id,
        active_document_id=document.id,
        active_section_id=None,
    )


@_on_state(c.LoadProject)
def _load_project(state: WorkbenchState, cmd: c.LoadProject) -> WorkbenchState:
    first_document = next(iter(cmd.project.documents), None)
    return _replace_project(
        state,
        cmd.project,
        active_project_id=cmd.project.id,
        active_document_id=first_document,
        active_section_id=None,
    )


@_on_state(c.SelectProject)
def _select_project(state: WorkbenchState, cmd: c.SelectProject) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None:
        logger.warning("Cannot select unknown project %s", cmd.project_id)
        return state
    return state.model_copy(
        update={
            "active_project_id": project.id,
            "active_document_id": next(iter(project.documents), None),
            "active_section_id": None,
        }
    )


@_on_state(c.CloseProject)
def _close_project(state: WorkbenchState, cmd: c.CloseProject) -> WorkbenchState:
    return state.model_copy(
        update={"active_project_id": None, "active_document_id": None, "active_section_id": None}
    )


@_on_state(c.SetCoordinatorPrompt)
def _set_coordinator_prompt(state: WorkbenchState, cmd: c.SetCoordinatorPrompt) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None:
        return state
    return _replace_project(state, project.model_copy(update={"coordinator_prompt": cmd.text}))


def _with_knowledge(project: Project, files: tuple[KnowledgeFile, ...]) -> Project:
    return project.model_copy(
        update={
            "global_knowledge_files": files,
            "global_knowledge_context": build_global_knowledge_context(files),
        }
    )


@_on_state(c.SetGlobalKnowledgeFiles)
def _set_knowledge(state: WorkbenchState, cmd: c.SetGlobalKnowledgeFiles) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None:
        return state
    return _replace_project(state, _with_knowledge(project, tuple(cmd.files)))


@_on_state(c.AddGlobalKnowledgeFiles)
def _add_knowledge(state: WorkbenchState, cmd: c.AddGlobalKnowledgeFiles) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None:
        return state
    files = project.global_knowledge_files + tuple(cmd.files)
    return _replace_project(state, _with_knowledge(project, files))


# -- documents --------------------------------------------------------------------------------


@_on_state(c.CreateDocument)
def _create_document(state: WorkbenchState, cmd: c.CreateDocument) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None or cmd.document_id in project.documents:
        return state
    document = Document(
        id=cmd.document_id,
        name=cmd.name,
        outliner_messages=(outliner_greeting(project.name),),
    )
    documents = dict(project.documents)
    documents[document.id] = document
    return _replace_project(state, project.model_copy(update={"documents": documents}))


@_on_state(c.SelectDocument)
def _select_document(state: WorkbenchState, cmd: c.SelectDocument) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None or cmd.document_id not in project.documents:
        logger.warning("Cannot select unknown document %s", cmd.document_id)
        return state
    return state.model_copy(
        update={
            "active_project_id": project.id,
            "active_document_id": cmd.document_id,
            "active_section_id": None,
        }
    )


@_on_state(c.DeleteDocument)
def _delete_document(state: WorkbenchState, cmd: c.DeleteDocument) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    if project is None or cmd.document_id not in project.documents:
        return state
    documents = {k: v for k, v in project.documents.items() if k != cmd.document_id}
    updates: dict[str, Any] = {}
    if state.active_project_id == project.id and state.active_document_id == cmd.document_id:
        updates = {"active_document_id": next(iter(documents), None), "active_section_id": None}
    return _replace_project(state, project.model_copy(update={"documents": documents}), **updates)


@_on_document(c.SetDocumentCoordinatorPrompt)
def _set_document_coordinator(document: Document, cmd: c.SetDocumentCoordinatorPrompt) -> Document:
    return document.model_copy(update={"coordinator_prompt": cmd.text})


# -- outline ----------------------------------------------------------------------------------


@_on_document(c.EditOutlineDraft)
def _edit_outline_draft(document: Document, cmd: c.EditOutlineDraft) -> Document:
    return document.model_copy(update={"outline_draft": cmd.text})


@_on_document(c.AppendOutlinerMessage)
def _append_outliner_message(document: Document, cmd: c.AppendOutlinerMessage) -> Document:
    return document.model_copy(update={"outliner_messages": document.outliner_messages + (cmd.message,)})


@_on_document(c.ApplyOutlineDraft)
def _apply_outline_draft(document: Document, cmd: c.ApplyOutlineDraft) -> Document:
    return document.model_copy(
        update={
            "outline_draft": cmd.draft,
            "outliner_messages": document.outliner_messages + (cmd.reply,),
        }
    )


@_on_document(c.ApplyFinalizedOutline)
def _apply_finalized_outline(document: Document, cmd: c.ApplyFinalizedOutline) -> Document:
    """Swap in the new tree. A cached persona is dropped when its section's title changed."""

    old_titles = {node.id: node.title for node in iter_nodes(document.outline)}
    contents = document.contents
    for node in iter_nodes(cmd.outline):
        cached = contents.get(node.id)
        if cached is not None and cached.system_prompt and old_titles.get(node.id) != node.title:
            contents = update_section(contents, node.id, system_prompt=None)
    return document.model_copy(
        update={
            "outline": tuple(cmd.outline),
            "contents": contents,
            "outline_draft": "",
            "outliner_messages": (cmd.reply,),
        }
    )


# -- sections ---------------------------------------------------------------------------------


@_on_state(c.SelectSection)
def _select_section(state: WorkbenchState, cmd: c.SelectSection) -> WorkbenchState:
    project = state.projects.get(cmd.project_id)
    document = project.documents.get(cmd.document_id) if project is not None else None
    if document is None or find(document.outline, cmd.section_id) is None:
        logger.warning("Cannot select unknown section %s", cmd.section_id)
        return state
    return state.model_copy(
        update={
            "active_project_id": cmd.project_id,
            "active_document_id": cmd.document_id,
            "active_section_id": cmd.section_id,
        }
    )


@_on_state(c.DeselectSection)
def _deselect_section(state: WorkbenchState, cmd: c.DeselectSection) -> WorkbenchState:
    return state.model_copy(update={"active_section_id": None})


@_on_document(c.EditSectionContent)
def _edit_section_content(document: Document, cmd: c.EditSectionContent) -> Document:
    contents = update_section(document.contents, cmd.section_id, content=cmd.text)
    return document.model_copy(update={"contents": contents})


@_on_document(c.ToggleContextReference)
def _toggle_reference(document: Document, cmd: c.ToggleContextReference) -> Document:
    contents = toggle_reference(
        document.contents, document.outline, cmd.section_id, cmd.ref_id, cmd.included
    )
    if contents is document.contents:
        return document
    return document.model_copy(update={"contents": contents})


@_on_document(c.SetSessionFiles)
def _set_session_files(document: Document, cmd: c.SetSessionFiles) -> Document:
    contents = set_session_files(document.contents, cmd.section_id, cmd.files)
    return document.model_copy(update={"contents": contents})


@_on_document(c.ApplySystemPrompt)
def _apply_system_prompt(document: Document, cmd: c.ApplySystemPrompt) -> Document:
    if get_section(document.contents, cmd.section_id).system_prompt:
        return document
    contents = update_section(document.contents, cmd.section_id, system_prompt=cmd.prompt)
    return document.model_copy(update={"contents": contents})


@_on_document(c.InvalidateSystemPrompt)
def _invalidate_system_prompt(document: Document, cmd: c.InvalidateSystemPrompt) -> Document:
    if cmd.section_id not in document.contents:
        return document
    contents = update_section(document.contents, cmd.section_id, system_prompt=None)
    return document.model_copy(update={"contents": contents})


@_on_document(c.BeginSectionGeneration)
def _begin_generation(document: Document, cmd: c.BeginSectionGeneration) -> Document:
    return document.model_copy(
        update={
            "outline": advance_status(document.outline, cmd.section_id, SectionStatus.WRITING),
            "contents": append_messages(document.contents, cmd.section_id, cmd.message),
        }
    )


@_on_document(c.ApplyGeneratedContent)
def _apply_generated_content(document: Document, cmd: c.ApplyGeneratedContent) -> Document:
    contents = append_messages(document.contents, cmd.section_id, cmd.reply, content=cmd.content)
    return document.model_copy(update={"contents": contents})


@_on_document(c.AppendSectionMessage)
def _append_section_message(document: Document, cmd: c.AppendSectionMessage) -> Document:
    contents = append_messages(document.contents, cmd.section_id, cmd.message)
    return document.model_copy(update={"contents": contents})


@_on_document(c.ApplyResearchResults)
def _apply_research(document: Document, cmd: c.ApplyResearchResults) -> Document:
    contents = set_research_results(document.contents, cmd.section_id, cmd.results)
    return document.model_copy(update={"contents": contents})


@_on_document(c.CommitSection)
def _commit_section(document: Document, cmd: c.CommitSection) -> Document:
    if not get_section(document.contents, cmd.section_id).content.strip():
        logger.info("Nothing to commit for section %s", cmd.section_id)
        return document
    outline = advance_status(document.outline, cmd.section_id, SectionStatus.COMPLETED)
    if outline is document.outline:
        return document
    return document.model_copy(update={"outline": outline})


# -- agents -----------------------------------------------------------------------------------


@_on_state(c.SetAgentStatus)
def _set_agent_status(state: WorkbenchState, cmd: c.SetAgentStatus) -> WorkbenchState:
    statuses = dict(state.agent_status)
    # idle is the default, so only busy and failed agents are tracked
    if cmd.status is AgentStatus.IDLE:
        statuses.pop(cmd.key, None)
    else:
        statuses[cmd.key] = cmd.status
    return state.model_copy(update={"agent_status": statuses})
