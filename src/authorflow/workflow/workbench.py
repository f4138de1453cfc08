"""Workbench: the command surface consumed by UIs.

The workbench holds the current :class:`WorkbenchState` and replaces it on every command.
Agent calls run between two transitions: the target is captured by id when the call starts
and the result is applied to whatever the state is when the call finishes. Nothing from a
failed call is merged except the chat-log entry reporting the failure.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from authorflow.agents.base import AgentError
from authorflow.agents.outliner import OutlinerAgent
from authorflow.agents.researcher import ResearchAgent
from authorflow.agents.writer import WriterAgent
from authorflow.config import Settings
from authorflow.context.assembler import (
    AgentContextView,
    assemble_outliner_request,
    assemble_tailored_prompt_request,
    assemble_writer_context,
    default_instruction,
    describe_outliner_context,
    describe_writer_context,
    fallback_system_prompt,
    resolve_system_instruction,
)
from authorflow.context.requests import (
    GenerateContentRequest,
    GenerateInitialDraftRequest,
    ParseOutlineRequest,
    ResearchTopicRequest,
)
from authorflow.events import Notification, NotificationLevel, NotificationTopic
from authorflow.export import export_completed_document, export_filename
from authorflow.llm.client import CompletionClient
from authorflow.logging import get_logger, workflow_context
from authorflow.memory.section_store import get_section
from authorflow.models.outline import OutlineNode
from authorflow.models.project import Document, KnowledgeFile, Project
from authorflow.models.section import Message, ResearchResult, SessionFile
from authorflow.outline.tree import find, has_completed
from authorflow.recording.file_recorder import FileNotificationRecorder
from authorflow.utils.ids import new_entity_id
from authorflow.workflow import commands as c
from authorflow.workflow.errors import (
    AgentBusyError,
    NoActiveDocumentError,
    NoActiveProjectError,
    NoActiveSectionError,
    UnknownEntityError,
)
from authorflow.workflow.reducer import reduce
from authorflow.workflow.state import (
    OUTLINE_TARGET,
    AgentKind,
    AgentStatus,
    WorkbenchState,
    agent_key,
)

logger = get_logger(__name__)

OUTLINE_UPDATED_REPLY = (
    'I have updated the draft outline in the workspace. Edit it or give more instructions. '
    'Click "Finalize Outline" when satisfied.'
)
OUTLINER_ERROR_REPLY = "Sorry, I encountered an error."
OUTLINE_FINALIZED_REPLY = "Outline finalized! Select a section to start writing."


@dataclass(frozen=True)
class DocumentRef:
    """Stable address of a document."""

    project_id: str
    document_id: str


class Workbench:
    """Project/document/section state machine with agent orchestration."""

    def __init__(
        self,
        llm: CompletionClient,
        settings: Settings | None = None,
        *,
        state: WorkbenchState | None = None,
        recorder: FileNotificationRecorder | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._state = state or WorkbenchState()
        self._recorder = recorder
        self._notifications: deque[Notification] = deque(maxlen=self._settings.notification_history)
        self._seq = 0

        self._outliner = OutlinerAgent(
            llm,
            temperature=self._settings.outliner_temperature,
            parser_temperature=self._settings.parser_temperature,
        )
        self._writer = WriterAgent(llm, temperature=self._settings.writer_temperature)
        self._researcher = ResearchAgent(
            llm,
            placeholder_url=self._settings.research_placeholder_url,
            default_summary=self._settings.research_default_summary,
        )

    # -- state ----------------------------------------------------------------------------------

    @property
    def state(self) -> WorkbenchState:
        return self._state

    @property
    def notifications(self) -> list[Notification]:
        """The most recent notifications, oldest first."""

        return list(self._notifications)

    def dispatch(self, command: Any) -> WorkbenchState:
        """Apply one command and return the new state."""

        self._state = reduce(self._state, command)
        return self._state

    def agent_status(self, kind: AgentKind, target: str = OUTLINE_TARGET) -> AgentStatus:
        """Status of an agent on a target of the active document."""

        ref = self._document_ref()
        if ref is None:
            return AgentStatus.IDLE
        return self._state.status_of(agent_key(kind, ref.project_id, ref.document_id, target))

    def _notify(
        self, level: NotificationLevel, topic: NotificationTopic, message: str, **metadata: Any
    ) -> Notification:
        self._seq += 1
        notification = Notification(
            seq=self._seq,
            level=level,
            topic=topic,
            message=message,
            metadata=metadata,
        )
        self._notifications.append(notification)
        if self._recorder is not None:
            self._recorder.append(notification)
        return notification

    def _document_ref(self) -> DocumentRef | None:
        if self._state.active_document is None:
            return None
        return DocumentRef(self._state.active_project_id, self._state.active_document_id)  # type: ignore[arg-type]

    def _require_project(self) -> Project:
        project = self._state.active_project
        if project is None:
            raise NoActiveProjectError("No project is open.")
        return project

    def _require_document(self) -> DocumentRef:
        self._require_project()
        ref = self._document_ref()
        if ref is None:
            raise NoActiveDocumentError("No document is selected.")
        return ref

    def _require_section(self) -> tuple[DocumentRef, str]:
        ref = self._require_document()
        if self._state.active_section_id is None:
            raise NoActiveSectionError("No section is selected.")
        return ref, self._state.active_section_id

    def _lookup(self, ref: DocumentRef) -> tuple[Project, Document] | None:
        project = self._state.projects.get(ref.project_id)
        if project is None:
            return None
        document = project.documents.get(ref.document_id)
        if document is None:
            return None
        return project, document

    def _current(self, ref: DocumentRef) -> tuple[Project, Document]:
        found = self._lookup(ref)
        if found is None:
            raise UnknownEntityError(f"Document {ref.document_id} no longer exists.")
        return found

    def _begin(self, key: str) -> None:
        if self._state.status_of(key) is AgentStatus.THINKING:
            raise AgentBusyError(f"Agent is already working: {key}")
        self.dispatch(c.SetAgentStatus(key=key, status=AgentStatus.THINKING))

    def _finish(self, key: str, ok: bool) -> None:
        self.dispatch(c.SetAgentStatus(key=key, status=AgentStatus.IDLE if ok else AgentStatus.ERROR))

    # -- projects -------------------------------------------------------------------------------

    def create_project(self, name: str) -> Project:
        project_id = new_entity_id()
        self.dispatch(c.CreateProject(project_id=project_id, name=name, document_id=new_entity_id()))
        self._notify(NotificationLevel.SUCCESS, NotificationTopic.PROJECT, f'Project "{name}" created!')
        return self._state.projects[project_id]

    def load_project(self, project: Project) -> None:
        self.dispatch(c.LoadProject(project=project))

    def select_project(self, project_id: str) -> None:
        if project_id not in self._state.projects:
            raise UnknownEntityError(f"Unknown project: {project_id}")
        self.dispatch(c.SelectProject(project_id=project_id))

    def close_project(self) -> None:
        self.dispatch(c.CloseProject())

    def set_coordinator_prompt(self, text: str) -> None:
        project = self._require_project()
        self.dispatch(c.SetCoordinatorPrompt(project_id=project.id, text=text))

    def set_global_knowledge_files(self, files: Iterable[KnowledgeFile]) -> None:
        project = self._require_project()
        self.dispatch(c.SetGlobalKnowledgeFiles(project_id=project.id, files=tuple(files)))

    def add_global_knowledge_files(self, files: Iterable[KnowledgeFile]) -> None:
        project = self._require_project()
        added = tuple(files)
        self.dispatch(c.AddGlobalKnowledgeFiles(project_id=project.id, files=added))
        self._notify(
            NotificationLevel.SUCCESS,
            NotificationTopic.KNOWLEDGE,
            f"{len(added)} global file(s) added!",
        )

    def create_document(self, name: str) -> Document:
        project = self._require_project()
        document_id = new_entity_id()
        self.dispatch(c.CreateDocument(project_id=project.id, document_id=document_id, name=name))
        self.dispatch(c.SelectDocument(project_id=project.id, document_id=document_id))
        return self._state.projects[project.id].documents[document_id]

    def select_document(self, document_id: str) -> None:
        project = self._require_project()
        if document_id not in project.documents:
            raise UnknownEntityError(f"Unknown document: {document_id}")
        self.dispatch(c.SelectDocument(project_id=project.id, document_id=document_id))

    def delete_document(self, document_id: str) -> None:
        project = self._require_project()
        if document_id not in project.documents:
            raise UnknownEntityError(f"Unknown document: {document_id}")
        self.dispatch(c.DeleteDocument(project_id=project.id, document_id=document_id))

    def set_document_coordinator_prompt(self, text: str | None) -> None:
        ref = self._require_document()
        self.dispatch(c.SetDocumentCoordinatorPrompt(ref.project_id, ref.document_id, text=text))

    # -- outline --------------------------------------------------------------------------------

    def edit_outline_draft(self, text: str) -> None:
        ref = self._require_document()
        self.dispatch(c.EditOutlineDraft(ref.project_id, ref.document_id, text=text))

    async def submit_outliner_command(self, text: str) -> str | None:
        """Ask the outliner to rewrite the draft. Returns the new draft, or ``None`` on failure."""

        ref = self._require_document()
        key = agent_key(AgentKind.OUTLINER, ref.project_id, ref.document_id)
        self._begin(key)
        ok = False
        try:
            with workflow_context(project_id=ref.project_id):
                self.dispatch(
                    c.AppendOutlinerMessage(
                        ref.project_id, ref.document_id, message=Message(sender="user", text=text)
                    )
                )
                project, document = self._current(ref)
                request = assemble_outliner_request(project, document, text)
                try:
                    draft = await self._outliner.generate_outline(request)
                except AgentError as exc:
                    self.dispatch(
                        c.AppendOutlinerMessage(
                            ref.project_id,
                            ref.document_id,
                            message=Message(sender="agent", text=OUTLINER_ERROR_REPLY),
                        )
                    )
                    self._notify(
                        NotificationLevel.ERROR,
                        NotificationTopic.OUTLINER,
                        "Failed to update outline draft.",
                        error=str(exc),
                    )
                    return None

                self.dispatch(
                    c.ApplyOutlineDraft(
                        ref.project_id,
                        ref.document_id,
                        draft=draft,
                        reply=Message(sender="agent", text=OUTLINE_UPDATED_REPLY),
                    )
                )
                self._notify(NotificationLevel.SUCCESS, NotificationTopic.OUTLINER, "Outline draft updated!")
                ok = True
                return draft
        finally:
            self._finish(key, ok)

    async def finalize_outline(self) -> tuple[OutlineNode, ...] | None:
        """Parse the draft into the outline tree and clear the draft.

        A blank draft is ignored. On failure the draft and the existing tree are untouched.
        """

        ref = self._require_document()
        _, document = self._current(ref)
        draft = document.outline_draft
        if not draft.strip():
            logger.info("Finalize ignored: outline draft is empty")
            return None

        key = agent_key(AgentKind.OUTLINER, ref.project_id, ref.document_id)
        self._begin(key)
        ok = False
        try:
            with workflow_context(project_id=ref.project_id):
                self._notify(NotificationLevel.INFO, NotificationTopic.FINALIZE, "Finalizing outline...")
                try:
                    outline = await self._outliner.parse_outline(ParseOutlineRequest(outline_text=draft))
                except AgentError as exc:
                    self._notify(
                        NotificationLevel.ERROR,
                        NotificationTopic.FINALIZE,
                        f"Failed to finalize outline: {exc}",
                    )
                    return None

                self.dispatch(
                    c.ApplyFinalizedOutline(
                        ref.project_id,
                        ref.document_id,
                        outline=outline,
                        reply=Message(sender="agent", text=OUTLINE_FINALIZED_REPLY),
                    )
                )
                self._notify(
                    NotificationLevel.SUCCESS, NotificationTopic.FINALIZE, "Outline finalized and loaded!"
                )
                ok = True
                return outline
        finally:
            self._finish(key, ok)

    # -- sections -------------------------------------------------------------------------------

    async def select_section(self, section_id: str) -> None:
        """Make a section active and prepare its writer persona on first visit."""

        ref = self._require_document()
        project, document = self._current(ref)
        if find(document.outline, section_id) is None:
            logger.warning("Ignoring selection of unknown section %s", section_id)
            return

        self.dispatch(c.SelectSection(ref.project_id, ref.document_id, section_id=section_id))
        if get_section(document.contents, section_id).system_prompt:
            return

        key = agent_key(AgentKind.WRITER, ref.project_id, ref.document_id, section_id)
        if self._state.status_of(key) is AgentStatus.THINKING:
            return
        request = assemble_tailored_prompt_request(project, document, section_id)
        if request is None:
            return

        self._begin(key)
        ok = False
        try:
            with workflow_context(project_id=ref.project_id, section_id=section_id):
                self._notify(
                    NotificationLevel.INFO,
                    NotificationTopic.PROMPT,
                    "Crafting a tailored prompt for the agent...",
                )
                try:
                    prompt = await self._writer.create_tailored_prompt(request)
                    self._notify(NotificationLevel.SUCCESS, NotificationTopic.PROMPT, "Agent is ready!")
                except AgentError as exc:
                    prompt = fallback_system_prompt(request.coordinator_prompt, request.section_title)
                    self._notify(
                        NotificationLevel.ERROR,
                        NotificationTopic.PROMPT,
                        "Could not prepare the agent. Using default prompt.",
                        error=str(exc),
                    )
                self.dispatch(
                    c.ApplySystemPrompt(ref.project_id, ref.document_id, section_id=section_id, prompt=prompt)
                )
                ok = True
        finally:
            self._finish(key, ok)

    def deselect_section(self) -> None:
        self.dispatch(c.DeselectSection())

    def edit_section_content(self, text: str) -> None:
        ref, section_id = self._require_section()
        self.dispatch(c.EditSectionContent(ref.project_id, ref.document_id, section_id=section_id, text=text))

    def toggle_context_reference(self, section_id: str, ref_id: str, included: bool) -> None:
        ref = self._require_document()
        self.dispatch(
            c.ToggleContextReference(
                ref.project_id, ref.document_id, section_id=section_id, ref_id=ref_id, included=included
            )
        )

    def set_session_files(self, section_id: str, files: Iterable[SessionFile]) -> None:
        ref = self._require_document()
        _, document = self._current(ref)
        if find(document.outline, section_id) is None:
            raise UnknownEntityError(f"Unknown section: {section_id}")
        self.dispatch(
            c.SetSessionFiles(ref.project_id, ref.document_id, section_id=section_id, files=tuple(files))
        )

    def invalidate_system_prompt(self, section_id: str) -> None:
        ref = self._require_document()
        self.dispatch(c.InvalidateSystemPrompt(ref.project_id, ref.document_id, section_id=section_id))

    async def generate_for_section(
        self, prompt: str | None = None, context_ids: Sequence[str] | None = None
    ) -> str | None:
        """Run the writer on the active section.

        ``context_ids`` overrides the section's stored references for this turn. Returns the
        generated content, or ``None`` when the call failed.
        """

        ref, section_id = self._require_section()
        _, document = self._current(ref)
        node = find(document.outline, section_id)
        if node is None:
            raise UnknownEntityError(f"Unknown section: {section_id}")

        key = agent_key(AgentKind.WRITER, ref.project_id, ref.document_id, section_id)
        self._begin(key)
        ok = False
        try:
            with workflow_context(project_id=ref.project_id, section_id=section_id):
                instruction = prompt.strip() if prompt and prompt.strip() else default_instruction(node.title)
                had_history = bool(get_section(document.contents, section_id).messages)
                self.dispatch(
                    c.BeginSectionGeneration(
                        ref.project_id,
                        ref.document_id,
                        section_id=section_id,
                        message=Message(sender="user", text=instruction),
                    )
                )

                project, document = self._current(ref)
                context = assemble_writer_context(project, document, section_id, context_ids)
                system = resolve_system_instruction(project, document, section_id)
                try:
                    if had_history:
                        text = await self._writer.generate_content(
                            GenerateContentRequest(
                                messages=get_section(document.contents, section_id).messages,
                                context=context,
                                system_instruction=system,
                            )
                        )
                    else:
                        text = await self._writer.generate_initial_draft(
                            GenerateInitialDraftRequest(
                                instruction=instruction, context=context, system_instruction=system
                            )
                        )
                except AgentError as exc:
                    self.dispatch(
                        c.AppendSectionMessage(
                            ref.project_id,
                            ref.document_id,
                            section_id=section_id,
                            message=Message(sender="agent", text=f"I'm sorry, I encountered an error: {exc}"),
                        )
                    )
                    self._notify(
                        NotificationLevel.ERROR, NotificationTopic.WRITER, "Failed to generate content."
                    )
                    return None

                self.dispatch(
                    c.ApplyGeneratedContent(
                        ref.project_id,
                        ref.document_id,
                        section_id=section_id,
                        content=text,
                        reply=Message(sender="agent", text=text),
                    )
                )
                ok = True
                return text
        finally:
            self._finish(key, ok)

    async def submit_research(self, query: str) -> list[ResearchResult] | None:
        """Research a topic for the active section; results replace the previous ones."""

        ref, section_id = self._require_section()
        key = agent_key(AgentKind.RESEARCH, ref.project_id, ref.document_id, section_id)
        self._begin(key)
        ok = False
        try:
            with workflow_context(project_id=ref.project_id, section_id=section_id):
                request = ResearchTopicRequest(topic=query, max_results=self._settings.research_max_results)
                try:
                    results = await self._researcher.research_topic(request)
                except AgentError as exc:
                    self._notify(
                        NotificationLevel.ERROR, NotificationTopic.RESEARCH, "Research failed.", error=str(exc)
                    )
                    return None

                self.dispatch(
                    c.ApplyResearchResults(
                        ref.project_id, ref.document_id, section_id=section_id, results=tuple(results)
                    )
                )
                self._notify(
                    NotificationLevel.SUCCESS, NotificationTopic.RESEARCH, f"Research complete for: {query}"
                )
                ok = True
                return results
        finally:
            self._finish(key, ok)

    def commit_section(self) -> bool:
        """Mark the active section ``Completed``. Returns False when there was nothing to commit."""

        ref, section_id = self._require_section()
        before = self._state
        self.dispatch(c.CommitSection(ref.project_id, ref.document_id, section_id=section_id))
        if self._state is before:
            _, document = self._current(ref)
            if not get_section(document.contents, section_id).content.strip():
                self._notify(NotificationLevel.ERROR, NotificationTopic.COMMIT, "No content to commit.")
                return False
            return True
        self._notify(NotificationLevel.SUCCESS, NotificationTopic.COMMIT, "Content committed successfully!")
        return True

    # -- export and inspection ------------------------------------------------------------------

    def can_export(self) -> bool:
        document = self._state.active_document
        return document is not None and has_completed(document.outline)

    def export_completed_document(self) -> str:
        ref = self._require_document()
        _, document = self._current(ref)
        markdown = export_completed_document(document.outline, document.contents)
        if not markdown.strip():
            self._notify(NotificationLevel.ERROR, NotificationTopic.EXPORT, "No completed content to export.")
            return ""
        self._notify(NotificationLevel.SUCCESS, NotificationTopic.EXPORT, "Document exported!")
        return markdown

    def export_filename(self) -> str:
        return export_filename(self._require_project().name)

    def describe_context(self) -> AgentContextView | None:
        """Context of the writer for the active section, or of the outliner otherwise."""

        ref = self._document_ref()
        if ref is None:
            return None
        project, document = self._current(ref)
        if self._state.active_section_id is not None:
            return describe_writer_context(project, document, self._state.active_section_id)
        return describe_outliner_context(project, document)
