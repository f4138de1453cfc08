"""FastAPI app exposing the authoring workbench."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from authorflow.config import Settings, load_settings
from authorflow.context.assembler import AgentContextView
from authorflow.events import Notification
from authorflow.llm.client import LLMClient
from authorflow.logging import configure_logging, get_logger
from authorflow.memory.section_store import get_section
from authorflow.models.outline import OutlineNode
from authorflow.models.project import Document, KnowledgeFile, Project
from authorflow.models.section import ResearchResult, SessionFile
from authorflow.recording.file_recorder import FileNotificationRecorder
from authorflow.storage.project_store import ProjectNotFoundError, ProjectStore
from authorflow.workflow.errors import AgentBusyError, UnknownEntityError, WorkflowError
from authorflow.workflow.workbench import Workbench


class NameRequest(BaseModel):
    name: str


class TextRequest(BaseModel):
    text: str


class CoordinatorRequest(BaseModel):
    """``None`` clears a document override."""

    text: str | None = None


class KnowledgeRequest(BaseModel):
    files: list[KnowledgeFile]
    replace: bool = False


class GenerateRequest(BaseModel):
    prompt: str | None = None
    context_ids: list[str] | None = None


class ResearchRequest(BaseModel):
    query: str


class ReferenceRequest(BaseModel):
    included: bool = True


class DraftResponse(BaseModel):
    draft: str | None


class ContentResponse(BaseModel):
    content: str | None


class CommitResponse(BaseModel):
    committed: bool


class ProjectSummary(BaseModel):
    id: str
    name: str
    documents: int = Field(ge=0)


def create_app(
    workbench: Workbench | None = None,
    settings: Settings | None = None,
    store: ProjectStore | None = None,
) -> FastAPI:
    """Create FastAPI app.

    Without an explicit workbench one is built from settings, backed by the OpenAI client and
    persisting every change of the active project to the project store.
    """

    if workbench is None:
        settings = settings or load_settings()
        configure_logging(settings.log_level)
        recorder = FileNotificationRecorder(settings.notifications_path) if settings.notifications_path else None
        workbench = Workbench(LLMClient(settings), settings, recorder=recorder)
        store = store or ProjectStore(settings.projects_dir)
    bench = workbench
    logger = get_logger(__name__)

    app = FastAPI(title="AuthorFlow", version="0.1.0")

    @app.exception_handler(UnknownEntityError)
    async def unknown_entity(_: Request, exc: UnknownEntityError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AgentBusyError)
    async def agent_busy(_: Request, exc: AgentBusyError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(WorkflowError)
    async def workflow_error(_: Request, exc: WorkflowError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    def persist() -> None:
        project = bench.state.active_project
        if store is not None and project is not None:
            store.save(project)

    def active_project() -> Project:
        project = bench.state.active_project
        if project is None:
            raise HTTPException(status_code=404, detail="No project is open.")
        return project

    def active_document() -> Document:
        document = bench.state.active_document
        if document is None:
            raise HTTPException(status_code=404, detail="No document is selected.")
        return document

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/state")
    async def state() -> dict[str, str | int | None]:
        return bench.state.snapshot()

    @app.get("/notifications")
    async def notifications(after: int = 0) -> list[Notification]:
        return [n for n in bench.notifications if n.seq > after]

    # projects

    @app.get("/projects")
    async def list_projects() -> list[ProjectSummary]:
        projects = {p.id: p for p in (store.list_all() if store is not None else [])}
        projects.update(bench.state.projects)
        return [ProjectSummary(id=p.id, name=p.name, documents=len(p.documents)) for p in projects.values()]

    @app.post("/projects", status_code=201)
    async def create_project(req: NameRequest) -> Project:
        project = bench.create_project(req.name)
        persist()
        return project

    @app.post("/projects/{project_id}/select")
    async def select_project(project_id: str) -> Project:
        if project_id not in bench.state.projects and store is not None:
            try:
                bench.load_project(store.load(project_id))
            except ProjectNotFoundError:
                raise HTTPException(status_code=404, detail=f"Unknown project: {project_id}") from None
        bench.select_project(project_id)
        return active_project()

    @app.post("/project/close")
    async def close_project() -> dict[str, str | int | None]:
        bench.close_project()
        return bench.state.snapshot()

    @app.get("/project")
    async def get_project() -> Project:
        return active_project()

    @app.put("/project/coordinator")
    async def set_coordinator(req: TextRequest) -> Project:
        bench.set_coordinator_prompt(req.text)
        persist()
        return active_project()

    @app.post("/project/knowledge")
    async def add_knowledge(req: KnowledgeRequest) -> Project:
        if req.replace:
            bench.set_global_knowledge_files(req.files)
        else:
            bench.add_global_knowledge_files(req.files)
        persist()
        return active_project()

    # documents

    @app.post("/documents", status_code=201)
    async def create_document(req: NameRequest) -> Document:
        document = bench.create_document(req.name)
        persist()
        return document

    @app.post("/documents/{document_id}/select")
    async def select_document(document_id: str) -> Document:
        bench.select_document(document_id)
        return active_document()

    @app.delete("/documents/{document_id}")
    async def delete_document(document_id: str) -> Project:
        bench.delete_document(document_id)
        persist()
        return active_project()

    @app.get("/document")
    async def get_document() -> Document:
        return active_document()

    @app.put("/document/coordinator")
    async def set_document_coordinator(req: CoordinatorRequest) -> Document:
        bench.set_document_coordinator_prompt(req.text)
        persist()
        return active_document()

    # outline

    @app.put("/outline/draft")
    async def edit_draft(req: TextRequest) -> Document:
        bench.edit_outline_draft(req.text)
        persist()
        return active_document()

    @app.post("/outline/commands")
    async def outliner_command(req: TextRequest) -> DraftResponse:
        logger.info("Outliner command received", extra={"chars": len(req.text)})
        draft = await bench.submit_outliner_command(req.text)
        persist()
        return DraftResponse(draft=draft)

    @app.post("/outline/finalize")
    async def finalize() -> list[OutlineNode]:
        await bench.finalize_outline()
        persist()
        return list(active_document().outline)

    # sections

    @app.post("/sections/{section_id}/select")
    async def select_section(section_id: str) -> AgentContextView | None:
        await bench.select_section(section_id)
        persist()
        return bench.describe_context()

    @app.post("/sections/deselect")
    async def deselect_section() -> dict[str, str | int | None]:
        bench.deselect_section()
        return bench.state.snapshot()

    @app.put("/section/content")
    async def edit_content(req: TextRequest) -> Document:
        bench.edit_section_content(req.text)
        persist()
        return active_document()

    @app.post("/section/generate")
    async def generate(req: GenerateRequest) -> ContentResponse:
        content = await bench.generate_for_section(req.prompt, req.context_ids)
        persist()
        return ContentResponse(content=content)

    @app.post("/section/research")
    async def research(req: ResearchRequest) -> list[ResearchResult]:
        results = await bench.submit_research(req.query)
        persist()
        return results or []

    @app.post("/section/commit")
    async def commit() -> CommitResponse:
        committed = bench.commit_section()
        persist()
        return CommitResponse(committed=committed)

    @app.put("/sections/{section_id}/references/{ref_id}")
    async def toggle_reference(section_id: str, ref_id: str, req: ReferenceRequest) -> Document:
        bench.toggle_context_reference(section_id, ref_id, req.included)
        persist()
        return active_document()

    @app.post("/sections/{section_id}/prompt/invalidate")
    async def invalidate_prompt(section_id: str) -> Document:
        bench.invalidate_system_prompt(section_id)
        persist()
        return active_document()

    @app.put("/sections/{section_id}/session-files")
    async def set_session_files(section_id: str, files: list[SessionFile]) -> list[str]:
        """Replace a section's session artifacts. They are kept in memory only."""

        bench.set_session_files(section_id, files)
        section = get_section(active_document().contents, section_id)
        return [f.name for f in section.session_files]

    # inspection and export

    @app.get("/context")
    async def context() -> AgentContextView:
        view = bench.describe_context()
        if view is None:
            raise HTTPException(status_code=404, detail="Nothing is selected.")
        return view

    @app.get("/export")
    async def export() -> PlainTextResponse:
        if not bench.can_export():
            raise HTTPException(status_code=400, detail="No completed content to export.")
        markdown = bench.export_completed_document()
        filename = bench.export_filename()
        return PlainTextResponse(
            markdown,
            media_type="text/markdown",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
