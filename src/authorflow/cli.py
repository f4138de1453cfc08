"""CLI entrypoints for AuthorFlow."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.tree import Tree

from authorflow.config import Settings, load_settings
from authorflow.events import NotificationLevel
from authorflow.knowledge import describe_session_file, load_knowledge_files
from authorflow.llm.client import CompletionClient, LLMClient
from authorflow.logging import configure_logging, get_logger
from authorflow.models.outline import OutlineNode, SectionStatus
from authorflow.recording.file_recorder import FileNotificationRecorder
from authorflow.storage.project_store import ProjectNotFoundError, ProjectStore
from authorflow.workflow.commands import SelectSection
from authorflow.workflow.errors import WorkflowError
from authorflow.workflow.workbench import Workbench

app = typer.Typer(add_completion=False, help="AuthorFlow multi-agent document authoring CLI")
logger = get_logger(__name__)
console = Console()

_STATUS_STYLE = {
    SectionStatus.OUTLINE: "dim",
    SectionStatus.WRITING: "yellow",
    SectionStatus.COMPLETED: "green",
}


class _ModelUnavailable:
    """Client used when no API key is configured; any agent call fails cleanly."""

    def complete(self, *args: Any, **kwargs: Any) -> Any:
        raise RuntimeError("Missing AUTHORFLOW_OPENAI_API_KEY; agent commands are unavailable.")


def _settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def _llm(settings: Settings) -> CompletionClient:
    if not settings.openai_api_key:
        return _ModelUnavailable()
    return LLMClient(settings)


def _open(project_id: str, document_id: str | None = None) -> tuple[ProjectStore, Workbench]:
    settings = _settings()
    store = ProjectStore(settings.projects_dir)
    try:
        project = store.load(project_id)
    except ProjectNotFoundError:
        raise typer.BadParameter(f"Unknown project: {project_id}") from None

    recorder = FileNotificationRecorder(settings.notifications_path) if settings.notifications_path else None
    bench = Workbench(_llm(settings), settings, recorder=recorder)
    bench.load_project(project)
    logger.info("CLI opened project %s", project_id)
    if document_id is not None:
        bench.select_document(document_id)
    return store, bench


def _save(store: ProjectStore, bench: Workbench) -> None:
    project = bench.state.active_project
    if project is not None:
        store.save(project)
    for n in bench.notifications:
        style = "red" if n.level is NotificationLevel.ERROR else "green"
        console.print(f"[{style}]{n.message}[/{style}]")


def _add_nodes(tree: Tree, nodes: tuple[OutlineNode, ...]) -> None:
    for node in nodes:
        style = _STATUS_STYLE[node.status]
        branch = tree.add(f"[{style}]{node.id}  {node.title}  ({node.status.value})[/{style}]")
        _add_nodes(branch, node.children)


def _focus(bench: Workbench, section_id: str) -> None:
    """Select a section without preparing its writer persona."""

    state = bench.state
    if state.active_document is None:
        raise typer.BadParameter("Project has no document.")
    bench.dispatch(SelectSection(state.active_project_id, state.active_document_id, section_id=section_id))
    if bench.state.active_section_id != section_id:
        raise typer.BadParameter(f"Unknown section: {section_id}")


def _run(coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except WorkflowError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def new(name: str = typer.Argument(..., help="Project name")) -> None:
    """Create a project and print its id."""

    settings = _settings()
    store = ProjectStore(settings.projects_dir)
    bench = Workbench(_llm(settings), settings)
    project = bench.create_project(name)
    store.save(project)
    typer.echo(project.id)


@app.command("list")
def list_projects() -> None:
    """List saved projects."""

    settings = _settings()
    for project in ProjectStore(settings.projects_dir).list_all():
        typer.echo(f"{project.id}\t{project.name}\t{len(project.documents)} document(s)")


@app.command()
def coordinator(
    project_id: str,
    text: str = typer.Argument(..., help="Project-wide master directive"),
) -> None:
    """Set the coordinator prompt."""

    store, bench = _open(project_id)
    bench.set_coordinator_prompt(text)
    _save(store, bench)


@app.command()
def knowledge(
    project_id: str,
    files: list[Path] = typer.Argument(..., help="Text files to add to the global knowledge"),
    replace: bool = typer.Option(False, "--replace", help="Replace instead of append"),
) -> None:
    """Add (or replace) global knowledge files."""

    store, bench = _open(project_id)
    loaded = load_knowledge_files(files)
    if replace:
        bench.set_global_knowledge_files(loaded)
    else:
        bench.add_global_knowledge_files(loaded)
    _save(store, bench)


@app.command()
def outline(
    project_id: str,
    instruction: str = typer.Argument(..., help="Instruction for the outliner agent"),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Send an instruction to the outliner agent and print the new draft."""

    store, bench = _open(project_id, document)
    draft = _run(bench.submit_outliner_command(instruction))
    _save(store, bench)
    if draft is not None:
        typer.echo(draft)


@app.command()
def draft(
    project_id: str,
    source: Optional[Path] = typer.Option(None, "--file", "-f", help="Replace the draft with this file"),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Show or replace the outline draft."""

    store, bench = _open(project_id, document)
    if source is not None:
        bench.edit_outline_draft(source.read_text(encoding="utf-8"))
        _save(store, bench)
        return
    doc = bench.state.active_document
    typer.echo(doc.outline_draft if doc is not None else "")


@app.command()
def finalize(
    project_id: str,
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Convert the outline draft into the section tree."""

    store, bench = _open(project_id, document)
    _run(bench.finalize_outline())
    _save(store, bench)
    doc = bench.state.active_document
    if doc is not None and doc.outline:
        tree = Tree(doc.name)
        _add_nodes(tree, doc.outline)
        console.print(tree)


@app.command("tree")
def show_tree(
    project_id: str,
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Print the outline with section statuses."""

    _, bench = _open(project_id, document)
    doc = bench.state.active_document
    if doc is None or not doc.outline:
        typer.echo("(no finalized outline)")
        return
    tree = Tree(doc.name)
    _add_nodes(tree, doc.outline)
    console.print(tree)


@app.command()
def select(
    project_id: str,
    section_id: str,
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Open a section and prepare its writer persona."""

    store, bench = _open(project_id, document)
    _run(bench.select_section(section_id))
    _save(store, bench)
    section = bench.state.active_section_id
    if section is None:
        raise typer.BadParameter(f"Unknown section: {section_id}")
    view = bench.describe_context()
    if view is not None:
        console.print(view.system_prompt)


@app.command()
def write(
    project_id: str,
    section_id: str,
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Instruction for the writer"),
    refs: Optional[list[str]] = typer.Option(None, "--ref", help="Section ids to use as context"),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Generate content for a section."""

    store, bench = _open(project_id, document)

    async def go() -> str | None:
        await bench.select_section(section_id)
        return await bench.generate_for_section(prompt, refs)

    text = _run(go())
    _save(store, bench)
    if text is not None:
        typer.echo(text)


@app.command()
def edit(
    project_id: str,
    section_id: str,
    source: Path = typer.Argument(..., help="File with the new section content"),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Replace a section's draft content with a file."""

    store, bench = _open(project_id, document)
    _focus(bench, section_id)
    bench.edit_section_content(source.read_text(encoding="utf-8"))
    _save(store, bench)


@app.command()
def research(
    project_id: str,
    section_id: str,
    query: str,
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Research a topic for a section."""

    store, bench = _open(project_id, document)

    async def go() -> Any:
        await bench.select_section(section_id)
        return await bench.submit_research(query)

    results = _run(go())
    _save(store, bench)
    for r in results or []:
        typer.echo(f"- {r.title} <{r.url}>\n  {r.summary}")


@app.command()
def reference(
    project_id: str,
    section_id: str,
    ref_id: str,
    remove: bool = typer.Option(False, "--remove", help="Remove instead of add"),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Include (or exclude) another section as writer context."""

    store, bench = _open(project_id, document)
    bench.toggle_context_reference(section_id, ref_id, not remove)
    _save(store, bench)


@app.command()
def commit(
    project_id: str,
    section_id: str,
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Mark a section completed."""

    store, bench = _open(project_id, document)
    _focus(bench, section_id)
    bench.commit_section()
    _save(store, bench)


@app.command()
def export(
    project_id: str,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output markdown file"),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Export completed sections as markdown."""

    store, bench = _open(project_id, document)
    markdown = bench.export_completed_document()
    _save(store, bench)
    if not markdown:
        raise typer.Exit(code=1)
    target = output or Path(bench.export_filename())
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(markdown, encoding="utf-8")
    typer.echo(str(target))


@app.command()
def context(
    project_id: str,
    section_id: Optional[str] = typer.Argument(None),
    files: Optional[list[Path]] = typer.Option(
        None, "--file", "-f", help="Session files to attach to the section for this inspection"
    ),
    document: Optional[str] = typer.Option(None, "--document", "-d"),
) -> None:
    """Show what the agent sees for a section (or the outliner).

    Session files only live for the current command; they are never saved with the project.
    """

    _, bench = _open(project_id, document)
    if files and section_id is None:
        raise typer.BadParameter("--file needs a section id.")
    if section_id is not None:
        _focus(bench, section_id)
        if files:
            bench.set_session_files(section_id, [describe_session_file(p) for p in files])
    view = bench.describe_context()
    typer.echo(json.dumps(view.model_dump(mode="json") if view else None, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    app()
