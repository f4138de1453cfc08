"""Tests for project persistence and knowledge loading."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from authorflow.knowledge import describe_session_file, load_knowledge_files
from authorflow.storage.project_store import ProjectNotFoundError, ProjectStore
from authorflow.workflow.workbench import Workbench


def test_project_round_trip_drops_session_files(outlined: Workbench, tmp_path: Path) -> None:
    """It should persist contents but never session artifacts."""

    asyncio.run(outlined.select_section("1"))
    outlined.edit_section_content("intro text")
    upload = tmp_path / "notes.txt"
    upload.write_text("scratch", encoding="utf-8")
    outlined.set_session_files("1", [describe_session_file(upload)])
    project = outlined.state.active_project
    assert project.documents[outlined.state.active_document_id].contents["1"].session_files

    store = ProjectStore(tmp_path / "store")
    store.save(project)
    loaded = store.load(project.id)

    section = loaded.documents[outlined.state.active_document_id].contents["1"]
    assert section.content == "intro text"
    assert section.session_files == ()
    assert loaded.documents[outlined.state.active_document_id].outline == (
        project.documents[outlined.state.active_document_id].outline
    )


def test_store_lists_and_deletes(bench: Workbench, tmp_path: Path) -> None:
    store = ProjectStore(tmp_path)
    project = bench.state.active_project
    store.save(project)

    assert [p.id for p in store.list_all()] == [project.id]
    store.delete(project.id)
    with pytest.raises(ProjectNotFoundError):
        store.load(project.id)


def test_concurrent_saves_of_one_project_all_succeed(bench: Workbench, tmp_path: Path) -> None:
    """It should give every save its own temp file and leave none behind."""

    store = ProjectStore(tmp_path)
    project = bench.state.active_project
    renamed = [project.model_copy(update={"name": f"v{i}"}) for i in range(16)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        paths = list(pool.map(store.save, renamed))

    assert set(paths) == {tmp_path / f"{project.id}.json"}
    assert store.load(project.id).name in {p.name for p in renamed}
    assert list(tmp_path.glob("*.tmp")) == []
    assert list(tmp_path.glob(".*.tmp")) == []


def test_store_rejects_unsafe_ids(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        ProjectStore(tmp_path).load("../etc/passwd")


def test_unreadable_knowledge_file_gets_placeholder(tmp_path: Path) -> None:
    good = tmp_path / "a.txt"
    good.write_text("alpha", encoding="utf-8")
    binary = tmp_path / "b.bin"
    binary.write_bytes(b"\xff\xfe\x00\x81")

    files = load_knowledge_files([good, binary, tmp_path / "missing.txt"])

    assert [f.text for f in files] == [
        "alpha",
        "[Could not read file: b.bin]",
        "[Could not read file: missing.txt]",
    ]
