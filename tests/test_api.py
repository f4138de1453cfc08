"""Tests for the HTTP API."""

from __future__ import annotations

import inspect
from pathlib import Path

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from authorflow.api.app import create_app
from authorflow.storage.project_store import ProjectStore
from authorflow.workflow.workbench import Workbench

from conftest import OUTLINE_JSON, FakeLLM


@pytest.fixture
def client(llm: FakeLLM, settings, tmp_path: Path) -> TestClient:
    bench = Workbench(llm, settings)
    return TestClient(create_app(bench, settings, store=ProjectStore(tmp_path / "store")))


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_precondition_errors_map_to_http_codes(client: TestClient) -> None:
    """It should answer 400 for workflow errors and 404 for unknown entities."""

    assert client.put("/project/coordinator", json={"text": "x"}).status_code == 400
    client.post("/projects", json={"name": "Bees"})
    assert client.post("/documents/nope/select").status_code == 404
    assert client.post("/section/generate", json={}).status_code == 400


def test_authoring_flow_over_http(client: TestClient, llm: FakeLLM, tmp_path: Path) -> None:
    created = client.post("/projects", json={"name": "Bee Report"})
    assert created.status_code == 201
    project_id = created.json()["id"]

    llm.queue("- Intro\n- Body\n  - Sub", OUTLINE_JSON, "You are a writer.", "Bees matter.")
    draft = client.post("/outline/commands", json={"text": "bees"}).json()
    assert draft == {"draft": "- Intro\n- Body\n  - Sub"}

    outline = client.post("/outline/finalize").json()
    assert [n["id"] for n in outline] == ["1", "2"]

    view = client.post("/sections/1/select").json()
    assert view["system_prompt"].endswith("You are a writer.")

    assert client.post("/section/generate", json={"prompt": "write"}).json() == {"content": "Bees matter."}
    assert client.post("/section/commit").json() == {"committed": True}

    exported = client.get("/export")
    assert exported.status_code == 200
    assert exported.text == "# Intro\n\nBees matter.\n\n"
    assert 'filename="Bee_Report.md"' in exported.headers["content-disposition"]

    saved = ProjectStore(tmp_path / "store").load(project_id)
    assert next(iter(saved.documents.values())).outline[0].status.value == "completed"

    notes = client.get("/notifications", params={"after": 1}).json()
    assert all(n["seq"] > 1 for n in notes)


def test_export_without_completed_sections(client: TestClient) -> None:
    client.post("/projects", json={"name": "Empty"})

    assert client.get("/export").status_code == 400


def test_projects_are_loaded_from_store(llm: FakeLLM, settings, tmp_path: Path) -> None:
    store = ProjectStore(tmp_path / "store")
    first = TestClient(create_app(Workbench(llm, settings), settings, store=store))
    project_id = first.post("/projects", json={"name": "Saved"}).json()["id"]

    second = TestClient(create_app(Workbench(llm, settings), settings, store=store))

    assert [p["id"] for p in second.get("/projects").json()] == [project_id]
    assert second.post(f"/projects/{project_id}/select").json()["name"] == "Saved"
    assert second.post("/projects/unknown/select").status_code == 404


def test_every_endpoint_runs_on_the_event_loop(client: TestClient) -> None:
    """It should declare all endpoints as coroutines so state changes never run in worker threads."""

    endpoints = [r for r in client.app.routes if isinstance(r, APIRoute)]

    assert endpoints
    assert [r.path for r in endpoints if not inspect.iscoroutinefunction(r.endpoint)] == []


def test_session_files_are_visible_but_never_persisted(
    client: TestClient, llm: FakeLLM, tmp_path: Path
) -> None:
    project_id = client.post("/projects", json={"name": "Bee Report"}).json()["id"]
    client.put("/outline/draft", json={"text": "- Intro\n- Body\n  - Sub"})
    llm.queue(OUTLINE_JSON, "You are a writer.")
    client.post("/outline/finalize")
    client.post("/sections/1/select")

    files = [
        {"name": "hive-notes.txt", "size": 12, "media_type": "text/plain"},
        {"name": "swarm.csv", "size": 40},
    ]
    stored = client.put("/sections/1/session-files", json=files)
    assert stored.json() == ["hive-notes.txt", "swarm.csv"]
    client.put("/section/content", json={"text": "draft"})

    view = client.get("/context").json()
    assert view["session_knowledge"] == ["hive-notes.txt", "swarm.csv"]

    raw = (tmp_path / "store" / f"{project_id}.json").read_text(encoding="utf-8")
    assert "hive-notes.txt" not in raw
    assert "session_files" not in raw
    saved = ProjectStore(tmp_path / "store").load(project_id)
    assert next(iter(saved.documents.values())).contents["1"].content == "draft"

    assert client.put("/sections/9/session-files", json=files).status_code == 404
