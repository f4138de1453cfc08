"""Tests for context assembly."""

from __future__ import annotations

import pytest

from authorflow.context.assembler import (
    PENDING_SYSTEM_PROMPT,
    assemble_tailored_prompt_request,
    assemble_writer_context,
    build_global_knowledge_context,
    build_reference_context,
    build_research_context,
    compose_user_turn,
    describe_outliner_context,
    describe_writer_context,
    document_title,
    outliner_payload,
    research_payload,
    resolve_system_instruction,
    writer_payload,
)
from authorflow.context.requests import (
    GenerateContentRequest,
    GenerateOutlineRequest,
    ResearchTopicRequest,
    WriterContext,
)
from authorflow.memory.section_store import update_section
from authorflow.models.project import Document, KnowledgeFile, Project
from authorflow.models.section import Message, ResearchResult
from authorflow.outline.tree import attach_metadata

OUTLINE = attach_metadata([{"title": "Intro"}, {"title": "Body", "children": [{"title": "Sub"}]}])


def _project(**doc_fields) -> tuple[Project, Document]:
    document = Document(id="d1", name="Main", outline=OUTLINE, **doc_fields)
    project = Project(id="p1", name="Report", coordinator_prompt="BE CLEAR", documents={"d1": document})
    return project, document


def test_global_knowledge_is_tagged_per_file() -> None:
    text = build_global_knowledge_context(
        [KnowledgeFile(name="a.txt", text="alpha"), KnowledgeFile(name="b.md", text="beta")]
    )

    assert text == (
        "--- GLOBAL KNOWLEDGE SOURCE: a.txt ---\nalpha\n\n"
        "--- GLOBAL KNOWLEDGE SOURCE: b.md ---\nbeta"
    )
    assert build_global_knowledge_context([]) == ""


def test_research_context_format() -> None:
    text = build_research_context([ResearchResult(id="r", title="T", url="https://x", summary="S")])

    assert text == "--- RESEARCH RESULT: T ---\nURL: https://x\nSummary: S"


def test_reference_context_skips_self_stale_and_empty() -> None:
    """It should only include existing, non-empty sections other than the target."""

    contents = update_section({}, "1", content="intro text")
    contents = update_section(contents, "2.1", content="sub text")

    text = build_reference_context(OUTLINE, contents, "2.1", ["2.1", "1", "2", "9", "1"])

    assert text == "--- REF: Intro ---\nintro text"


def test_compose_user_turn_omits_empty_parts() -> None:
    """It should leave out empty context parts entirely."""

    assert compose_user_turn("go", WriterContext()) == 'User instruction: "go"'

    turn = compose_user_turn("go", WriterContext(global_knowledge="G", references="R"))
    assert turn == 'G\n\nR\n\n---\nUser instruction: "go"'


def test_writer_payload_splices_context_into_last_user_turn_only() -> None:
    request = GenerateContentRequest(
        messages=(
            Message(sender="user", text="first"),
            Message(sender="agent", text="draft"),
            Message(sender="user", text="shorter"),
        ),
        context=WriterContext(research="RES"),
        system_instruction="SYS",
    )

    payload = writer_payload(request)

    assert [m.role for m in payload.messages] == ["user", "assistant", "user"]
    assert payload.messages[0].content == "first"
    assert payload.messages[-1].content == 'RES\n\n---\nUser instruction: "shorter"'
    assert payload.system == "SYS"
    assert payload.grounded is False


def test_writer_payload_rejects_empty_history() -> None:
    with pytest.raises(ValueError):
        writer_payload(GenerateContentRequest(messages=(), context=WriterContext()))


def test_outliner_payload_uses_empty_marker_and_coordinator() -> None:
    payload = outliner_payload(
        GenerateOutlineRequest(outline_draft="", instruction="A report on bees", coordinator_prompt="BE CLEAR")
    )

    assert payload.messages[0].content == (
        'Current Outline (Markdown):\n(empty)\n\n---\nUser Command: "A report on bees"'
    )
    assert payload.system.startswith("BE CLEAR\n\n---\n\n")


def test_research_payload_is_grounded() -> None:
    payload = research_payload(ResearchTopicRequest(topic="bees", max_results=3))

    assert payload.grounded is True
    assert "top 3 results" in payload.messages[0].content
    assert '"bees"' in payload.messages[0].content


def test_writer_context_defaults_to_stored_references() -> None:
    contents = update_section({}, "1", content="intro text")
    contents = update_section(contents, "2", context_ids=["1"])
    project, document = _project(contents=contents)

    stored = assemble_writer_context(project, document, "2")
    overridden = assemble_writer_context(project, document, "2", context_ids=[])

    assert stored.references == "--- REF: Intro ---\nintro text"
    assert overridden.references == ""
    assert stored.global_knowledge == ""


def test_tailored_prompt_request_uses_document_outline() -> None:
    project, document = _project()

    request = assemble_tailored_prompt_request(project, document, "2.1")

    assert request.document_title == "Intro"
    assert request.section_title == "Sub"
    assert request.outline_structure == "- Intro\n- Body\n  - Sub"
    assert request.coordinator_prompt == "BE CLEAR"
    assert assemble_tailored_prompt_request(project, document, "5") is None


def test_document_override_wins_over_project_coordinator() -> None:
    project, document = _project(coordinator_prompt="DOC RULES")

    assert resolve_system_instruction(project, document, "1").startswith("DOC RULES\n\n")


def test_document_title_falls_back_to_name() -> None:
    assert document_title(Document(id="d", name="Notes")) == "Notes"


def test_describe_contexts() -> None:
    contents = update_section({}, "1", content="intro text")
    contents = update_section(contents, "2.1", context_ids=["1", "2"])
    project, document = _project(contents=contents, outline_draft="")

    outliner = describe_outliner_context(project, document)
    writer = describe_writer_context(project, document, "2.1")

    assert "empty" in outliner.document_outline
    assert writer.system_prompt == PENDING_SYSTEM_PROMPT
    assert "Sub <-- YOU ARE HERE" in writer.document_outline
    assert [r.title for r in writer.selected_references] == ["Intro"]
    assert describe_writer_context(project, document, "42") is None
