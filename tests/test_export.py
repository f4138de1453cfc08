"""Tests for markdown export."""

from __future__ import annotations

from authorflow.export import export_completed_document, export_filename
from authorflow.memory.section_store import update_section
from authorflow.models.outline import SectionStatus
from authorflow.outline.tree import attach_metadata, set_status


def test_completed_descendants_of_incomplete_parents_are_exported() -> None:
    """It should skip incomplete nodes but still visit their children."""

    outline = attach_metadata(
        [{"title": "Intro"}, {"title": "Body", "children": [{"title": "Sub", "children": [{"title": "Deep"}]}]}]
    )
    for node_id in ("1", "2.1.1"):
        outline = set_status(outline, node_id, SectionStatus.COMPLETED)
    outline = set_status(outline, "2", SectionStatus.WRITING)
    contents = update_section({}, "1", content="Hello.")
    contents = update_section(contents, "2", content="draft only")
    contents = update_section(contents, "2.1.1", content="Deep text.")

    markdown = export_completed_document(outline, contents)

    assert markdown == "# Intro\n\nHello.\n\n### Deep\n\nDeep text.\n\n"


def test_completed_section_without_content_is_skipped() -> None:
    outline = set_status(attach_metadata([{"title": "Empty"}]), "1", SectionStatus.COMPLETED)

    assert export_completed_document(outline, {}) == ""


def test_export_filename_replaces_whitespace() -> None:
    assert export_filename("My  Big Report") == "My_Big_Report.md"
    assert export_filename("   ") == "document.md"
