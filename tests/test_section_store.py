"""Tests for the section content store."""

from __future__ import annotations

from authorflow.memory.section_store import (
    EMPTY_SECTION,
    append_messages,
    get_section,
    set_research_results,
    toggle_reference,
    update_section,
)
from authorflow.models.section import Message, ResearchResult
from authorflow.outline.tree import attach_metadata

OUTLINE = attach_metadata([{"title": "A"}, {"title": "B"}, {"title": "C"}])


def test_unvisited_section_reads_as_empty() -> None:
    """It should lazily return an empty entry without storing it."""

    contents: dict = {}

    section = get_section(contents, "1")

    assert section is EMPTY_SECTION
    assert section.content == ""
    assert section.messages == ()
    assert section.system_prompt is None
    assert contents == {}


def test_update_section_leaves_input_untouched() -> None:
    original = {"1": EMPTY_SECTION}

    updated = update_section(original, "1", content="draft")

    assert updated["1"].content == "draft"
    assert original["1"].content == ""


def test_update_section_cleans_context_ids() -> None:
    """It should drop self references and duplicates."""

    contents = update_section({}, "1", context_ids=["2", "1", "3", "2"])

    assert contents["1"].context_ids == ("2", "3")


def test_research_results_are_capped() -> None:
    results = [ResearchResult(id=f"r{i}", title=f"T{i}", url="#", summary="s") for i in range(5)]

    contents = set_research_results({}, "1", results)

    assert [r.id for r in contents["1"].research_results] == ["r0", "r1", "r2"]


def test_append_messages_with_extra_fields() -> None:
    contents = append_messages({}, "1", Message(sender="user", text="hi"))
    contents = append_messages(contents, "1", Message(sender="agent", text="text"), content="text")

    section = contents["1"]
    assert [m.sender for m in section.messages] == ["user", "agent"]
    assert section.content == "text"


def test_toggle_reference_adds_and_removes() -> None:
    contents = toggle_reference({}, OUTLINE, "1", "2", True)
    contents = toggle_reference(contents, OUTLINE, "1", "3", True)
    assert contents["1"].context_ids == ("2", "3")

    contents = toggle_reference(contents, OUTLINE, "1", "2", False)
    assert contents["1"].context_ids == ("3",)


def test_toggle_reference_ignores_self_and_unknown_ids() -> None:
    """It should return the input unchanged for invalid references."""

    contents = {"1": EMPTY_SECTION}

    assert toggle_reference(contents, OUTLINE, "1", "1", True) is contents
    assert toggle_reference(contents, OUTLINE, "1", "9", True) is contents
    assert toggle_reference(contents, OUTLINE, "1", "2", False) is contents
