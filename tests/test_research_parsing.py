"""Tests for research answer decoding."""

from __future__ import annotations

from authorflow.llm.client import GroundingCitation
from authorflow.utils.research import extract_candidates, merge_citations
from authorflow.utils.tags import parse_json_payload, strip_code_fence

ANSWER = """Here is what I found:
1. **Bees and Pollination**
Summary: Bees pollinate a third of crops.
2. Hive Collapse
Colony collapse is linked to pesticides.
3. Urban Beekeeping
4. Wild Bees
Summary: Wild species matter too.
5. Honey Markets
Prices rose in 2023.
"""


def test_extract_candidates_reads_titles_and_summaries() -> None:
    candidates = extract_candidates(ANSWER, default_summary="n/a")

    assert [c.title for c in candidates] == [
        "Bees and Pollination",
        "Hive Collapse",
        "Urban Beekeeping",
        "Wild Bees",
        "Honey Markets",
    ]
    assert candidates[0].summary == "Bees pollinate a third of crops."
    assert candidates[1].summary == "Colony collapse is linked to pesticides."
    assert candidates[2].summary == "n/a"


def test_extract_candidates_accepts_title_labels() -> None:
    candidates = extract_candidates("Title: Something\nSummary: a thing")

    assert len(candidates) == 1
    assert candidates[0].title == "Something"
    assert candidates[0].summary == "a thing"


def test_merge_keeps_first_three_with_distinct_ids() -> None:
    """It should keep the first three candidates in order with distinct ids."""

    candidates = extract_candidates(ANSWER)
    citations = [GroundingCitation(title="Cited", uri="https://a.example")]

    results = merge_citations(candidates, citations, stamp=1700, max_results=3)

    assert [r.id for r in results] == ["res17000", "res17001", "res17002"]
    assert results[0].title == "Cited"
    assert results[0].url == "https://a.example"
    assert results[1].title == "Hive Collapse"
    assert results[1].url == "#"


def test_strip_code_fence() -> None:
    assert strip_code_fence('```json\n[{"title": "A"}]\n```') == '[{"title": "A"}]'
    assert parse_json_payload('```\n[1, 2]\n```') == [1, 2]
    assert strip_code_fence("  [] ") == "[]"
