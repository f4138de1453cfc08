"""Best-effort decoding of research agent text into results.

The research model answers in free text. Lines that start with a number (``1.``) or contain
``Title:`` are candidate titles; the following line is the summary unless it is itself a
title line. Candidates are then matched by position with grounding citations, whose URL and
title win over the extracted ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from authorflow.llm.client import GroundingCitation
from authorflow.models.section import ResearchResult
from authorflow.utils.ids import format_research_id

_TITLE_RE = re.compile(r"(?:^\d+\.\s*|Title:)\s*(.*)", re.IGNORECASE)
_TITLE_LINE_RE = re.compile(r"^\d+\.\s*|Title:", re.IGNORECASE)
_SUMMARY_PREFIX_RE = re.compile(r"Summary:\s*", re.IGNORECASE)

DEFAULT_SUMMARY = "No summary available."
PLACEHOLDER_URL = "#"


@dataclass(frozen=True)
class ResearchCandidate:
    """A title/summary pair extracted from model text."""

    title: str
    summary: str


def extract_candidates(text: str, *, default_summary: str = DEFAULT_SUMMARY) -> list[ResearchCandidate]:
    """Split model text into title/summary candidates, in order of appearance."""

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    out: list[ResearchCandidate] = []
    for i, line in enumerate(lines):
        m = _TITLE_RE.search(line)
        if not m or not m.group(1).strip():
            continue
        title = m.group(1).replace("**", "").strip()
        if not title:
            continue
        summary = default_summary
        if i + 1 < len(lines) and not _TITLE_LINE_RE.search(lines[i + 1]):
            summary = _SUMMARY_PREFIX_RE.sub("", lines[i + 1], count=1).strip() or default_summary
        out.append(ResearchCandidate(title=title, summary=summary))
    return out


def merge_citations(
    candidates: Sequence[ResearchCandidate],
    citations: Sequence[GroundingCitation],
    *,
    stamp: int,
    max_results: int = 3,
    placeholder_url: str = PLACEHOLDER_URL,
) -> list[ResearchResult]:
    """Keep the first ``max_results`` candidates and attach citations by position."""

    results: list[ResearchResult] = []
    for index, candidate in enumerate(candidates[:max_results]):
        citation = citations[index] if index < len(citations) else None
        results.append(
            ResearchResult(
                id=format_research_id(stamp, index),
                title=(citation.title if citation and citation.title else candidate.title),
                url=(citation.uri if citation and citation.uri else placeholder_url),
                summary=candidate.summary,
            )
        )
    return results
