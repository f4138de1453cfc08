"""Section content store.

Section contents live in a plain ``dict[section_id, SectionContent]`` owned by a document.
The functions here never mutate their input: each returns a new mapping in which only the
touched entry is replaced. A section that was never visited reads as an empty entry, so
first access costs nothing and never fails.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from authorflow.logging import get_logger
from authorflow.models.outline import OutlineNode
from authorflow.models.section import Message, ResearchResult, SectionContent, SessionFile
from authorflow.outline.tree import find

logger = get_logger(__name__)

EMPTY_SECTION = SectionContent()

MAX_RESEARCH_RESULTS = 3

Contents = Mapping[str, SectionContent]


def get_section(contents: Contents, section_id: str) -> SectionContent:
    """Return the entry for ``section_id`` or the shared empty default."""

    return contents.get(section_id, EMPTY_SECTION)


def update_section(contents: Contents, section_id: str, **fields: Any) -> dict[str, SectionContent]:
    """Return a new mapping with ``fields`` replaced on one section.

    ``context_ids`` is de-duplicated and stripped of the section's own id;
    ``research_results`` is capped to the first three entries.
    """

    if "context_ids" in fields:
        fields["context_ids"] = _clean_context_ids(section_id, fields["context_ids"])
    if "research_results" in fields:
        fields["research_results"] = tuple(fields["research_results"])[:MAX_RESEARCH_RESULTS]
    for key in ("messages", "session_files"):
        if key in fields:
            fields[key] = tuple(fields[key])

    current = get_section(contents, section_id)
    out = dict(contents)
    out[section_id] = current.model_copy(update=fields)
    return out


def append_messages(
    contents: Contents, section_id: str, *messages: Message, **fields: Any
) -> dict[str, SectionContent]:
    """Append chat turns and update any other fields in one step."""

    current = get_section(contents, section_id)
    return update_section(contents, section_id, messages=current.messages + messages, **fields)


def toggle_reference(
    contents: Contents,
    outline: Sequence[OutlineNode],
    section_id: str,
    ref_id: str,
    included: bool,
) -> dict[str, SectionContent] | Contents:
    """Add or remove ``ref_id`` from a section's cross-references.

    Self references and ids absent from the outline are ignored and the input is returned.
    """

    current = get_section(contents, section_id).context_ids
    if included:
        if ref_id == section_id:
            logger.warning("Ignoring self reference for section %s", section_id)
            return contents
        if find(outline, ref_id) is None:
            logger.warning("Ignoring reference to unknown section %s", ref_id)
            return contents
        if ref_id in current:
            return contents
        return update_section(contents, section_id, context_ids=current + (ref_id,))

    if ref_id not in current:
        return contents
    return update_section(
        contents, section_id, context_ids=tuple(cid for cid in current if cid != ref_id)
    )


def set_session_files(
    contents: Contents, section_id: str, files: Iterable[SessionFile]
) -> dict[str, SectionContent]:
    """Replace the section's session artifacts."""

    return update_section(contents, section_id, session_files=tuple(files))


def set_research_results(
    contents: Contents, section_id: str, results: Iterable[ResearchResult]
) -> dict[str, SectionContent]:
    """Replace the section's research results (first three kept)."""

    return update_section(contents, section_id, research_results=tuple(results))


def _clean_context_ids(section_id: str, ids: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for cid in ids:
        if cid == section_id or cid in seen:
            continue
        out.append(cid)
        seen.add(cid)
    return tuple(out)
