"""Markdown export of committed sections."""

from __future__ import annotations

import re
from typing import Sequence

from authorflow.memory.section_store import Contents, get_section
from authorflow.models.outline import OutlineNode, SectionStatus

_WHITESPACE_RE = re.compile(r"\s+")


def export_completed_document(outline: Sequence[OutlineNode], contents: Contents) -> str:
    """Render every completed, non-empty section in document order.

    Headings are ``level + 1`` hashes deep. Incomplete nodes are left out, but their
    descendants are still visited.
    """

    parts: list[str] = []
    _render(outline, contents, parts)
    return "".join(parts)


def _render(nodes: Sequence[OutlineNode], contents: Contents, parts: list[str]) -> None:
    for node in nodes:
        content = get_section(contents, node.id).content
        if node.status is SectionStatus.COMPLETED and content:
            parts.append(f"{'#' * (node.level + 1)} {node.title}\n\n")
            parts.append(f"{content}\n\n")
        if node.children:
            _render(node.children, contents, parts)


def export_filename(name: str) -> str:
    """File name for an exported project, e.g. ``My_Report.md``."""

    return f"{_WHITESPACE_RE.sub('_', name.strip()) or 'document'}.md"
