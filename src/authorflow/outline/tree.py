"""Pure functions over the outline forest.

Every update returns a new forest. Only the nodes on the path from a root to the changed node
are rebuilt; all other subtrees are shared with the input so callers can detect change by
identity.
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

from authorflow.models.outline import Outline, OutlineNode, SectionStatus

UNTITLED = "Untitled"


def iter_nodes(outline: Sequence[OutlineNode]) -> Iterator[OutlineNode]:
    """Yield every node in document (pre-)order."""

    for node in outline:
        yield node
        yield from iter_nodes(node.children)


def find(outline: Sequence[OutlineNode], node_id: str) -> OutlineNode | None:
    """Depth-first search for ``node_id``."""

    for node in outline:
        if node.id == node_id:
            return node
        found = find(node.children, node_id)
        if found is not None:
            return found
    return None


def find_parent(outline: Sequence[OutlineNode], node_id: str) -> OutlineNode | None:
    """Return the parent of ``node_id``; roots and unknown ids have none."""

    for node in outline:
        if any(child.id == node_id for child in node.children):
            return node
        found = find_parent(node.children, node_id)
        if found is not None:
            return found
    return None


def set_status(outline: Outline, node_id: str, status: SectionStatus) -> Outline:
    """Return a forest where ``node_id`` has ``status``.

    Unknown ids leave the forest untouched and the very same object is returned.
    """

    updated, changed = _replace_status(outline, node_id, status)
    return updated if changed else outline


def advance_status(outline: Outline, node_id: str, status: SectionStatus) -> Outline:
    """Like :func:`set_status`, but never moves a node backwards in its lifecycle."""

    node = find(outline, node_id)
    if node is None or node.status.rank >= status.rank:
        return outline
    return set_status(outline, node_id, status)


def _replace_status(
    nodes: Outline, node_id: str, status: SectionStatus
) -> tuple[Outline, bool]:
    out: list[OutlineNode] = []
    changed = False
    for node in nodes:
        if changed:
            out.append(node)
            continue
        if node.id == node_id:
            out.append(node.model_copy(update={"status": status}))
            changed = True
            continue
        children, child_changed = _replace_status(node.children, node_id, status)
        if child_changed:
            out.append(node.model_copy(update={"children": children}))
            changed = True
        else:
            out.append(node)
    return tuple(out), changed


def attach_metadata(items: Sequence[Any], level: int = 0, parent_id: str = "") -> Outline:
    """Turn parsed ``{"title", "children"}`` items into outline nodes.

    Ids are the parent path plus the 1-based sibling index, levels count from 0 at the roots
    and every node starts in the ``Outline`` state. The result depends only on the input
    structure, so the same items always produce the same ids.
    """

    nodes: list[OutlineNode] = []
    for index, item in enumerate(items, start=1):
        node_id = f"{parent_id}.{index}" if parent_id else str(index)
        title = UNTITLED
        raw_children: Sequence[Any] = ()
        if isinstance(item, dict):
            raw_title = item.get("title")
            if isinstance(raw_title, str) and raw_title.strip():
                title = raw_title.strip()
            if isinstance(item.get("children"), list):
                raw_children = item["children"]
        elif isinstance(item, str) and item.strip():
            title = item.strip()
        nodes.append(
            OutlineNode(
                id=node_id,
                title=title,
                level=level,
                status=SectionStatus.OUTLINE,
                children=attach_metadata(raw_children, level + 1, node_id),
            )
        )
    return tuple(nodes)


def format_outline(
    outline: Sequence[OutlineNode],
    *,
    marker_id: str | None = None,
    marker: str = " <-- YOU ARE HERE",
) -> str:
    """Render titles as an indented hyphen list (two spaces per level)."""

    lines: list[str] = []
    for node in iter_nodes(outline):
        suffix = marker if marker_id is not None and node.id == marker_id else ""
        lines.append(f"{'  ' * node.level}- {node.title}{suffix}")
    return "\n".join(lines)


def has_completed(outline: Sequence[OutlineNode]) -> bool:
    """True when any node in the forest is ``Completed``."""

    return any(node.status is SectionStatus.COMPLETED for node in iter_nodes(outline))
