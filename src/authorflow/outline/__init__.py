"""Outline tree operations."""

from __future__ import annotations

from authorflow.outline.tree import (
    advance_status,
    attach_metadata,
    find,
    find_parent,
    format_outline,
    has_completed,
    iter_nodes,
    set_status,
)

__all__ = [
    "advance_status",
    "attach_metadata",
    "find",
    "find_parent",
    "format_outline",
    "has_completed",
    "iter_nodes",
    "set_status",
]
