"""Section content store."""

from __future__ import annotations

from authorflow.memory.section_store import (
    EMPTY_SECTION,
    append_messages,
    get_section,
    set_research_results,
    set_session_files,
    toggle_reference,
    update_section,
)

__all__ = [
    "EMPTY_SECTION",
    "append_messages",
    "get_section",
    "set_research_results",
    "set_session_files",
    "toggle_reference",
    "update_section",
]
