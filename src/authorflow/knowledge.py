"""Loading uploaded files into knowledge and session artifacts."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Iterable

from authorflow.logging import get_logger
from authorflow.models.project import KnowledgeFile
from authorflow.models.section import SessionFile

logger = get_logger(__name__)


def unreadable_placeholder(name: str) -> str:
    return f"[Could not read file: {name}]"


def load_knowledge_file(path: Path) -> KnowledgeFile:
    """Read a text file for the project knowledge base.

    A file that cannot be read or decoded still contributes an entry, whose text says so.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read knowledge file %s: %s", path, exc)
        text = unreadable_placeholder(path.name)
    return KnowledgeFile(name=path.name, text=text)


def load_knowledge_files(paths: Iterable[Path]) -> tuple[KnowledgeFile, ...]:
    return tuple(load_knowledge_file(p) for p in paths)


def describe_session_file(path: Path) -> SessionFile:
    """Metadata for a per-section upload; the bytes themselves are not kept."""

    size = path.stat().st_size if path.exists() else 0
    media_type, _ = mimetypes.guess_type(path.name)
    return SessionFile(name=path.name, size=size, media_type=media_type)
