"""ID utilities."""

from __future__ import annotations

import time
import uuid


def new_entity_id() -> str:
    """Return a fresh id for projects and documents."""

    return uuid.uuid4().hex[:12]


def research_stamp() -> int:
    """Millisecond timestamp shared by one batch of research results."""

    return time.time_ns() // 1_000_000


def format_research_id(stamp: int, index: int, prefix: str = "res") -> str:
    """Format a research result id.

    Results from one batch share the stamp and differ by their position suffix
    (e.g., ``res17300000000000``, ``res17300000000001``).
    """

    return f"{prefix}{stamp}{index}"
