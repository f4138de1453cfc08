"""Structured-output extraction helpers.

Models asked for bare JSON still occasionally wrap it in a markdown code fence; these helpers
remove such wrappers before parsing.
"""

from __future__ import annotations

import json
import re
from typing import Any

from authorflow.logging import get_logger

logger = get_logger(__name__)

_LEADING_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```` ```json ```` (or bare ```` ``` ````) fence and its closing fence."""

    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_json_payload(text: str) -> Any:
    """Parse model output that should be pure JSON.

    Raises:
        json.JSONDecodeError: If the unwrapped text is not valid JSON.
    """

    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.debug("parse_json_payload: invalid JSON, preview=%r", cleaned[:200])
        raise
