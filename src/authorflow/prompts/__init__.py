from __future__ import annotations

from authorflow.prompts.outliner import OUTLINE_PARSER_SYSTEM_PROMPT, OUTLINER_SYSTEM_PROMPT
from authorflow.prompts.research import RESEARCH_PROMPT
from authorflow.prompts.writer import FALLBACK_PERSONA, TAILORED_PROMPT_REQUEST

__all__ = [
    "OUTLINER_SYSTEM_PROMPT",
    "OUTLINE_PARSER_SYSTEM_PROMPT",
    "RESEARCH_PROMPT",
    "FALLBACK_PERSONA",
    "TAILORED_PROMPT_REQUEST",
]
