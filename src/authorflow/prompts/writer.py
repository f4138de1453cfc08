from __future__ import annotations

FALLBACK_PERSONA = (
    "You are an expert academic writer. Your task is to write the content for the section "
    '"{title}".'
)

TAILORED_PROMPT_REQUEST = """A high-level Coordinator Agent has provided the following master instruction for the entire project:
--- COORDINATOR PROMPT ---
{coordinator_prompt}
--- END COORDINATOR PROMPT ---

Based on this master instruction, the overall document structure, and the current section, generate a concise and specific "system prompt" for an AI Writer Agent.
This system prompt should guide the AI to write content that is perfectly aligned with the section's role within the document.
It should define the AI's persona, its specific goal for this section, and the expected tone and style. The prompt should be a direct instruction to the AI, starting with "You are...".

**Overall Document Title:** "{document_title}"

**Document Outline Structure:**
{outline_structure}

**Current Section to Write:** "{section_title}"

**Generate the System Prompt now.**"""
