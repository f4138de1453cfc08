from __future__ import annotations

RESEARCH_PROMPT = (
    "You are a Research Agent. Your task is to perform a web search about the following topic "
    "and return the top {max_results} results. For each result, provide the title and a "
    'one-sentence summary. Format your response clearly. Topic: "{topic}"'
)
