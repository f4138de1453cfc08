"""LLM transport."""

from __future__ import annotations

from authorflow.llm.client import ChatMessage, Completion, CompletionClient, GroundingCitation, LLMClient

__all__ = ["ChatMessage", "Completion", "CompletionClient", "GroundingCitation", "LLMClient"]
