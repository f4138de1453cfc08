"""Tests for agent invocation contracts."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from authorflow.agents import (
    AgentInvocationError,
    AgentValidationError,
    OutlinerAgent,
    ResearchAgent,
    WriterAgent,
)
from authorflow.context.requests import (
    CreateTailoredPromptRequest,
    GenerateInitialDraftRequest,
    GenerateOutlineRequest,
    ParseOutlineRequest,
    ResearchTopicRequest,
    WriterContext,
)
from authorflow.llm.client import Completion, GroundingCitation, _iter_url_citations

from conftest import FakeLLM


def test_outliner_returns_stripped_draft() -> None:
    llm = FakeLLM(["  - Intro\n- Body  \n"])
    agent = OutlinerAgent(llm, temperature=0.4)

    draft = asyncio.run(
        agent.generate_outline(GenerateOutlineRequest(outline_draft="", instruction="bees", coordinator_prompt="C"))
    )

    assert draft == "- Intro\n- Body"
    assert llm.calls[0].temperature == 0.4
    assert llm.calls[0].grounded is False


def test_parse_outline_strips_fence_and_attaches_metadata() -> None:
    """It should accept fenced JSON and number the nodes."""

    llm = FakeLLM(['```json\n[{"title": "1. Intro"}, {"title": "2. Body", "children": [{"title": "2.1. Sub"}]}]\n```'])
    agent = OutlinerAgent(llm, parser_temperature=0.0)

    outline = asyncio.run(agent.parse_outline(ParseOutlineRequest(outline_text="- Intro")))

    assert [n.id for n in outline] == ["1", "2"]
    assert outline[1].children[0].id == "2.1"
    assert outline[1].children[0].level == 1
    assert llm.calls[0].temperature == 0.0


@pytest.mark.parametrize("answer", ["not json at all", '{"title": "x"}'])
def test_parse_outline_rejects_unusable_answers(answer: str) -> None:
    agent = OutlinerAgent(FakeLLM([answer]))

    with pytest.raises(AgentValidationError):
        asyncio.run(agent.parse_outline(ParseOutlineRequest(outline_text="- x")))


def test_client_failures_become_invocation_errors() -> None:
    """It should wrap client exceptions and never retry."""

    llm = FakeLLM([ConnectionError("offline")])
    agent = WriterAgent(llm)

    with pytest.raises(AgentInvocationError) as exc_info:
        asyncio.run(
            agent.generate_initial_draft(GenerateInitialDraftRequest(instruction="x", context=WriterContext()))
        )

    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert len(llm.calls) == 1


def test_tailored_prompt_is_prefixed_with_coordinator() -> None:
    llm = FakeLLM(["  You are a careful historian.  "])
    agent = WriterAgent(llm)

    prompt = asyncio.run(
        agent.create_tailored_prompt(
            CreateTailoredPromptRequest(
                document_title="Bees",
                outline_structure="- Bees",
                section_title="Bees",
                coordinator_prompt="BE CLEAR",
            )
        )
    )

    assert prompt == "BE CLEAR\n\n---\n\nYou are a careful historian."
    assert llm.calls[0].system is None


def test_research_merges_citations() -> None:
    text = "1. Alpha\nFirst.\n2. Beta\nSecond.\n3. Gamma\nThird.\n4. Delta\nFourth."
    llm = FakeLLM([Completion(text=text, citations=(GroundingCitation(title="Alpha Site", uri="https://a"),))])
    agent = ResearchAgent(llm, placeholder_url="#none")

    results = asyncio.run(agent.research_topic(ResearchTopicRequest(topic="greek letters")))

    assert [r.title for r in results] == ["Alpha Site", "Beta", "Gamma"]
    assert [r.url for r in results] == ["https://a", "#none", "#none"]
    assert len({r.id for r in results}) == 3
    assert llm.calls[0].grounded is True


def test_url_citations_are_collected_once_per_url() -> None:
    """It should read url_citation annotations from message output items only."""

    cite = SimpleNamespace(type="url_citation", url="https://a", title="A")
    output = [
        SimpleNamespace(type="web_search_call"),
        SimpleNamespace(
            type="message",
            content=[
                SimpleNamespace(annotations=[cite, cite, SimpleNamespace(type="file_citation")]),
                SimpleNamespace(annotations=None),
            ],
        ),
    ]

    assert list(_iter_url_citations(output)) == [GroundingCitation(title="A", uri="https://a")]


def test_repeated_source_does_not_shift_later_citations() -> None:
    """It should pair the second distinct source with the second result."""

    a = SimpleNamespace(type="url_citation", url="https://a", title="A")
    b = SimpleNamespace(type="url_citation", url="https://b", title="B")
    output = [SimpleNamespace(type="message", content=[SimpleNamespace(annotations=[a, a, b])])]

    citations = tuple(_iter_url_citations(output))
    assert [c.uri for c in citations] == ["https://a", "https://b"]

    text = "1. Alpha\nFirst.\n2. Beta\nSecond.\n3. Gamma\nThird."
    agent = ResearchAgent(FakeLLM([Completion(text=text, citations=citations)]), placeholder_url="#none")
    results = asyncio.run(agent.research_topic(ResearchTopicRequest(topic="letters")))

    assert [(r.title, r.url) for r in results] == [("A", "https://a"), ("B", "https://b"), ("Gamma", "#none")]
