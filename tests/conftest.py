"""Shared fixtures: a scripted completion client and ready-made workbenches."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Sequence

import pytest

from authorflow.config import Settings
from authorflow.llm.client import ChatMessage, Completion
from authorflow.workflow.workbench import Workbench

OUTLINE_JSON = json.dumps(
    [
        {"title": "Intro", "children": []},
        {"title": "Body", "children": [{"title": "Sub", "children": []}]},
    ]
)


@dataclass
class FakeCall:
    messages: list[ChatMessage]
    system: str | None
    temperature: float
    grounded: bool


@dataclass
class FakeLLM:
    """Completion client returning scripted answers in order.

    A scripted item may be a string, a :class:`Completion` or an exception to raise. When the
    script runs out every call answers ``"ok"``.
    """

    script: list[Any] = field(default_factory=list)
    calls: list[FakeCall] = field(default_factory=list)

    def queue(self, *items: Any) -> None:
        self.script.extend(items)

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system: str | None = None,
        temperature: float = 0.2,
        grounded: bool = False,
    ) -> Completion:
        self.calls.append(
            FakeCall(messages=list(messages), system=system, temperature=temperature, grounded=grounded)
        )
        if not self.script:
            return Completion(text="ok")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, Completion):
            return item
        return Completion(text=str(item))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(projects_dir=tmp_path / "projects", openai_api_key=None)


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def bench(llm: FakeLLM, settings: Settings) -> Workbench:
    """A workbench with one open project and its default document."""

    wb = Workbench(llm, settings)
    wb.create_project("Field Report")
    return wb


@pytest.fixture
def outlined(bench: Workbench, llm: FakeLLM) -> Workbench:
    """A workbench whose document has the outline Intro / Body / Body > Sub."""

    bench.edit_outline_draft("- Intro\n- Body\n  - Sub")
    llm.queue(OUTLINE_JSON)
    asyncio.run(bench.finalize_outline())
    llm.calls.clear()
    return bench
