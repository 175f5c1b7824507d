"""Test configuration and fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest

from github_issue_triage.github.client import GitHubClient
from github_issue_triage.llm.provider import EngineReply, ReasoningEngine, ToolInvocation
from github_issue_triage.triage.service import TriageService
from github_issue_triage.triage.tools import ToolRegistry, build_triage_tools

Step = EngineReply | Callable[[list[dict[str, Any]]], EngineReply]


class ScriptedEngine(ReasoningEngine):
    """Deterministic engine double: replays a fixed script of replies.

    A step may be an `EngineReply` or a callable that builds one from the
    conversation seen so far. Once the script is exhausted the engine answers with
    the last tool result verbatim.
    """

    def __init__(self, steps: list[Step]) -> None:
        self.steps = list(steps)
        self.calls: list[list[dict[str, Any]]] = []
        self.tool_names: list[list[str]] = []

    def decide(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> EngineReply:
        self.calls.append(messages)
        self.tool_names.append([t["function"]["name"] for t in tools])
        if not self.steps:
            return EngineReply(content=last_tool_result(messages))
        step = self.steps.pop(0)
        if callable(step):
            return step(messages)
        return step

    @staticmethod
    def tool_call(name: str, arguments: object, call_id: str = "call_1") -> EngineReply:
        """Build a reply requesting one tool invocation."""

        raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
        return EngineReply(
            tool_calls=[
                ToolInvocation(call_id=call_id, name=name, arguments=arguments, raw_arguments=raw)
            ]
        )

    @staticmethod
    def answer(text: str) -> EngineReply:
        return EngineReply(content=text)


def last_tool_result(messages: list[dict[str, Any]]) -> str:
    for message in reversed(messages):
        if message.get("role") == "tool":
            return str(message["content"])
    return ""


@pytest.fixture
def scripted() -> type[ScriptedEngine]:
    return ScriptedEngine


@pytest.fixture
def mock_github() -> Mock:
    github = Mock(spec=GitHubClient)
    github.repository = "octo-org/octo-repo"
    github.search_issues.return_value = []
    return github


@pytest.fixture
def registry(mock_github: Mock) -> ToolRegistry:
    return build_triage_tools(mock_github)


@pytest.fixture
def make_service(registry: ToolRegistry) -> Callable[..., TriageService]:
    def _make(engine: ReasoningEngine, **kwargs: Any) -> TriageService:
        return TriageService(
            engine=engine,
            tools=registry,
            repository="octo-org/octo-repo",
            **kwargs,
        )

    return _make
