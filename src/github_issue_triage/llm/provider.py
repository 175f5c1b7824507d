"""Abstract reasoning-engine interface.

The engine is an opaque collaborator: given the conversation so far and the declared
tools, it either requests tool invocations or returns a final textual answer.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    """A single tool call requested by the engine.

    `arguments` is untyped at this boundary; the tool registry validates it.
    """

    call_id: str
    name: str
    arguments: object
    raw_arguments: str = ""

    def to_message(self) -> dict[str, Any]:
        return {
            "id": self.call_id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments},
        }


@dataclass(frozen=True, slots=True)
class EngineReply:
    """One reasoning turn: either tool calls or a final answer."""

    content: str | None = None
    tool_calls: list[ToolInvocation] = field(default_factory=list)

    @property
    def is_final(self) -> bool:
        return not self.tool_calls

    def to_message(self) -> dict[str, Any]:
        """Render as an assistant message for the running conversation."""

        message: dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [call.to_message() for call in self.tool_calls]
        return message


def decode_arguments(raw: str | None) -> object:
    """Decode a tool-call argument string.

    Invalid JSON is returned as the raw string so validation can report it back to
    the engine instead of failing the session.
    """

    if raw is None or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class ReasoningEngine(ABC):
    """Abstract base class for reasoning engines.

    This interface allows pluggable backends (OpenAI, LLaMA, scripted test doubles).
    """

    @abstractmethod
    def decide(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> EngineReply:
        """Run one reasoning turn.

        Args:
            messages: Conversation so far, as chat messages.
            tools: Tool schemas in OpenAI function-calling format.

        Returns:
            The engine's reply for this turn.
        """
        pass
