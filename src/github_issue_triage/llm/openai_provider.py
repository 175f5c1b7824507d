"""OpenAI reasoning engine implementation."""

import logging
from typing import Any

from openai import OpenAI

from github_issue_triage.llm.provider import (
    EngineReply,
    ReasoningEngine,
    ToolInvocation,
    decode_arguments,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(ReasoningEngine):
    """OpenAI chat-completions engine with tool calling."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        client: OpenAI | None = None,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            api_key: OpenAI API key.
            model: Chat model with tool-calling support.
            temperature: Sampling temperature.
            client: Pre-built client (tests).

        Raises:
            ValueError: If API key is not provided.
        """
        if not api_key and client is None:
            raise ValueError("OpenAI API key is required")

        self.client = client or OpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature

        logger.info(f"OpenAI provider initialized with model: {self.model}")

    def decide(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> EngineReply:
        logger.debug(f"Requesting chat completion with {len(messages)} messages")

        kwargs: dict[str, Any] = {}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,  # type: ignore
            temperature=self.temperature,
            **kwargs,
        )

        message = response.choices[0].message
        calls = [
            ToolInvocation(
                call_id=call.id,
                name=call.function.name,
                arguments=decode_arguments(call.function.arguments),
                raw_arguments=call.function.arguments or "",
            )
            for call in message.tool_calls or []
        ]

        logger.debug(f"Engine returned {len(calls)} tool calls")
        return EngineReply(content=message.content, tool_calls=calls)
