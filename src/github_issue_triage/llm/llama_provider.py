"""Local LLaMA reasoning engine implementation."""

import logging
import uuid
from pathlib import Path
from typing import Any

from github_issue_triage.llm.provider import (
    EngineReply,
    ReasoningEngine,
    ToolInvocation,
    decode_arguments,
)

logger = logging.getLogger(__name__)


class LLaMAProvider(ReasoningEngine):
    """Local LLaMA model engine using llama.cpp function calling.

    Requires llama-cpp-python to be installed:
        pip install "github-issue-triage[llama]"
    """

    def __init__(
        self,
        *,
        model_path: Path | None,
        n_ctx: int = 4096,
        chat_format: str = "chatml-function-calling",
    ) -> None:
        """Initialize the LLaMA provider.

        Args:
            model_path: Path to a GGUF model file.
            n_ctx: Context window size.
            chat_format: llama.cpp chat handler that supports tools.

        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not model_path:
            raise ValueError("LLaMA model path is required")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for LLaMA provider. "
                "Install it with: pip install llama-cpp-python"
            ) from e

        logger.info(f"Loading LLaMA model from: {model_path}")

        self.llm = Llama(
            model_path=str(model_path),
            n_ctx=n_ctx,
            chat_format=chat_format,
            verbose=False,
        )

        logger.info("LLaMA model loaded successfully")

    def decide(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> EngineReply:
        logger.debug(f"Requesting chat completion with {len(messages)} messages")

        result = self.llm.create_chat_completion(
            messages=messages,  # type: ignore
            tools=tools or None,  # type: ignore
            tool_choice="auto" if tools else None,  # type: ignore
        )

        message = result["choices"][0]["message"]
        calls: list[ToolInvocation] = []
        for call in message.get("tool_calls") or []:
            function = call.get("function") or {}
            raw = function.get("arguments") or ""
            calls.append(
                ToolInvocation(
                    # llama.cpp does not always assign call ids.
                    call_id=call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
                    name=function.get("name", ""),
                    arguments=decode_arguments(raw),
                    raw_arguments=raw,
                )
            )

        return EngineReply(content=message.get("content"), tool_calls=calls)
