"""LLM package initialization."""

from github_issue_triage.llm.factory import LLMFactory
from github_issue_triage.llm.provider import EngineReply, ReasoningEngine, ToolInvocation

__all__ = [
    "EngineReply",
    "LLMFactory",
    "ReasoningEngine",
    "ToolInvocation",
]
