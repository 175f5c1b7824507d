"""Process-wide triage service.

Holds the shared, read-only collaborators (GitHub gateway, reasoning engine, tool
registry) and creates a fresh session for every error log it is given.
"""

from __future__ import annotations

import logging
import threading

from github_issue_triage.config import TriageSettings
from github_issue_triage.github.client import GitHubClient
from github_issue_triage.llm.factory import LLMFactory
from github_issue_triage.llm.provider import ReasoningEngine
from github_issue_triage.models import TriageResponse
from github_issue_triage.prompts import build_system_prompt
from github_issue_triage.triage.session import DEFAULT_MAX_TURNS, TriageSession
from github_issue_triage.triage.synthesizer import synthesize
from github_issue_triage.triage.tools import ToolRegistry, build_triage_tools

logger = logging.getLogger(__name__)


class TriageService:
    """Triage error logs against one repository."""

    def __init__(
        self,
        *,
        engine: ReasoningEngine,
        tools: ToolRegistry,
        repository: str,
        max_turns: int = DEFAULT_MAX_TURNS,
        require_search_before_create: bool = True,
        structured_url_fallback: bool = True,
        github: GitHubClient | None = None,
    ) -> None:
        self.engine = engine
        self.tools = tools
        self.repository = repository
        self.system_prompt = build_system_prompt(repository)
        self.max_turns = max_turns
        self.require_search_before_create = require_search_before_create
        self.structured_url_fallback = structured_url_fallback
        self._github = github

    @classmethod
    def from_settings(cls, settings: TriageSettings) -> TriageService:
        """Build the GitHub client and reasoning engine from configuration."""

        github = GitHubClient(
            token=settings.github_token,
            owner=settings.github_owner,
            repo_name=settings.github_repo,
            base_url=settings.github_base_url,
        )
        return cls(
            engine=LLMFactory.create(settings),
            tools=build_triage_tools(github),
            repository=settings.repository,
            max_turns=settings.max_turns,
            require_search_before_create=settings.require_search_before_create,
            structured_url_fallback=settings.structured_url_fallback,
            github=github,
        )

    def new_session(self, *, cancelled: threading.Event | None = None) -> TriageSession:
        return TriageSession(
            engine=self.engine,
            tools=self.tools,
            system_prompt=self.system_prompt,
            max_turns=self.max_turns,
            require_search_before_create=self.require_search_before_create,
            cancelled=cancelled,
        )

    def triage(
        self, error_log: str, *, cancelled: threading.Event | None = None
    ) -> TriageResponse:
        """Run one session and synthesize its answer.

        Raises:
            ArgumentError: if the error log is empty.
            PipelineError: if the session fails.
        """

        session = self.new_session(cancelled=cancelled)
        outcome = session.run(error_log)
        logger.info(
            "Agent final response",
            extra={"run_id": outcome.run_id, "answer": outcome.answer},
        )

        fallback = outcome.issue_url if self.structured_url_fallback else None
        return synthesize(outcome.answer, fallback_url=fallback)

    def close(self) -> None:
        if self._github is not None:
            self._github.close()
