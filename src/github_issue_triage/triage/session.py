"""One triage conversation between the reasoning engine and the tools.

A session is created per request and never shared. It moves through an explicit
state machine:

    INIT -> REASONING -> (DISPATCH -> REASONING)* -> DONE | FAILED

Tool failures are fed back to the engine as text; only engine failures, the turn
budget and cancellation end the session in FAILED.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any

from github_issue_triage.errors import ArgumentError, PipelineError, SessionCancelled
from github_issue_triage.llm.provider import EngineReply, ReasoningEngine, ToolInvocation
from github_issue_triage.logging import bind_run_id
from github_issue_triage.triage.tools import CREATE_ISSUE, SEARCH_ISSUES, ToolRegistry, ToolResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 8


class SessionState(str, Enum):
    INIT = "init"
    REASONING = "reasoning"
    DISPATCH = "dispatch"
    DONE = "done"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.INIT: {SessionState.REASONING, SessionState.FAILED},
    SessionState.REASONING: {SessionState.DISPATCH, SessionState.DONE, SessionState.FAILED},
    SessionState.DISPATCH: {SessionState.REASONING, SessionState.FAILED},
    SessionState.DONE: set(),
    SessionState.FAILED: set(),
}


class IllegalTransitionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    run_id: str
    answer: str
    turns: int
    tool_calls: int
    issue_url: str | None = None


class TriageSession:
    """Drive the reasoning engine and dispatch its tool calls until a final answer."""

    def __init__(
        self,
        *,
        engine: ReasoningEngine,
        tools: ToolRegistry,
        system_prompt: str,
        max_turns: int = DEFAULT_MAX_TURNS,
        require_search_before_create: bool = True,
        cancelled: threading.Event | None = None,
        run_id: str | None = None,
    ) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")

        self.run_id = run_id or uuid.uuid4().hex
        self._engine = engine
        self._tools = tools
        self._system_prompt = system_prompt
        self._max_turns = max_turns
        self._require_search = require_search_before_create
        self._cancelled = cancelled or threading.Event()

        self._state = SessionState.INIT
        self._messages: list[dict[str, Any]] = []
        self._turns = 0
        self._tool_calls = 0
        self._searched = False
        self._create_attempted = False
        self._search_url: str | None = None
        self._created_url: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def issue_url(self) -> str | None:
        """URL observed in tool results that this triage can stand behind.

        A created issue always wins. A search match only counts while no create has
        been attempted: once the engine tries to file a new issue it has rejected
        the matches, and a failed create must not fall back to one of them.
        """

        if self._created_url or self._create_attempted:
            return self._created_url
        return self._search_url

    @property
    def messages(self) -> list[dict[str, Any]]:
        """A copy of the running conversation."""

        return list(self._messages)

    def _transition(self, to: SessionState) -> None:
        if to not in ALLOWED_TRANSITIONS[self._state]:
            raise IllegalTransitionError(
                f"Illegal transition: {self._state.value} -> {to.value}"
            )
        self._state = to

    def _fail(self, error: PipelineError) -> PipelineError:
        self._transition(SessionState.FAILED)
        logger.error(
            "Triage session failed",
            extra={"turns": self._turns, "error": str(error)},
        )
        return error

    def run(self, error_log: str) -> SessionOutcome:
        """Triage one error log and return the engine's final answer.

        Raises:
            ArgumentError: if the error log is empty.
            PipelineError: if the engine fails, the turn budget is exhausted or the
                session is cancelled.
        """

        if self._state is not SessionState.INIT:
            raise IllegalTransitionError("A triage session can only be run once")
        if not error_log or not error_log.strip():
            raise ArgumentError("Error log cannot be empty")

        self._messages = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": error_log},
        ]
        with bind_run_id(self.run_id):
            logger.info("Triage session started")
            self._transition(SessionState.REASONING)
            return self._converse()

    def _converse(self) -> SessionOutcome:
        while True:
            if self._turns >= self._max_turns:
                raise self._fail(
                    PipelineError(
                        f"Reasoning engine did not produce a final answer within "
                        f"{self._max_turns} turns"
                    )
                )
            if self._cancelled.is_set():
                raise self._fail(SessionCancelled("Triage request was cancelled"))

            self._turns += 1
            reply = self._decide()

            if reply.is_final:
                self._transition(SessionState.DONE)
                answer = reply.content or ""
                logger.info(
                    "Triage session finished",
                    extra={"turns": self._turns, "tool_calls": self._tool_calls},
                )
                return SessionOutcome(
                    run_id=self.run_id,
                    answer=answer,
                    turns=self._turns,
                    tool_calls=self._tool_calls,
                    issue_url=self.issue_url,
                )

            self._transition(SessionState.DISPATCH)
            self._dispatch(reply)
            self._transition(SessionState.REASONING)

    def _decide(self) -> EngineReply:
        try:
            return self._engine.decide(self.messages, self._tools.schemas())
        except PipelineError as e:
            raise self._fail(e)
        except Exception as e:
            raise self._fail(PipelineError(f"Reasoning engine failed: {e}")) from e

    def _dispatch(self, reply: EngineReply) -> None:
        self._messages.append(reply.to_message())
        for invocation in reply.tool_calls:
            # Abort outstanding tool calls; the engine call already in flight is not interrupted.
            if self._cancelled.is_set():
                raise self._fail(SessionCancelled("Triage request was cancelled"))

            result = self._execute(invocation)
            self._tool_calls += 1
            self._messages.append(
                {"role": "tool", "tool_call_id": invocation.call_id, "content": result.text}
            )

    def _execute(self, invocation: ToolInvocation) -> ToolResult:
        if invocation.name == CREATE_ISSUE and self._require_search and not self._searched:
            error = ArgumentError(
                f"Call '{SEARCH_ISSUES}' before '{CREATE_ISSUE}' to check for existing issues"
            )
            logger.warning(
                "Rejected create before search",
                extra={"tool": invocation.name},
            )
            return ToolResult(text=f"Error: {error}", error=error)

        result = self._tools.dispatch(invocation)
        if invocation.name == SEARCH_ISSUES and result.ok:
            self._searched = True

        url = result.data.get("url")
        if not (result.ok and isinstance(url, str) and url):
            url = None
        if invocation.name == CREATE_ISSUE:
            self._create_attempted = True
            if url and result.data.get("created"):
                self._created_url = url
        elif invocation.name == SEARCH_ISSUES and url and self._search_url is None:
            self._search_url = url

        logger.debug(
            "Tool result",
            extra={"tool": invocation.name, "ok": result.ok},
        )
        return result
