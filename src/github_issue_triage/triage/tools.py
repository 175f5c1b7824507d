"""Tool contracts exposed to the reasoning engine.

Each tool is a declarative schema (name, description, typed parameters) bound to an
executor that calls the GitHub gateway. Executor failures are always returned to the
engine as text so it can report or adapt; they never escape the session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

from github_issue_triage.errors import ArgumentError, UpstreamError
from github_issue_triage.github.client import GitHubClient
from github_issue_triage.llm.provider import ToolInvocation

logger = logging.getLogger(__name__)

SEARCH_ISSUES = "search_issues"
CREATE_ISSUE = "create_issue"

LABEL_BUG = "bug"
LABEL_LLM_CREATED = "llm created"
LABEL_ENHANCEMENT = "enhancement"
ALLOWED_LABELS: tuple[str, ...] = (LABEL_BUG, LABEL_LLM_CREATED, LABEL_ENHANCEMENT)

NO_MATCHES_TEXT = "No existing issues found for this query."
CREATED_MARKER = "GitHub issue created successfully!"

ParameterType = Literal["string", "array"]

_PYTHON_TYPES: dict[str, type] = {"string": str, "array": list}


@dataclass(frozen=True, slots=True)
class ToolParameter:
    name: str
    type: ParameterType
    description: str
    enum: tuple[str, ...] | None = None
    required: bool = True

    def schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.type == "array":
            items: dict[str, Any] = {"type": "string"}
            if self.enum:
                items["enum"] = list(self.enum)
            out["items"] = items
        elif self.enum:
            out["enum"] = list(self.enum)
        return out


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of a tool call.

    `text` is what the engine sees. `error` keeps the failure for logging and tests.
    `data` carries structured values (e.g. the issue URL) alongside the prose.
    """

    text: str
    error: Exception | None = None
    data: Mapping[str, object] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


ToolExecutor = Callable[[dict[str, Any]], ToolResult]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    name: str
    description: str
    parameters: tuple[ToolParameter, ...]
    executor: ToolExecutor

    def schema(self) -> dict[str, Any]:
        """Render as an OpenAI function-calling tool definition."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {p.name: p.schema() for p in self.parameters},
                    "required": [p.name for p in self.parameters if p.required],
                },
            },
        }

    def validate(self, arguments: object) -> dict[str, Any]:
        """Check presence and types of arguments; return only declared ones.

        Raises:
            ArgumentError: on a non-object payload, a missing required argument or a
                wrongly typed one.
        """

        if not isinstance(arguments, dict):
            raise ArgumentError(f"Arguments for '{self.name}' must be a JSON object")

        validated: dict[str, Any] = {}
        for param in self.parameters:
            if param.name not in arguments or arguments[param.name] is None:
                if param.required:
                    raise ArgumentError(
                        f"Missing required argument '{param.name}' for '{self.name}'"
                    )
                continue
            value = arguments[param.name]
            if not isinstance(value, _PYTHON_TYPES[param.type]):
                raise ArgumentError(
                    f"Argument '{param.name}' for '{self.name}' must be of type {param.type}"
                )
            if param.type == "string" and param.enum and value not in param.enum:
                raise ArgumentError(
                    f"Argument '{param.name}' for '{self.name}' must be one of {list(param.enum)}"
                )
            validated[param.name] = value
        return validated


class ToolRegistry:
    """Immutable set of tools, keyed by name."""

    def __init__(self, specs: Iterable[ToolSpec]) -> None:
        tools: dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in tools:
                raise ValueError(f"Duplicate tool name: {spec.name}")
            tools[spec.name] = spec
        self._tools: Mapping[str, ToolSpec] = MappingProxyType(tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def schemas(self) -> list[dict[str, Any]]:
        return [spec.schema() for spec in self._tools.values()]

    def dispatch(self, invocation: ToolInvocation) -> ToolResult:
        """Validate and execute one invocation. Never raises."""

        spec = self._tools.get(invocation.name)
        if spec is None:
            error = ArgumentError(
                f"Unknown tool '{invocation.name}'. Available tools: {', '.join(self._tools)}"
            )
            logger.warning("Engine requested unknown tool", extra={"tool": invocation.name})
            return ToolResult(text=f"Error: {error}", error=error)

        try:
            arguments = spec.validate(invocation.arguments)
            logger.info(
                "Tool call",
                extra={"tool": spec.name, "arguments": sorted(arguments)},
            )
            return spec.executor(arguments)
        except (ArgumentError, UpstreamError) as e:
            logger.warning("Tool call failed", extra={"tool": spec.name, "error": str(e)})
            return ToolResult(text=f"Error: {e}", error=e)
        except Exception as e:
            logger.exception("Tool executor raised unexpectedly", extra={"tool": spec.name})
            return ToolResult(text=f"Error: tool '{spec.name}' failed unexpectedly: {e}", error=e)


def filter_labels(labels: Iterable[object]) -> list[str]:
    """Keep only allowed labels, dropping the rest silently. Order is preserved."""

    kept: list[str] = []
    for label in labels:
        if isinstance(label, str) and label in ALLOWED_LABELS and label not in kept:
            kept.append(label)
    return kept


def format_search_results(matches: list[Any]) -> str:
    if not matches:
        return NO_MATCHES_TEXT
    lines = [f'- Title: "{m.title}", URL: {m.url}' for m in matches]
    return f"Found {len(matches)} existing issues:\n" + "\n".join(lines)


def search_issues_tool(github: GitHubClient) -> ToolSpec:
    def execute(arguments: dict[str, Any]) -> ToolResult:
        query: str = arguments["query"]
        try:
            matches = github.search_issues(query)
        except UpstreamError as e:
            return ToolResult(text=f"Error searching GitHub issues: {e}", error=e)

        data: dict[str, object] = {"matches": len(matches)}
        if matches:
            data["url"] = matches[0].url
        return ToolResult(text=format_search_results(matches), data=data)

    return ToolSpec(
        name=SEARCH_ISSUES,
        description=(
            "Searches for existing GitHub issues in the repository based on a query. "
            "Returns a list of issue titles and URLs if found, otherwise indicates no "
            "issues found."
        ),
        parameters=(
            ToolParameter(
                name="query",
                type="string",
                description=(
                    "The search query for GitHub issues, e.g., 'bug in login module' or "
                    "'database connection error'."
                ),
            ),
        ),
        executor=execute,
    )


def create_issue_tool(github: GitHubClient) -> ToolSpec:
    def execute(arguments: dict[str, Any]) -> ToolResult:
        title: str = arguments["title"]
        body: str = arguments["body"]
        if not title.strip():
            raise ArgumentError("'title' must be a non-empty string for create_issue")
        if not body.strip():
            raise ArgumentError("'body' must be a non-empty string for create_issue")

        labels = filter_labels(arguments.get("labels") or [])
        try:
            issue = github.create_issue(title=title, body=body, labels=labels)
        except UpstreamError as e:
            return ToolResult(text=f"Error creating GitHub issue: {e}", error=e)

        return ToolResult(
            text=f'{CREATED_MARKER} Title: "{issue.title}", URL: {issue.url}',
            data={"url": issue.url, "title": issue.title, "created": True},
        )

    return ToolSpec(
        name=CREATE_ISSUE,
        description=(
            "Creates a new GitHub issue in the repository. Provide a title, detailed "
            "body, and labels."
        ),
        parameters=(
            ToolParameter(
                name="title",
                type="string",
                description=(
                    "The title of the new GitHub issue (e.g., 'Bug: Login failure on homepage')."
                ),
            ),
            ToolParameter(
                name="body",
                type="string",
                description=(
                    "The detailed description for the GitHub issue, including stack traces "
                    "or context."
                ),
            ),
            ToolParameter(
                name="labels",
                type="array",
                description="Labels to apply to the issue, e.g., ['bug', 'llm created'].",
                enum=ALLOWED_LABELS,
                required=False,
            ),
        ),
        executor=execute,
    )


def build_triage_tools(github: GitHubClient) -> ToolRegistry:
    """Register the search and create tools against one repository."""

    return ToolRegistry([search_issues_tool(github), create_issue_tool(github)])
