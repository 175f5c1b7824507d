"""Unit tests for the tool contracts (mocked gateway)."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from github_issue_triage.errors import ArgumentError, UpstreamError
from github_issue_triage.github.client import IssueSummary
from github_issue_triage.llm.provider import ToolInvocation
from github_issue_triage.triage.tools import (
    ALLOWED_LABELS,
    CREATE_ISSUE,
    NO_MATCHES_TEXT,
    SEARCH_ISSUES,
    ToolParameter,
    ToolRegistry,
    ToolResult,
    ToolSpec,
    filter_labels,
)


def _invoke(name: str, arguments: object) -> ToolInvocation:
    return ToolInvocation(call_id="call_1", name=name, arguments=arguments)


def test_registry_exposes_both_tools(registry: ToolRegistry) -> None:
    assert registry.names == [SEARCH_ISSUES, CREATE_ISSUE]


def test_create_issue_schema_declares_label_enum(registry: ToolRegistry) -> None:
    spec = registry.get(CREATE_ISSUE)
    assert spec is not None
    params = spec.schema()["function"]["parameters"]

    assert params["required"] == ["title", "body"]
    assert params["properties"]["labels"]["type"] == "array"
    assert params["properties"]["labels"]["items"] == {
        "type": "string",
        "enum": list(ALLOWED_LABELS),
    }


def test_search_with_no_matches_returns_sentence(registry: ToolRegistry, mock_github: Mock) -> None:
    result = registry.dispatch(_invoke(SEARCH_ISSUES, {"query": "nil pointer"}))

    assert result.ok
    assert result.text == NO_MATCHES_TEXT
    assert "url" not in result.data
    mock_github.search_issues.assert_called_once_with("nil pointer")


def test_search_formats_matches(registry: ToolRegistry, mock_github: Mock) -> None:
    mock_github.search_issues.return_value = [
        IssueSummary(title="Bug: nil pointer in db", url="https://x/42", number=42),
        IssueSummary(title="Crash on start", url="https://x/7", number=7),
    ]

    result = registry.dispatch(_invoke(SEARCH_ISSUES, {"query": "nil pointer"}))

    assert result.text == (
        "Found 2 existing issues:\n"
        '- Title: "Bug: nil pointer in db", URL: https://x/42\n'
        '- Title: "Crash on start", URL: https://x/7'
    )
    assert result.data["url"] == "https://x/42"


def test_search_upstream_failure_is_reported_as_text(
    registry: ToolRegistry, mock_github: Mock
) -> None:
    mock_github.search_issues.side_effect = UpstreamError("401 Bad credentials")

    result = registry.dispatch(_invoke(SEARCH_ISSUES, {"query": "boom"}))

    assert not result.ok
    assert isinstance(result.error, UpstreamError)
    assert result.text == "Error searching GitHub issues: 401 Bad credentials"


def test_create_issue_with_empty_title_does_not_call_gateway(
    registry: ToolRegistry, mock_github: Mock
) -> None:
    result = registry.dispatch(
        _invoke(CREATE_ISSUE, {"title": "", "body": "trace", "labels": ["bug"]})
    )

    assert isinstance(result.error, ArgumentError)
    assert result.text.startswith("Error: ")
    assert "title" in result.text
    mock_github.create_issue.assert_not_called()


def test_create_issue_with_blank_body_does_not_call_gateway(
    registry: ToolRegistry, mock_github: Mock
) -> None:
    result = registry.dispatch(_invoke(CREATE_ISSUE, {"title": "Bug: x", "body": "   "}))

    assert isinstance(result.error, ArgumentError)
    mock_github.create_issue.assert_not_called()


def test_create_issue_drops_unlisted_labels(registry: ToolRegistry, mock_github: Mock) -> None:
    mock_github.create_issue.return_value = IssueSummary(title="Bug: x", url="https://x/1")

    result = registry.dispatch(
        _invoke(CREATE_ISSUE, {"title": "Bug: x", "body": "trace", "labels": ["bug", "typo-unlisted"]})
    )

    assert result.ok
    mock_github.create_issue.assert_called_once_with(title="Bug: x", body="trace", labels=["bug"])


def test_create_issue_success_text_and_data(registry: ToolRegistry, mock_github: Mock) -> None:
    mock_github.create_issue.return_value = IssueSummary(
        title="Bug: nil pointer in db", url="https://x/42", number=42
    )

    result = registry.dispatch(
        _invoke(
            CREATE_ISSUE,
            {"title": "Bug: nil pointer in db", "body": "log", "labels": ["bug", "llm created"]},
        )
    )

    assert result.text == (
        'GitHub issue created successfully! Title: "Bug: nil pointer in db", URL: https://x/42'
    )
    assert result.data["url"] == "https://x/42"
    assert result.data["created"] is True


def test_create_issue_without_labels_sends_empty_list(
    registry: ToolRegistry, mock_github: Mock
) -> None:
    mock_github.create_issue.return_value = IssueSummary(title="Bug: x", url="https://x/1")

    registry.dispatch(_invoke(CREATE_ISSUE, {"title": "Bug: x", "body": "trace"}))

    mock_github.create_issue.assert_called_once_with(title="Bug: x", body="trace", labels=[])


def test_create_issue_upstream_failure(registry: ToolRegistry, mock_github: Mock) -> None:
    mock_github.create_issue.side_effect = UpstreamError("422 Validation Failed")

    result = registry.dispatch(_invoke(CREATE_ISSUE, {"title": "Bug: x", "body": "trace"}))

    assert isinstance(result.error, UpstreamError)
    assert result.text == "Error creating GitHub issue: 422 Validation Failed"


@pytest.mark.parametrize(
    ("name", "arguments", "fragment"),
    [
        ("delete_issue", {}, "Unknown tool 'delete_issue'"),
        (SEARCH_ISSUES, "not json", "must be a JSON object"),
        (SEARCH_ISSUES, {}, "Missing required argument 'query'"),
        (SEARCH_ISSUES, {"query": 42}, "must be of type string"),
        (CREATE_ISSUE, {"title": "t", "body": "b", "labels": "bug"}, "must be of type array"),
    ],
)
def test_invalid_invocations_become_error_results(
    registry: ToolRegistry, mock_github: Mock, name: str, arguments: object, fragment: str
) -> None:
    result = registry.dispatch(_invoke(name, arguments))

    assert isinstance(result.error, ArgumentError)
    assert fragment in result.text
    mock_github.search_issues.assert_not_called()
    mock_github.create_issue.assert_not_called()


def test_unexpected_executor_failure_is_contained() -> None:
    def explode(_arguments: dict[str, object]) -> ToolResult:
        raise RuntimeError("kaboom")

    registry = ToolRegistry(
        [
            ToolSpec(
                name="explode",
                description="always fails",
                parameters=(ToolParameter(name="x", type="string", description="x"),),
                executor=explode,
            )
        ]
    )

    result = registry.dispatch(_invoke("explode", {"x": "1"}))

    assert isinstance(result.error, RuntimeError)
    assert "kaboom" in result.text


def test_registry_rejects_duplicate_names(registry: ToolRegistry) -> None:
    spec = registry.get(SEARCH_ISSUES)
    assert spec is not None
    with pytest.raises(ValueError):
        ToolRegistry([spec, spec])


def test_filter_labels_keeps_order_and_drops_duplicates() -> None:
    assert filter_labels(["llm created", "bug", "bug", 3, "wontfix"]) == ["llm created", "bug"]
