"""Unit tests for extracting the issue URL from the engine's final answer."""

from __future__ import annotations

import pytest

from github_issue_triage.triage.synthesizer import extract_issue_url, synthesize


def test_created_answer_yields_url() -> None:
    answer = 'GitHub issue created successfully! Title: "X", URL: https://x/42'

    response = synthesize(answer)

    assert response.status == "success"
    assert response.message == answer
    assert response.issue_url == "https://x/42"


def test_answer_without_url_marker_has_no_url() -> None:
    response = synthesize("GitHub issue created successfully! but the link was lost")

    assert response.issue_url is None
    assert response.model_dump(exclude_none=True) == {
        "status": "success",
        "message": "GitHub issue created successfully! but the link was lost",
    }


@pytest.mark.parametrize(
    ("answer", "expected"),
    [
        ("Found existing issues:\n- URL: https://x/7 (open)", "https://x/7"),
        ('Found 2 existing issues:\n- Title: "A", URL: https://x/1\n- Title: "B", URL: https://x/2', "https://x/1"),
        ('GitHub issue created successfully! Title: "X", URL: https://x/42\nThanks!', "https://x/42"),
        ('GitHub issue created successfully! Title: "X", URL: https://x/42\tdone', "https://x/42"),
    ],
)
def test_url_stops_at_whitespace(answer: str, expected: str) -> None:
    assert extract_issue_url(answer) == expected


def test_url_without_known_marker_is_ignored() -> None:
    assert extract_issue_url("See URL: https://example.com/docs for details") is None


def test_empty_url_value_is_treated_as_missing() -> None:
    assert extract_issue_url("GitHub issue created successfully! URL: ") is None


def test_fallback_url_used_only_when_text_has_none() -> None:
    assert synthesize("I filed it.", fallback_url="https://x/9").issue_url == "https://x/9"
    assert (
        synthesize(
            'GitHub issue created successfully! Title: "X", URL: https://x/42',
            fallback_url="https://x/9",
        ).issue_url
        == "https://x/42"
    )


def test_message_is_verbatim() -> None:
    answer = "  Something went wrong: Error creating GitHub issue: 422  \n"
    assert synthesize(answer).message == answer
