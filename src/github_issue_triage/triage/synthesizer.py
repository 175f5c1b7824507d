"""Turn the engine's final free-text answer into a structured response.

This is a best-effort text scan, not a parse: it relies on the engine echoing the
phrasing of the tool results ("... URL: <url>"). Phrasing drift makes it miss the
URL silently, so callers may pass the URL the tools reported as a fallback.
"""

from __future__ import annotations

import re

from github_issue_triage.models import TriageResponse
from github_issue_triage.triage.tools import CREATED_MARKER

URL_MARKER = "URL: "
EXISTING_MARKER = "Found existing issues:"

# The search tool reports "Found <n> existing issues:".
_EXISTING_COUNTED = re.compile(r"Found \d+ existing issues:")
_WHITESPACE = re.compile(r"\s")


def has_issue_marker(answer: str) -> bool:
    return (
        CREATED_MARKER in answer
        or EXISTING_MARKER in answer
        or _EXISTING_COUNTED.search(answer) is not None
    )


def extract_issue_url(answer: str) -> str | None:
    """Return the first "URL: <url>" value in a created/existing-issue answer."""

    if not has_issue_marker(answer):
        return None

    idx = answer.find(URL_MARKER)
    if idx == -1:
        return None

    rest = answer[idx + len(URL_MARKER) :]
    end = _WHITESPACE.search(rest)
    url = (rest[: end.start()] if end else rest).strip()
    return url or None


def synthesize(answer: str, *, fallback_url: str | None = None) -> TriageResponse:
    """Build the API response; `message` is always the answer verbatim."""

    issue_url = extract_issue_url(answer) or fallback_url or None
    return TriageResponse(status="success", message=answer, issue_url=issue_url)
