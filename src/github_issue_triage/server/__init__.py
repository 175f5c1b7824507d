"""FastAPI server adapter for github-issue-triage.

Design intent:
- Keep orchestration logic in `github_issue_triage.triage.*`
- Keep HTTP concerns (body decoding, status codes, disconnects) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from github_issue_triage.server.app import create_app
