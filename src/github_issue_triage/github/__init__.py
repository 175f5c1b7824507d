"""GitHub issue-tracker gateway."""

from github_issue_triage.github.client import GitHubClient, IssueSummary

__all__ = ["GitHubClient", "IssueSummary"]
