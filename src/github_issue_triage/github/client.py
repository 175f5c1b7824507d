"""GitHub API client wrapper.

This intentionally wraps PyGithub and a plain `requests` session so GitHub calls stay
out of the tool and server code and tests can inject fakes.

Only two operations are exposed: search and create. The client never updates or
deletes issues, and performs no deduplication of its own.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import requests
from github import Auth, Github, GithubException
from github.Repository import Repository

from github_issue_triage.errors import ArgumentError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IssueSummary:
    """Minimal issue metadata returned from GitHub."""

    title: str
    url: str
    number: int | None = None


class GitHubClient:
    """Small wrapper around PyGithub for the search and create calls triage needs."""

    def __init__(
        self,
        *,
        token: str,
        owner: str,
        repo_name: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not owner or not repo_name:
            raise ValueError("GitHub owner and repository are required")

        self._repository_name = f"{owner}/{repo_name}"
        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-issue-triage",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=base_url)

        try:
            self._repo = self._github.get_repo(self._repository_name)
        except GithubException as e:
            raise UpstreamError(
                f"Failed to connect to repository {self._repository_name}: {e}"
            ) from e
        logger.info(
            "Authenticated with GitHub and connected to repository",
            extra={"repo": self._repository_name},
        )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _search_url(self) -> str:
        return f"{self._rest_base_url}/search/issues"

    def search_issues(self, query: str) -> list[IssueSummary]:
        """Search this repository's issues (title and body) for `query`.

        Returns an empty list when nothing matches.

        Raises:
            ArgumentError: if the query is blank.
            UpstreamError: on transport, auth or response-shape failures.
        """

        if not query.strip():
            raise ArgumentError("Search query must be non-empty")

        q = f"{query.strip()} is:issue in:title,body repo:{self._repository_name}"
        logger.info("Searching GitHub issues", extra={"query": query, "repo": self._repository_name})
        try:
            resp = self._session.get(self._search_url(), params={"q": q}, timeout=30)
            resp.raise_for_status()
            payload: Any = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(
                "GitHub issue search failed",
                extra={"query": query, "repo": self._repository_name, "error": str(e)},
            )
            raise UpstreamError(str(e) or type(e).__name__) from e

        if not isinstance(payload, dict):
            raise UpstreamError("Unexpected search response: not an object")
        items = payload.get("items")
        if not isinstance(items, list):
            return []

        results: list[IssueSummary] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            url = item.get("html_url")
            if not isinstance(url, str) or not url.strip():
                continue
            title = item.get("title")
            number = item.get("number")
            results.append(
                IssueSummary(
                    title=title if isinstance(title, str) else "",
                    url=url,
                    number=number if isinstance(number, int) else None,
                )
            )

        logger.debug("GitHub issue search completed", extra={"query": query, "matches": len(results)})
        return results

    def create_issue(self, *, title: str, body: str, labels: Iterable[str]) -> IssueSummary:
        """Create a new issue.

        Not idempotent: calling this twice with the same arguments creates two issues.

        Raises:
            ArgumentError: if the title is blank.
            UpstreamError: if GitHub rejects the payload or cannot be reached.
        """

        if not title.strip():
            raise ArgumentError("Issue title is required")

        normalized_labels = list(labels)
        logger.info(
            "Creating GitHub issue",
            extra={"title": title, "labels": normalized_labels, "repo": self._repository_name},
        )
        try:
            issue = self._repo.create_issue(title=title, body=body, labels=normalized_labels)
        except (GithubException, requests.RequestException) as e:
            logger.error(
                "GitHub issue creation failed",
                extra={"title": title, "repo": self._repository_name, "error": str(e)},
            )
            raise UpstreamError(str(e) or type(e).__name__) from e

        logger.info("Issue created", extra={"issue_number": issue.number, "url": issue.html_url})
        return IssueSummary(title=issue.title, url=issue.html_url, number=issue.number)

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
