"""GitHub Issue Triage.

Exposes a single operation, "triage an error log": an LLM agent searches a GitHub
repository for an existing issue matching the log and files a new one if none exists.
"""

__version__ = "0.1.0"

from github_issue_triage.config import TriageSettings

__all__ = ["__version__", "TriageSettings"]
