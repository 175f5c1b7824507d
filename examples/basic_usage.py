#!/usr/bin/env python3
"""Programmatic triage example.

This demonstrates using the triage components directly:

* load settings from `.env`
* build the GitHub gateway and reasoning engine
* triage one error log and print the structured result
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from github_issue_triage.config import TriageSettings
from github_issue_triage.errors import PipelineError
from github_issue_triage.logging import configure_logging
from github_issue_triage.triage.service import TriageService


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Triage an error log (programmatic example).")
    parser.add_argument("error_log", help="Error log text to triage")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = TriageSettings()
    configure_logging(settings.log_level)

    service = TriageService.from_settings(settings)
    try:
        result = service.triage(args.error_log)
    except PipelineError as exc:
        print(f"Triage failed: {exc}", file=sys.stderr)
        return 1
    finally:
        service.close()

    print(result.message)
    if result.issue_url:
        print(f"URL: {result.issue_url}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
