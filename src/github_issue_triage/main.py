"""CLI entrypoint.

- `serve`:  run the HTTP API (POST /process_error)
- `triage`: triage a single error log from a file or stdin and print the JSON result
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from github_issue_triage import __version__
from github_issue_triage.config import TriageSettings
from github_issue_triage.errors import ArgumentError, PipelineError, UpstreamError
from github_issue_triage.logging import configure_logging
from github_issue_triage.triage.service import TriageService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github-issue-triage",
        description="Triage error logs into GitHub issues with an LLM agent",
    )
    parser.add_argument(
        "--version", action="version", version=f"github-issue-triage {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: TRIAGE_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: TRIAGE_PORT)")

    triage = subparsers.add_parser("triage", help="Triage one error log and print the result")
    triage.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Read the error log from this file instead of stdin",
    )

    return parser


def _read_error_log(path: Path | None) -> str:
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = TriageSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        service = TriageService.from_settings(settings)
    except (UpstreamError, ValueError, ImportError) as e:
        logger.error("Startup failed", extra={"error": str(e)})
        print(f"Startup failed: {e}", file=sys.stderr)
        return 2

    try:
        if args.command == "serve":
            import uvicorn

            from github_issue_triage.server.app import create_app

            host = args.host or settings.host
            port = args.port or settings.port
            logger.info("Starting API server", extra={"host": host, "port": port})
            # log_config=None keeps uvicorn on the JSON handlers configured above.
            uvicorn.run(create_app(service=service), host=host, port=port, log_config=None)
            return 0

        error_log = _read_error_log(args.file)
        try:
            result = service.triage(error_log)
        except ArgumentError as e:
            print(f"Invalid input: {e}", file=sys.stderr)
            return 2
        except PipelineError as e:
            print(f"Agent failed to process error: {e}", file=sys.stderr)
            return 1
        print(result.model_dump_json(exclude_none=True, indent=2))
        return 0
    finally:
        service.close()


if __name__ == "__main__":
    raise SystemExit(main())
