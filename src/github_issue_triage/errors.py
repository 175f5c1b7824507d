"""Error taxonomy for the triage service.

- ArgumentError: malformed request or tool arguments (recovered locally)
- UpstreamError: GitHub transport/auth/validation failure
- PipelineError: the reasoning engine failed or the session could not finish
"""

from __future__ import annotations


class TriageError(Exception):
    """Base class for all triage errors."""


class ArgumentError(TriageError, ValueError):
    """Raised when request or tool arguments are missing or malformed."""


class UpstreamError(TriageError):
    """Raised when the issue tracker rejects a call or cannot be reached."""


class PipelineError(TriageError):
    """Raised when a triage session ends without a final answer."""


class SessionCancelled(PipelineError):
    """Raised when the inbound request was cancelled mid-session."""
