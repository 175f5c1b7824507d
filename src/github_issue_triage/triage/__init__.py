"""Triage core: tool contracts, the per-request session and response synthesis.

Import from the submodules directly; this package keeps no re-exports so the
prompt and server modules can depend on individual pieces without import cycles.
"""

__all__: list[str] = []
