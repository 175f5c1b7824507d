"""Configuration for the triage service.

Configuration is loaded once at process start from:
- environment variables
- and a local `.env` file (if present)

Missing credentials or repository identity are a fatal startup condition, not a
per-request error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TriageSettings(BaseSettings):
    """Settings for the triage service.

    Environment variables:
    - OPENAI_API_KEY    (required for the OpenAI provider)
    - GITHUB_TOKEN
    - GITHUB_OWNER
    - GITHUB_REPO
    - GITHUB_BASE_URL   (optional)
    - LOG_LEVEL         (optional)
    - TRIAGE_*          (optional tuning, see fields below)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `TriageSettings(_env_file=path_to_env)`.
    """

    # Defaults are intentionally empty; validation below enforces that values are provided.
    openai_api_key: str = Field(
        default="",
        validation_alias="OPENAI_API_KEY",
        description="OpenAI API key used by the reasoning engine",
    )
    github_token: str = Field(
        default="",
        validation_alias="GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_owner: str = Field(
        default="",
        validation_alias="GITHUB_OWNER",
        description="Owner (user or org) of the repository issues are filed against",
    )
    github_repo: str = Field(
        default="",
        validation_alias="GITHUB_REPO",
        description="Name of the repository issues are filed against",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    llm_provider: Literal["openai", "llama"] = Field(
        default="openai",
        validation_alias="TRIAGE_LLM_PROVIDER",
        description="Reasoning engine backend",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias="TRIAGE_OPENAI_MODEL",
        description="OpenAI chat model with tool-calling support",
    )
    openai_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        validation_alias="TRIAGE_OPENAI_TEMPERATURE",
        description="Sampling temperature for the OpenAI model",
    )
    llama_model_path: Path | None = Field(
        default=None,
        validation_alias="TRIAGE_LLAMA_MODEL_PATH",
        description="Path to a local GGUF model (llama provider only)",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        validation_alias="TRIAGE_LLAMA_N_CTX",
        description="Context window size for LLaMA",
    )

    max_turns: int = Field(
        default=8,
        ge=1,
        le=50,
        validation_alias="TRIAGE_MAX_TURNS",
        description="Maximum reasoning turns per triage session",
    )
    require_search_before_create: bool = Field(
        default=True,
        validation_alias="TRIAGE_REQUIRE_SEARCH_BEFORE_CREATE",
        description="Reject create_issue calls that are not preceded by a search in the session",
    )
    structured_url_fallback: bool = Field(
        default=True,
        validation_alias="TRIAGE_STRUCTURED_URL_FALLBACK",
        description=(
            "Use the issue URL reported by the tools when the engine's final answer "
            "does not contain one"
        ),
    )

    host: str = Field(default="0.0.0.0", validation_alias="TRIAGE_HOST")
    port: int = Field(default=8000, gt=0, lt=65536, validation_alias="TRIAGE_PORT")

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _require_credentials(self) -> TriageSettings:
        missing = [
            name
            for name, value in (
                ("GITHUB_TOKEN", self.github_token),
                ("GITHUB_OWNER", self.github_owner),
                ("GITHUB_REPO", self.github_repo),
            )
            if not value.strip()
        ]
        if self.llm_provider == "openai" and not self.openai_api_key.strip():
            missing.insert(0, "OPENAI_API_KEY")
        if self.llm_provider == "llama" and self.llama_model_path is None:
            missing.append("TRIAGE_LLAMA_MODEL_PATH")
        if missing:
            raise ValueError(f"{', '.join(missing)} must be set")
        return self

    @property
    def repository(self) -> str:
        """Return the target repository as "owner/repo"."""

        return f"{self.github_owner.strip()}/{self.github_repo.strip()}"
