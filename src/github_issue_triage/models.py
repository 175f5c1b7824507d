"""Request and response models for the triage API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TriageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error_log: str = Field(default="", strict=True, validate_default=True)

    @field_validator("error_log")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Error log cannot be empty")
        return value


TriageStatus = Literal["success", "error"]


class TriageResponse(BaseModel):
    status: TriageStatus
    message: str
    issue_url: str | None = None
