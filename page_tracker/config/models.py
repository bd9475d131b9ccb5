"""Pydantic models used across the page-tracker configuration flow."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_OUTPUT_FORMAT = "%Y-%m-%dT%H:%M:%SZ.csv"


class Credential(BaseModel):
    """Bearer token plus the account and namespace that own the KV store."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1, repr=False)
    account_id: str = Field(min_length=1)
    namespace_id: str = Field(min_length=1)


class ClientSettings(BaseModel):
    """Tunables read from the optional settings file."""

    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = Field(default=30.0, gt=0)
    max_workers: int | None = Field(
        default=None,
        description="Upper bound on concurrent value fetches; null fans out one worker per key.",
    )
    best_effort: bool = False
    output_format: str = DEFAULT_OUTPUT_FORMAT

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("api_base_url cannot be empty")
        return value

    @field_validator("max_workers")
    @classmethod
    def _validate_workers(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("max_workers must be >= 1 or null")
        return value

    @field_validator("output_format")
    @classmethod
    def _validate_format(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("output_format cannot be empty")
        return value


class OutputDestination(BaseModel):
    """Either a fixed output file or a directory plus a strftime file pattern."""

    output: Path | None = None
    output_dir: Path | None = None
    output_format: str = DEFAULT_OUTPUT_FORMAT

    @field_validator("output", "output_dir", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_exclusive(self) -> "OutputDestination":
        if self.output is not None and self.output_dir is not None:
            raise ValueError("output and output_dir are mutually exclusive")
        if self.output is None and self.output_dir is None:
            raise ValueError("one of output or output_dir is required")
        return self

    def resolve(self, now: datetime) -> Path:
        """Return the file path to write, evaluating the pattern against UTC ``now``."""

        if self.output_dir is None:
            if self.output is None:
                raise ValueError("one of output or output_dir is required")
            return self.output
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        else:
            now = now.astimezone(timezone.utc)
        return self.output_dir / now.strftime(self.output_format)


__all__ = [
    "ClientSettings",
    "Credential",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_OUTPUT_FORMAT",
    "OutputDestination",
]
