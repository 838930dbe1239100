"""Logging policy models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class ObservabilityPolicy(BaseModel):
    """Logging sinks and verbosity."""

    log_level: LogLevel = Field(default="INFO")
    log_to_file: bool = Field(
        default=False,
        description="Also write logs to a rotating file under paths.logs_dir.",
    )
    rotation: str = Field(default="10 MB", min_length=1)
    retention: str = Field(default="14 days", min_length=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value
