"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from metrics_reporter.domain.value_objects import TimeUnit, to_seconds


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO")
    json_output: bool = Field(default=True, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


class ReporterConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    service_name: str = Field(default="metrics_reporter", min_length=1)
    flush_interval: int = Field(default=60, ge=1)
    flush_unit: TimeUnit = Field(default=TimeUnit.SECONDS)
    probe_retry_seconds: float = Field(default=5.0, gt=0)
    index_prefix: str = Field(default="metrics", min_length=1)
    index_date_format: str = Field(default="%Y.%m.%d", min_length=1)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def flush_interval_seconds(self) -> float:
        return to_seconds(self.flush_interval, self.flush_unit)
