"""Configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lazypick.errors import ConfigValidationError, ErrorContext


class PickConfig(BaseSettings):
    """Configuration for a lazypick repetition session."""

    model_config = SettingsConfigDict(
        env_prefix="LAZYPICK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_total_count: int = Field(
        default=100,
        description="Max number of runs per session; 1 turns parametrization off",
    )
    max_failure_count: int = Field(
        default=5,
        description="Session stops once this many runs have failed",
    )
    verbose: bool = False

    @field_validator("max_total_count", "max_failure_count", mode="after")
    @classmethod
    def validate_positive_count(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ConfigValidationError(
                message=f"{info.field_name} must be at least 1, got {v}",
                field=info.field_name,
                value=v,
                context=ErrorContext(extra={"minimum": 1}),
            )
        return v

    @property
    def parametrization_enabled(self) -> bool:
        """False when only a single run with primary values is wanted."""
        return self.max_total_count > 1


def load_config(config_path: str | Path | None = None) -> PickConfig:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
            if not isinstance(config_data, dict):
                raise ConfigValidationError(
                    message=f"Config file must contain a mapping: {config_path}",
                    value=config_data,
                    context=ErrorContext(extra={"path": str(config_path)}),
                )

    env_overrides = _get_env_overrides()
    config_data.update(env_overrides)

    return PickConfig(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "LAZYPICK_MAX_TOTAL_COUNT": ("max_total_count", int),
        "LAZYPICK_MAX_FAILURE_COUNT": ("max_failure_count", int),
        "LAZYPICK_VERBOSE": ("verbose", lambda x: x.lower() in ("true", "1", "yes")),
    }

    for env_key, (key, converter) in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            overrides[key] = converter(value)

    return overrides
