"""Configuration settings and loading.

Settings are resolved once, at the edge, into the frozen ``RunConfig`` and
``FuzzConfig`` structs the engine consumes. Priority: explicit arguments >
environment variables > config file > defaults.
"""

from __future__ import annotations

import logging
import os
import time
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from statefuzz.core.models import (
    DEFAULT_MAX_ACTIONS,
    DEFAULT_PROGRESS_INTERVAL,
    FuzzConfig,
    RunConfig,
)
from statefuzz.errors import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 200


class FuzzLevel(str, Enum):
    """Fuzzing depth presets."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"

    @property
    def num_runs(self) -> int:
        return {"bronze": 100, "silver": 600, "gold": 1000}[self.value]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def resolve_seed(seed: int | None) -> int:
    """Return ``seed``, or a time-based seed that is logged for reproduction."""
    if seed is not None:
        return seed
    generated = int(time.time() * 1000)
    logger.info(f"No seed configured; using seed={generated}")
    return generated


class StateFuzzSettings(BaseSettings):
    """Configuration for statefuzz runs."""

    model_config = SettingsConfigDict(
        env_prefix="STATEFUZZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    iterations: int = DEFAULT_ITERATIONS
    seed: int | None = Field(default=None, description="Seed for reproducible runs; time-based if unset")
    verbose: bool = False
    stop_on_first_failure: bool = True
    max_actions: int = DEFAULT_MAX_ACTIONS
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    record_trace: bool = False

    # Property executor settings
    num_runs: int | None = Field(default=None, description="Runs per property; level preset if unset")
    fuzz_seed: int | None = Field(default=None, description="Seed for property runs; falls back to seed")
    fuzz_verbose: bool | None = None
    fuzz_level: FuzzLevel = FuzzLevel.SILVER

    @field_validator("iterations", "max_actions", "progress_interval", "num_runs")
    @classmethod
    def validate_positive(cls, v: int | None, info: ValidationInfo) -> int | None:
        if v is not None and v < 1:
            raise ConfigurationError(
                message=f"{info.field_name} must be a positive integer",
                field=info.field_name,
                value=v,
                context=ErrorContext(extra={"minimum": 1}),
            )
        return v

    @field_validator("fuzz_level", mode="before")
    @classmethod
    def validate_fuzz_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            valid = {level.value for level in FuzzLevel}
            if v not in valid:
                raise ConfigurationError(
                    message=f"Invalid fuzz level: {v!r}. Valid: {sorted(valid)}",
                    field="fuzz_level",
                    value=v,
                )
        return v

    def run_config(self, **overrides: Any) -> RunConfig:
        """Resolve the invariant-runner struct, generating a seed if needed."""
        values: dict[str, Any] = {
            "iterations": self.iterations,
            "seed": self.seed,
            "verbose": self.verbose,
            "stop_on_first_failure": self.stop_on_first_failure,
            "max_actions": self.max_actions,
            "progress_interval": self.progress_interval,
            "record_trace": self.record_trace,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["seed"] = resolve_seed(values["seed"])
        return RunConfig(**values)

    def fuzz_config(self, level: FuzzLevel | str | None = None, **overrides: Any) -> FuzzConfig:
        """Resolve the property-executor struct.

        An explicit ``level`` wins over ``num_runs``; otherwise ``num_runs``
        wins over the configured level preset.
        """
        if level is not None:
            try:
                num_runs = FuzzLevel(level.lower() if isinstance(level, str) else level).num_runs
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid fuzz level: {level!r}", field="fuzz_level", value=level, cause=e
                ) from e
        elif self.num_runs is not None:
            num_runs = self.num_runs
        else:
            num_runs = self.fuzz_level.num_runs
        values: dict[str, Any] = {
            "num_runs": num_runs,
            "seed": self.fuzz_seed if self.fuzz_seed is not None else self.seed,
            "verbose": self.fuzz_verbose if self.fuzz_verbose is not None else self.verbose,
            "stop_on_first_failure": self.stop_on_first_failure,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["seed"] = resolve_seed(values["seed"])
        return FuzzConfig(**values)


def load_settings(config_path: str | Path | None = None, **overrides: Any) -> StateFuzzSettings:
    """Load settings from an optional YAML file and the environment.

    Raises:
        ConfigurationError: on unreadable files or invalid values.
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                field="config_path",
                value=str(config_path),
            )
        try:
            with open(config_path) as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {config_path}: {e}", field="config_path", value=str(config_path), cause=e
            ) from e
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping",
                field="config_path",
                value=str(config_path),
            )
        config_data.update(loaded)

    try:
        config_data.update(_get_env_overrides())
    except ValueError as e:
        raise ConfigurationError(f"Invalid environment override: {e}", cause=e) from e
    config_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return StateFuzzSettings(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e


def _get_env_overrides() -> dict[str, Any]:
    """Map the conventional INVARIANT_* / FUZZ_* variables onto settings."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "INVARIANT_ITERS": ("iterations", int),
        "INVARIANT_SEED": ("seed", int),
        "INVARIANT_VERBOSE": ("verbose", _parse_bool),
        "FUZZ_ITERS": ("num_runs", int),
        "FUZZ_SEED": ("fuzz_seed", int),
        "FUZZ_VERBOSE": ("fuzz_verbose", _parse_bool),
        "FUZZ_LEVEL": ("fuzz_level", str),
    }

    # STATEFUZZ_* variables are read by the settings class too, but file values
    # are passed as init kwargs, which would otherwise outrank them.
    for name in StateFuzzSettings.model_fields:
        value = os.environ.get(f"STATEFUZZ_{name.upper()}")
        if value is not None and value.strip():
            overrides[name] = value

    for env_key, (config_key, converter) in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None and value.strip():
            overrides[config_key] = converter(value)

    return overrides
