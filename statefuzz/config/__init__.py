"""Configuration management for statefuzz."""

from statefuzz.config.settings import (
    DEFAULT_ITERATIONS,
    FuzzLevel,
    StateFuzzSettings,
    load_settings,
    resolve_seed,
)

__all__ = [
    "StateFuzzSettings",
    "FuzzLevel",
    "DEFAULT_ITERATIONS",
    "load_settings",
    "resolve_seed",
]
