"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def optional_env_var(name: str, default: str) -> str:
    """Return an environment variable, falling back to ``default`` when missing/blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def optional_positive_float_env_var(name: str) -> float | None:
    """Return a positive number from the environment, or ``None`` when unset/blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        number = float(value)
    except ValueError as exc:
        raise ConfigurationError(name, value, "not a number") from exc
    if number <= 0:
        raise ConfigurationError(name, value, "must be greater than zero")
    return number
