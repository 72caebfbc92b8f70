"""Environment helper utilities."""

from __future__ import annotations

import os


def env_choice(name: str, default: str, choices: set[str]) -> str:
    """Return a lower-cased env value, falling back to default when unknown."""
    value = (os.getenv(name) or default).strip().lower()
    if value not in choices:
        return default
    return value


__all__ = ["env_choice"]
