"""Helpers shared by the step vocabulary mixins."""

from __future__ import annotations

from webchain.errors import ChainArgumentError


def require_text(value: object, name: str) -> str:
    """Return *value* if it is a non-empty string, else raise ChainArgumentError."""
    if not isinstance(value, str) or value == "":
        raise ChainArgumentError(f"Parameter '{name}' must be a non-empty string.")
    return value
