"""Calling-context descriptors used to group nodes in diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["CallContext", "render_context"]


@dataclass(frozen=True, eq=False)
class CallContext:
    """Identifies the caller that appended a run of nodes.

    Compared by identity: two separate calls with the same name and
    arguments are still rendered as two groups.

    Example::

        ctx = CallContext("click_button", ("Save",))
        chain.with_context(ctx).select("button").with_text("Save").click()
    """

    name: str
    arguments: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return f"{self.name}({', '.join(_render_argument(a) for a in self.arguments)})"


def _render_argument(arg: Any) -> str:
    if arg is None:
        return "null"
    if isinstance(arg, str):
        return f"'{arg}'"
    return str(arg)


def render_context(context: Any) -> str:
    """Return the heading used for a group of nodes sharing *context*."""
    if context is None:
        return "nodes"
    return str(context)
