"""webchain exception types."""

from __future__ import annotations


class WebChainError(Exception):
    """Base class for errors raised by webchain itself."""


class ChainArgumentError(WebChainError, ValueError):
    """Raised at build time when a step declaration is invalid.

    Never reaches execution and is never retried.
    """


class ChainCancelledError(WebChainError):
    """Raised when the cancellation token fires during evaluation.

    Always fatal: the executor stops retrying as soon as it sees one.
    """

    def __init__(self, message: str = "Element chain evaluation was cancelled.") -> None:
        super().__init__(message)


class PageNotReadyError(WebChainError, TimeoutError):
    """Raised when the retry deadline passes and the page never became ready."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Page was not ready at any point within {timeout_ms}ms; "
            "the element chain was never attempted."
        )


class ElementAssertionError(WebChainError, AssertionError):
    """Raised by assertion and action steps when the element set is wrong."""


class ScriptError(WebChainError):
    """Raised when a browser script function cannot be invoked."""
