"""Assertion steps.

Assertions do not change the element set. A failing assertion raises
ElementAssertionError, which the executor treats like any other node
error: the chain is retried until the deadline passes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from webchain.chain.steps._shared import require_text
from webchain.errors import ElementAssertionError

if TYPE_CHECKING:
    from webchain.chain.element_chain import ElementChain


class AssertionSteps:
    """Steps that verify the current element set."""

    def assert_single(self: ElementChain) -> ElementChain:
        def _check(elements: tuple[Any, ...], browser: Any, token: Any) -> None:
            if len(elements) != 1:
                raise ElementAssertionError(
                    f"Expecting a single element, but found {len(elements)}."
                )

        return self.add_action("assert_single()", _check)

    def assert_at_least(self: ElementChain, minimum: int) -> ElementChain:
        def _check(elements: tuple[Any, ...], browser: Any, token: Any) -> None:
            if len(elements) < minimum:
                raise ElementAssertionError(
                    f"Expecting at least {minimum} element(s), but found {len(elements)}."
                )

        return self.add_action(f"assert_at_least({minimum})", _check)

    def assert_attribute(self: ElementChain, attribute_name: str, attribute_value: str | None) -> ElementChain:
        """Assert that every element's *attribute_name* equals *attribute_value*."""
        require_text(attribute_name, "attribute_name")
        expected = attribute_value or ""

        def _check(elements: tuple[Any, ...], browser: Any, token: Any) -> None:
            for idx, element in enumerate(elements):
                actual = element.get_attribute(attribute_name) or ""
                if actual != expected:
                    raise ElementAssertionError(
                        f"Expecting an '{attribute_name}' of '{expected}' for element "
                        f"at index {idx} but found '{actual}'."
                    )

        return self.add_action(f"assert_attribute('{attribute_name}', '{expected}')", _check)
