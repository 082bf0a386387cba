"""Interaction steps: clicking and typing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from selenium.webdriver.common.action_chains import ActionChains

from webchain.errors import ElementAssertionError

if TYPE_CHECKING:
    from webchain.chain.element_chain import ElementChain


class ActionSteps:
    """Steps that act on the first element of the current set."""

    def click(self: ElementChain) -> ElementChain:
        """Click the first element. It must be displayed."""

        def _click(elements: tuple[Any, ...], browser: Any, token: Any) -> None:
            if not elements:
                raise ElementAssertionError("Expecting an element to click, but no elements found.")
            target = elements[0]
            if not target.is_displayed():
                raise ElementAssertionError(
                    "Element is not displayed. Cannot click on an invisible element."
                )
            target.click()

        return self.add_action("click()", _click)

    def type_text(self: ElementChain, text: str) -> ElementChain:
        """Type *text* into the first element, or into the page if there is none."""

        def _type(elements: tuple[Any, ...], browser: Any, token: Any) -> None:
            if not elements:
                ActionChains(browser.driver).send_keys(text).perform()
                return
            target = elements[0]
            if not target.is_displayed():
                raise ElementAssertionError(
                    "Element is not displayed. Cannot type into an invisible element."
                )
            if not target.is_enabled():
                raise ElementAssertionError(
                    "Element is not enabled. Cannot type in a disabled element."
                )
            target.send_keys(text)

        return self.add_action(f"type_text('{text}')", _type)
