"""Selection and filtering steps."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from selenium.webdriver.common.by import By

from webchain.chain.steps._shared import require_text

if TYPE_CHECKING:
    from webchain.chain.element_chain import ElementChain


class SelectionSteps:
    """Steps that narrow or replace the current element set."""

    def select(self: ElementChain, query: str) -> ElementChain:
        """Select elements matching the CSS *query*.

        On an empty chain the query runs against the whole document;
        otherwise it finds descendants of every current element.
        """
        require_text(query, "query")

        if not self.any_previous_nodes:
            return self.select_from_root(query)

        def _select_within(elements: tuple[Any, ...], browser: Any, token: Any) -> list[Any]:
            found: list[Any] = []
            for root in elements:
                found.extend(root.find_elements(By.CSS_SELECTOR, query))
            return found

        return self.add_node(f"select('{query}')", _select_within)

    def select_from_root(self: ElementChain, query: str) -> ElementChain:
        """Select elements matching the CSS *query* from the document root."""
        require_text(query, "query")
        return self.add_node(
            f"select('{query}')",
            lambda elements, browser, token: browser.driver.find_elements(By.CSS_SELECTOR, query),
        )

    def with_attribute(self: ElementChain, attribute_name: str, attribute_value: str | None) -> ElementChain:
        """Keep elements whose *attribute_name* equals *attribute_value*."""
        require_text(attribute_name, "attribute_name")
        expected = attribute_value or ""
        return self.add_node(
            f"with_attribute({attribute_name}, {expected})",
            lambda elements, browser, token: [
                el for el in elements if (el.get_attribute(attribute_name) or "") == expected
            ],
        )

    def with_text(self: ElementChain, text: str | None) -> ElementChain:
        """Keep elements whose visible text equals *text*."""
        expected = text or ""
        return self.add_node(
            f"with_text('{expected}')",
            lambda elements, browser, token: [el for el in elements if el.text == expected],
        )

    def displayed(self: ElementChain) -> ElementChain:
        """Keep elements that are displayed."""
        return self.add_node(
            "displayed()",
            lambda elements, browser, token: [el for el in elements if el.is_displayed()],
        )

    def first(self: ElementChain) -> ElementChain:
        """Keep at most the first element."""
        return self.add_node("first()", lambda elements, browser, token: elements[:1])
