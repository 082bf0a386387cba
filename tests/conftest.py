"""Shared fakes for webchain tests.

No real browser is involved: FakeBrowser and FakeElement implement just
enough of the Selenium WebDriver / WebElement surface for the step
vocabulary, the describer and the executor.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
from selenium.common.exceptions import StaleElementReferenceException

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeElement:
    """Stand-in for a Selenium WebElement."""

    def __init__(
        self,
        tag_name: str = "div",
        text: str = "",
        attributes: dict[str, str] | None = None,
        displayed: bool = True,
        enabled: bool = True,
        location: tuple[int, int] = (0, 0),
        children: dict[str, list[FakeElement]] | None = None,
        stale: bool = False,
        read_error: Exception | None = None,
    ) -> None:
        self._tag_name = tag_name
        self._text = text
        self.attributes = dict(attributes or {})
        self.displayed = displayed
        self.enabled = enabled
        self._location = location
        self.children = dict(children or {})
        self.stale = stale
        self.read_error = read_error
        self.clicks = 0
        self.typed: list[str] = []

    def _check(self) -> None:
        if self.stale:
            raise StaleElementReferenceException("element is not attached to the page document")
        if self.read_error is not None:
            raise self.read_error

    @property
    def tag_name(self) -> str:
        self._check()
        return self._tag_name

    @property
    def text(self) -> str:
        self._check()
        return self._text

    @property
    def location(self) -> dict[str, int]:
        self._check()
        return {"x": self._location[0], "y": self._location[1]}

    def is_displayed(self) -> bool:
        self._check()
        return self.displayed

    def is_enabled(self) -> bool:
        self._check()
        return self.enabled

    def get_attribute(self, name: str) -> str | None:
        self._check()
        return self.attributes.get(name)

    def find_elements(self, by: str, value: str) -> list[FakeElement]:
        self._check()
        return list(self.children.get(value, []))

    def click(self) -> None:
        self._check()
        self.clicks += 1

    def send_keys(self, text: str) -> None:
        self._check()
        self.typed.append(text)

    def __repr__(self) -> str:
        return f"<FakeElement {self._tag_name} {self.attributes.get('id', '')}>"


class FakeDriver:
    """Stand-in for a Selenium WebDriver."""

    def __init__(self) -> None:
        self.document: dict[str, list[FakeElement]] = {}
        self.find_calls: list[tuple[str, str]] = []
        self.scripts: list[tuple[str, tuple[Any, ...]]] = []
        self.script_results: list[Any] = []
        self.ready_states: list[str] = []
        self.quit_called = False

    def find_elements(self, by: str, value: str) -> list[FakeElement]:
        self.find_calls.append((by, value))
        return list(self.document.get(value, []))

    def execute_script(self, script: str, *args: Any) -> Any:
        if script == "return document.readyState":
            if self.ready_states:
                return self.ready_states.pop(0)
            return "complete"
        self.scripts.append((script, args))
        result = self.script_results.pop(0) if self.script_results else None
        if isinstance(result, Exception):
            raise result
        return result

    def quit(self) -> None:
        self.quit_called = True


class FakeBrowser:
    """Browser collaborator with scripted page readiness.

    ``ready`` is either a bool applied to every check, or a list of bools
    consumed one check at a time (the last value repeats).
    """

    def __init__(self, ready: bool | list[bool] = True) -> None:
        self.driver = FakeDriver()
        self.ready = ready
        self.ready_checks = 0
        self.timeouts_seen: list[int] = []

    def initialise(self) -> None:
        pass

    async def wait_for_page_ready(self, token: Any, timeout_ms: int = 0) -> bool:
        self.ready_checks += 1
        self.timeouts_seen.append(timeout_ms)
        token.raise_if_cancelled()
        if isinstance(self.ready, list):
            if len(self.ready) > 1:
                return self.ready.pop(0)
            return self.ready[0]
        return self.ready


@pytest.fixture
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def make_element():
    """Factory fixture: make_element(tag_name="a", attributes={...}, ...)."""
    return FakeElement
