"""Tests for SeleniumBrowser page readiness and driver lifecycle."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webchain import Browser, CancellationToken, ChainCancelledError, SeleniumBrowser


def _driver(states: list[str]) -> MagicMock:
    driver = MagicMock()
    remaining = list(states)

    def _ready_state(script, *args):
        if len(remaining) > 1:
            return remaining.pop(0)
        return remaining[0]

    driver.execute_script.side_effect = _ready_state
    return driver


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def test_satisfies_protocol():
    assert isinstance(SeleniumBrowser(MagicMock), Browser)


def test_driver_requires_initialise():
    browser = SeleniumBrowser(MagicMock)
    with pytest.raises(RuntimeError, match="initialise"):
        _ = browser.driver


def test_initialise_is_idempotent():
    factory = MagicMock()
    browser = SeleniumBrowser(factory)

    browser.initialise()
    browser.initialise()

    factory.assert_called_once_with()
    assert browser.driver is factory.return_value


def test_context_manager_quits_driver():
    factory = MagicMock()

    with SeleniumBrowser(factory) as browser:
        assert browser.driver is factory.return_value

    factory.return_value.quit.assert_called_once_with()
    with pytest.raises(RuntimeError):
        _ = browser.driver


def test_close_without_initialise_is_noop():
    SeleniumBrowser(MagicMock).close()


# ---------------------------------------------------------------------------
# Page readiness
# ---------------------------------------------------------------------------


def test_ready_when_document_complete():
    driver = _driver(["complete"])
    browser = SeleniumBrowser(lambda: driver)
    browser.initialise()

    assert asyncio.run(browser.wait_for_page_ready(CancellationToken())) is True
    driver.execute_script.assert_called_once_with("return document.readyState")


def test_zero_timeout_checks_once():
    driver = _driver(["loading"])
    browser = SeleniumBrowser(lambda: driver)
    browser.initialise()

    assert asyncio.run(browser.wait_for_page_ready(CancellationToken(), 0)) is False
    assert driver.execute_script.call_count == 1


def test_polls_until_complete():
    driver = _driver(["loading", "interactive", "complete"])
    browser = SeleniumBrowser(lambda: driver)
    browser.initialise()

    assert asyncio.run(browser.wait_for_page_ready(CancellationToken(), 2000)) is True
    assert driver.execute_script.call_count == 3


def test_gives_up_after_timeout():
    driver = _driver(["loading"])
    browser = SeleniumBrowser(lambda: driver)
    browser.initialise()

    assert asyncio.run(browser.wait_for_page_ready(CancellationToken(), 120)) is False
    assert driver.execute_script.call_count > 1


def test_cancelled_token_raises():
    browser = SeleniumBrowser(lambda: _driver(["loading"]))
    browser.initialise()
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ChainCancelledError):
        asyncio.run(browser.wait_for_page_ready(token, 1000))
