"""Browser collaborator interface.

The chain executor never talks to the driver directly: it asks the browser
whether the page is ready, and hands the browser to node callbacks so they
can issue DOM queries and actions through ``browser.driver``.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from webchain.cancellation import CancellationToken

logger = logging.getLogger(__name__)

__all__ = ["Browser", "SeleniumBrowser"]

# Interval between document.readyState polls.
_READY_POLL_INTERVAL_S: float = 0.05


@runtime_checkable
class Browser(Protocol):
    """Protocol for the browser session driven by element chains.

    One browser session is a single serial command channel; it is driven
    by one executor at a time.
    """

    @property
    def driver(self) -> Any:
        """Driver handle used by node callbacks (a Selenium WebDriver)."""
        ...

    def initialise(self) -> None:
        """Create the underlying driver session."""
        ...

    async def wait_for_page_ready(
        self,
        token: CancellationToken,
        timeout_ms: int = 0,
    ) -> bool:
        """Return True once the page is ready, False if it is not.

        Implementations must honour *token* and give up after *timeout_ms*.
        """
        ...


class SeleniumBrowser:
    """Browser backed by a Selenium WebDriver.

    Launching the browser process is left to the host: *driver_factory* is
    any zero-argument callable returning a WebDriver (for example
    ``selenium.webdriver.Chrome``). The factory runs on ``initialise()``.

    Example::

        browser = SeleniumBrowser(lambda: webdriver.Chrome(options=opts))
        browser.initialise()
        executor = ChainExecutor(browser)
    """

    def __init__(self, driver_factory: Callable[[], Any]) -> None:
        self._driver_factory = driver_factory
        self._driver: Any = None

    @property
    def driver(self) -> Any:
        if self._driver is None:
            raise RuntimeError(
                "SeleniumBrowser.initialise() must be called before the driver is used."
            )
        return self._driver

    def initialise(self) -> None:
        """Create the driver. Idempotent."""
        if self._driver is None:
            self._driver = self._driver_factory()
            logger.debug("[WEBCHAIN_BROWSER] driver created: %s", type(self._driver).__name__)

    def close(self) -> None:
        """Quit the driver if one was created. Idempotent."""
        if self._driver is not None:
            driver, self._driver = self._driver, None
            driver.quit()

    def __enter__(self) -> SeleniumBrowser:
        self.initialise()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    async def wait_for_page_ready(
        self,
        token: CancellationToken,
        timeout_ms: int = 0,
    ) -> bool:
        """Poll ``document.readyState`` until it reports "complete".

        Returns False once *timeout_ms* elapses without the document being
        complete. A 0 timeout checks exactly once.

        Raises:
            ChainCancelledError: If *token* is cancelled while waiting.
        """
        deadline = time.monotonic() + timeout_ms / 1000.0
        while True:
            token.raise_if_cancelled()
            state = self.driver.execute_script("return document.readyState")
            if state == "complete":
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug("[WEBCHAIN_BROWSER] page not ready: readyState=%r", state)
                return False
            await token.sleep(min(_READY_POLL_INTERVAL_S, remaining))
