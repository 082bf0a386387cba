"""Cooperative cancellation for element chain evaluation.

A single CancellationToken is threaded through every suspension point of
an evaluation (retry delay, page-readiness check, node callbacks) and is
checked on entry to every node.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Callable

from webchain.errors import ChainCancelledError

__all__ = ["CancellationToken"]


class CancellationToken:
    """Cooperative cancellation signal backed by threading.Event.

    ``cancel()`` may be called from any thread, including from inside a
    node callback. Coroutines blocked in ``sleep()`` wake immediately.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._waiters: list[Callable[[], None]] = []

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            waiters = list(self._waiters)
        for wake in waiters:
            wake()

    @property
    def is_cancelled(self) -> bool:
        """True once cancel() has been called."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ChainCancelledError if cancel() has been called."""
        if self._event.is_set():
            raise ChainCancelledError()

    def wait(self, timeout_s: float | None = None) -> bool:
        """Block the calling thread until cancelled or timeout expires.

        Returns True if cancelled, False if timeout elapsed first.
        """
        return self._event.wait(timeout=timeout_s)

    async def sleep(self, delay_s: float) -> None:
        """Suspend for *delay_s* seconds unless cancelled first.

        Raises:
            ChainCancelledError: If the token is (or becomes) cancelled.
        """
        self.raise_if_cancelled()
        if delay_s <= 0:
            await asyncio.sleep(0)
            self.raise_if_cancelled()
            return

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not waiter.done():
                waiter.set_result(None)

        def _wake() -> None:
            loop.call_soon_threadsafe(_resolve)

        with self._lock:
            self._waiters.append(_wake)
        try:
            # cancel() may have run between the check above and registration.
            if not self._event.is_set():
                try:
                    await asyncio.wait_for(waiter, timeout=delay_s)
                except asyncio.TimeoutError:
                    pass
        finally:
            with self._lock:
                self._waiters.remove(_wake)
        self.raise_if_cancelled()
