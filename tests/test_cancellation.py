"""Tests for CancellationToken.

Cases:
- cancel() is idempotent and visible through is_cancelled
- raise_if_cancelled raises ChainCancelledError only after cancel()
- sleep() completes after the delay when not cancelled
- sleep() wakes early on cancel from the same loop or another thread
- wait() blocks a thread until cancel or timeout
"""

from __future__ import annotations

import asyncio
import sys
import threading
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webchain import CancellationToken, ChainCancelledError


def test_new_token_not_cancelled():
    token = CancellationToken()
    assert token.is_cancelled is False
    token.raise_if_cancelled()


def test_cancel_is_idempotent():
    token = CancellationToken()
    token.cancel()
    token.cancel()
    assert token.is_cancelled is True
    with pytest.raises(ChainCancelledError):
        token.raise_if_cancelled()


def test_sleep_completes_without_cancel():
    token = CancellationToken()
    started = time.monotonic()
    asyncio.run(token.sleep(0.02))
    assert time.monotonic() - started >= 0.015


def test_sleep_zero_yields():
    asyncio.run(CancellationToken().sleep(0))


def test_sleep_on_cancelled_token_raises_immediately():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(ChainCancelledError):
        asyncio.run(token.sleep(5))


def test_sleep_wakes_on_cancel_from_same_loop():
    token = CancellationToken()

    async def _scenario():
        sleeper = asyncio.create_task(token.sleep(5))
        await asyncio.sleep(0.01)
        token.cancel()
        await sleeper

    started = time.monotonic()
    with pytest.raises(ChainCancelledError):
        asyncio.run(_scenario())
    assert time.monotonic() - started < 1.0


def test_sleep_wakes_on_cancel_from_other_thread():
    token = CancellationToken()
    timer = threading.Timer(0.02, token.cancel)
    timer.start()

    started = time.monotonic()
    try:
        with pytest.raises(ChainCancelledError):
            asyncio.run(token.sleep(5))
    finally:
        timer.cancel()
    assert time.monotonic() - started < 1.0


def test_wait_times_out():
    assert CancellationToken().wait(0.01) is False


def test_wait_returns_true_when_cancelled():
    token = CancellationToken()
    token.cancel()
    assert token.wait(1.0) is True


def test_concurrent_cancel_is_safe():
    token = CancellationToken()
    threads = [threading.Thread(target=token.cancel) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert token.is_cancelled is True
