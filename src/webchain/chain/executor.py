"""ChainExecutor: retrying, cancellable evaluation of element chains.

Evaluates an ElementChain against a live browser. Each call to
``execute`` is one time-boxed retry loop:

    * Resume from the last declaration node holding a cached result from an
      earlier successful evaluation, if any.
    * On a node error, wait ``retry_delay_ms`` and run the whole chain again
      from the very first node (the cache is distrusted after a failure).
    * Stop as soon as an attempt succeeds, the token is cancelled, or
      ``total_retry_timeout_ms`` of wall-clock time has passed.

Usage::

    executor = ChainExecutor(browser)
    token = CancellationToken()
    elements = await executor.execute(chain.select("#save").click(), token)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Optional

from webchain.cancellation import CancellationToken
from webchain.chain.describer import ChainDescriber
from webchain.chain.execution import ExecutionNode, build_execution_graph
from webchain.errors import ChainCancelledError, PageNotReadyError
from webchain.otel import emit_chain_event

if TYPE_CHECKING:
    from webchain.browser import Browser
    from webchain.chain.declaration import Elements
    from webchain.chain.element_chain import ElementChain

logger = logging.getLogger(__name__)

__all__ = ["ChainExecutor"]

# Cancellation is fatal whichever way it arrives: through the token, or by
# the surrounding asyncio task being cancelled.
_CANCELLATION_ERRORS = (ChainCancelledError, asyncio.CancelledError)


class ChainExecutor:
    """Drives element chains against one browser session.

    Not safe for concurrent use: a browser session is a single serial
    command channel and declaration caches are written without locking.
    Use one executor (and one browser) per worker.

    Args:
        browser: Browser collaborator supplying page readiness and the
            driver handle passed to node callbacks.
        describer: Renders diagnostic traces. A default ChainDescriber is
            used when omitted.
    """

    def __init__(
        self,
        browser: Browser,
        describer: Optional[ChainDescriber] = None,
    ) -> None:
        self._browser = browser
        self._describer = describer or ChainDescriber()
        self._attempt_count = 0

    @property
    def attempt_count(self) -> int:
        """Attempts made by the most recent execute() call.

        Only iterations where the page was ready and the chain actually ran
        are counted.
        """
        return self._attempt_count

    async def execute(
        self,
        chain: ElementChain,
        token: Optional[CancellationToken] = None,
    ) -> Elements:
        """Evaluate *chain* and return the leaf node's output elements.

        Args:
            chain: The chain to evaluate.
            token: Cancellation signal. A fresh, never-cancelled token is
                used when omitted.

        Returns:
            The element set produced by the chain's last node. An empty
            chain returns ``()`` without contacting the browser.

        Raises:
            ChainCancelledError: If *token* was cancelled.
            PageNotReadyError: If the page never became ready before the
                deadline and no attempt could be made.
            Exception: The last node error, re-raised as-is, if no attempt
                succeeded before the deadline.
        """
        self._attempt_count = 0
        if chain.leaf is None:
            return ()

        token = token or CancellationToken()
        options = chain.options

        entry = build_execution_graph(chain.leaf)
        assert entry is not None
        resume_from = _last_with_cache(entry)
        use_cache = resume_from is not None

        results: Elements = ()
        last_error: Optional[BaseException] = None
        succeeded = False
        page_ready_seen = False
        graph_used = False
        iterations = 0
        deadline = time.monotonic() + options.total_retry_timeout_ms / 1000.0

        while True:
            try:
                if last_error is not None or (iterations > 0 and not page_ready_seen):
                    if last_error is not None and logger.isEnabledFor(logging.DEBUG):
                        logger.debug(
                            "[WEBCHAIN_EXEC] attempt %d failed: %s: %s",
                            self._attempt_count,
                            type(last_error).__name__,
                            last_error,
                        )
                        logger.debug(self._describer.describe_execution(entry, False))
                        logger.debug("[WEBCHAIN_EXEC] retrying in %dms", options.retry_delay_ms)
                    if last_error is not None:
                        emit_chain_event(
                            "retry", chain.leaf.descriptor, self._attempt_count, last_error
                        )
                    await token.sleep(options.retry_delay_ms / 1000.0)

                iterations += 1
                page_ready_seen = False

                if await self._browser.wait_for_page_ready(token, options.page_wait_timeout_ms):
                    page_ready_seen = True
                    self._attempt_count += 1
                    if graph_used:
                        # Fresh graph per attempt; the previous one holds stale state.
                        entry = build_execution_graph(chain.leaf)
                        assert entry is not None
                        resume_from = _last_with_cache(entry) if use_cache else None
                    graph_used = True

                    results = await self._attempt(entry, resume_from, token)

                    entry.last.cached_elements = results
                    succeeded = True
                    last_error = None
            except _CANCELLATION_ERRORS as exc:
                last_error = exc
                break
            except Exception as exc:
                # A failure casts doubt on the cached snapshot; restart from scratch.
                use_cache = False
                resume_from = None
                last_error = exc

            if succeeded or time.monotonic() >= deadline:
                break

        if not succeeded and token.is_cancelled and not isinstance(last_error, _CANCELLATION_ERRORS):
            # The token fired but the node failed before the next entry check.
            cancelled = ChainCancelledError()
            cancelled.__cause__ = last_error
            last_error = cancelled

        if succeeded:
            logger.debug("[WEBCHAIN_EXEC] element chain succeeded after %d attempt(s)", self._attempt_count)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(self._describer.describe_execution(entry, True))
            emit_chain_event("success", chain.leaf.descriptor, self._attempt_count)
            return results

        if isinstance(last_error, _CANCELLATION_ERRORS):
            logger.warning(
                "[WEBCHAIN_EXEC] element chain cancelled after %d attempt(s)", self._attempt_count
            )
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(self._describer.describe_execution(entry, False))
            emit_chain_event("cancelled", chain.leaf.descriptor, self._attempt_count, last_error)
            raise last_error

        if last_error is None:
            last_error = PageNotReadyError(options.total_retry_timeout_ms)

        logger.error(
            "[WEBCHAIN_EXEC] element chain failed after %d attempt(s): %s: %s",
            self._attempt_count,
            type(last_error).__name__,
            last_error,
        )
        if graph_used:
            logger.error(self._describer.describe_execution(entry, True))
        emit_chain_event("failure", chain.leaf.descriptor, self._attempt_count, last_error)
        raise last_error

    async def _attempt(
        self,
        entry: ExecutionNode,
        resume_from: Optional[ExecutionNode],
        token: CancellationToken,
    ) -> Elements:
        """Run one attempt, resuming after *resume_from* when it has a cache."""
        cached = resume_from.cached_elements if resume_from is not None else None
        if resume_from is not None and cached is not None:
            return await self._run_chain(resume_from.next, cached, token)
        return await self._run_chain(entry, (), token)

    async def _run_chain(
        self,
        node: Optional[ExecutionNode],
        elements: Elements,
        token: CancellationToken,
    ) -> Elements:
        """Run *node* and its successors in order, feeding outputs forward."""
        while node is not None:
            node.enter(elements, token)

            # Nested chains run one after another: the browser session is a
            # single serial command channel.
            for child in node.children:
                if child is not None:
                    await self._run_chain(child, elements, token)

            elements = await node.exit(elements, self._browser, token)
            node = node.next
        return elements


def _last_with_cache(entry: ExecutionNode) -> Optional[ExecutionNode]:
    """Return the node nearest the tail whose declaration holds a cache."""
    found: Optional[ExecutionNode] = None
    for node in entry.iter_chain():
        if node.cached_elements is not None:
            found = node
    return found
