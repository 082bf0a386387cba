"""Execution graph: per-attempt mutable mirror of a declaration chain.

A declaration chain only knows its predecessors. For evaluation we need
the opposite direction, plus somewhere to record what happened at each
step, so ``build_execution_graph`` walks back from the leaf and creates
one forward-linked ExecutionNode per declaration node. Grouping nodes get
one child graph per nested chain.

Usage::

    entry = build_execution_graph(chain.leaf)
    node = entry
    while node is not None:
        print(node.descriptor, node.was_executed)
        node = node.next

Execution graphs are cheap and disposable: the executor builds a fresh one
for every attempt so that the recorded inputs, outputs and errors always
describe a single attempt.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Iterator, Optional

from webchain.chain.declaration import DeclarationNode, Elements, GroupingNode, SingleNode

if TYPE_CHECKING:
    from webchain.browser import Browser
    from webchain.cancellation import CancellationToken

__all__ = [
    "ExecutionNode",
    "SingleExecutionNode",
    "GroupedExecutionNode",
    "build_execution_graph",
]


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class ExecutionNode:
    """One declaration node's state during a single attempt.

    ``input_elements`` is set on entry, ``output_elements`` on successful
    exit, and ``error`` holds whatever the step raised. A node whose input
    was never set did not run in this attempt: it was either skipped in
    favour of cached results, or an earlier node failed.
    """

    def __init__(self, declaration: DeclarationNode) -> None:
        self.declaration = declaration
        self.previous: Optional[ExecutionNode] = None
        self.next: Optional[ExecutionNode] = None
        self.input_elements: Optional[Elements] = None
        self.output_elements: Optional[Elements] = None
        self.error: Optional[BaseException] = None

    # ------------------------------------------------------------------
    # Declaration passthroughs
    # ------------------------------------------------------------------

    @property
    def descriptor(self) -> str:
        return self.declaration.descriptor

    @property
    def modifies_set(self) -> bool:
        return self.declaration.modifies_set

    @property
    def calling_context(self) -> Any:
        return self.declaration.calling_context

    @property
    def cached_elements(self) -> Optional[Elements]:
        return self.declaration.cached_elements

    @cached_elements.setter
    def cached_elements(self, elements: Optional[Elements]) -> None:
        self.declaration.cache_elements(elements)

    # ------------------------------------------------------------------
    # Graph navigation
    # ------------------------------------------------------------------

    @property
    def children(self) -> tuple[Optional[ExecutionNode], ...]:
        """Entry nodes of nested chains (None for an empty nested chain)."""
        return ()

    @property
    def was_executed(self) -> bool:
        return self.input_elements is not None

    @property
    def last(self) -> ExecutionNode:
        """The final node of the chain this node belongs to."""
        node = self
        while node.next is not None:
            node = node.next
        return node

    def iter_chain(self) -> Iterator[ExecutionNode]:
        """Yield this node and every node after it."""
        node: Optional[ExecutionNode] = self
        while node is not None:
            yield node
            node = node.next

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def enter(self, elements: Elements, token: CancellationToken) -> None:
        """Record *elements* as this node's input and check for cancellation.

        A cancellation raised here is recorded against this node, so it
        shows up in diagnostics like any other node failure.
        """
        self.input_elements = elements
        try:
            token.raise_if_cancelled()
        except BaseException as exc:
            self.error = exc
            raise

    async def exit(
        self,
        elements: Elements,
        browser: Browser,
        token: CancellationToken,
    ) -> Elements:
        """Compute and record this node's output from *elements*."""
        raise NotImplementedError

    def snapshot(self) -> list[dict[str, Any]]:
        """Return a JSON-serializable view of this node and its successors."""
        return [node._snapshot_one() for node in self.iter_chain()]

    def _snapshot_one(self) -> dict[str, Any]:
        return {
            "descriptor": self.descriptor,
            "kind": "grouping" if isinstance(self.declaration, GroupingNode) else "single",
            "modifies_set": self.modifies_set,
            "was_executed": self.was_executed,
            "input_count": None if self.input_elements is None else len(self.input_elements),
            "output_count": None if self.output_elements is None else len(self.output_elements),
            "error_class": type(self.error).__name__ if self.error is not None else None,
            "error": str(self.error) if self.error is not None else None,
            "children": [
                None if child is None else child.snapshot() for child in self.children
            ],
        }


class SingleExecutionNode(ExecutionNode):
    """Execution state for a SingleNode."""

    declaration: SingleNode

    async def exit(
        self,
        elements: Elements,
        browser: Browser,
        token: CancellationToken,
    ) -> Elements:
        try:
            result = self.declaration.callback(elements, browser, token)
            if inspect.isawaitable(result):
                result = await result
            if result is None:
                raise TypeError(
                    f"Node {self.descriptor!r} returned None instead of an element set."
                )
            output = tuple(result)
        except BaseException as exc:
            self.error = exc
            raise
        self.error = None
        self.output_elements = output
        return output


class GroupedExecutionNode(ExecutionNode):
    """Execution state for a GroupingNode and its nested chains."""

    declaration: GroupingNode

    def __init__(
        self,
        declaration: GroupingNode,
        children: tuple[Optional[ExecutionNode], ...],
    ) -> None:
        super().__init__(declaration)
        self._children = children

    @property
    def children(self) -> tuple[Optional[ExecutionNode], ...]:
        return self._children

    async def exit(
        self,
        elements: Elements,
        browser: Browser,
        token: CancellationToken,
    ) -> Elements:
        """Reduce the outputs of the (already executed) nested chains.

        An empty nested chain contributes its input, unchanged.
        """
        branch_outputs: list[Elements] = []
        for child in self._children:
            if child is None:
                branch_outputs.append(elements)
            else:
                branch_outputs.append(child.last.output_elements or ())
        try:
            output = tuple(self.declaration.reducer(branch_outputs))
        except BaseException as exc:
            self.error = exc
            raise
        self.error = None
        self.output_elements = output
        return output


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build_execution_graph(leaf: Optional[DeclarationNode]) -> Optional[ExecutionNode]:
    """Build a forward-linked execution graph for the chain ending at *leaf*.

    Returns the entry (first) node, or None for an empty chain.
    """
    if leaf is None:
        return None

    entry: Optional[ExecutionNode] = None
    previous: Optional[ExecutionNode] = None
    for declaration in leaf.walk_back():
        node = _create_node(declaration)
        if previous is None:
            entry = node
        else:
            previous.next = node
            node.previous = previous
        previous = node
    return entry


def _create_node(declaration: DeclarationNode) -> ExecutionNode:
    if isinstance(declaration, SingleNode):
        return SingleExecutionNode(declaration)
    if isinstance(declaration, GroupingNode):
        children = tuple(
            build_execution_graph(nested.leaf) for nested in declaration.nested_chains
        )
        return GroupedExecutionNode(declaration, children)
    raise TypeError(f"Unknown declaration node type: {type(declaration).__name__}")
