"""ElementChain: the immutable, fluent chain-building handle.

Usage::

    chain = ElementChain(options=ChainOptions(retry_delay_ms=50))
    save = chain.select("form#profile").select("button").with_text("Save")

    await executor.execute(save.click())
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from webchain.chain.declaration import (
    DeclarationNode,
    Elements,
    GroupingNode,
    NodeCallback,
    Reducer,
    SingleNode,
)
from webchain.chain.steps import (
    ActionSteps,
    AssertionSteps,
    ScriptSteps,
    SelectionSteps,
    SetOperationSteps,
)
from webchain.errors import ChainArgumentError
from webchain.options import ChainOptions

__all__ = ["ElementChain", "BranchBuilder"]

# Receives a fresh empty chain, returns the nested chain it built.
BranchBuilder = Callable[["ElementChain"], "ElementChain"]


@dataclass(frozen=True, eq=False)
class ElementChain(
    SelectionSteps,
    AssertionSteps,
    ActionSteps,
    SetOperationSteps,
    ScriptSteps,
):
    """Handle on the chain of steps ending at ``leaf``.

    Every append returns a new ElementChain; the receiving handle stays
    valid, so one prefix can be extended in several directions.

    Attributes:
        leaf: Last declared node, or None for an empty chain.
        options: Retry/wait budget used when the chain is executed.
        context: Calling context attributed to nodes appended through this
            handle. Only used to group nodes in diagnostics.
    """

    leaf: Optional[DeclarationNode] = None
    options: ChainOptions = field(default_factory=ChainOptions)
    context: Any = None

    @property
    def any_previous_nodes(self) -> bool:
        """True if at least one step has been declared."""
        return self.leaf is not None

    def with_context(self, context: Any) -> ElementChain:
        """Return a handle on the same chain whose new nodes belong to *context*."""
        return ElementChain(leaf=self.leaf, options=self.options, context=context)

    def add_node(self, descriptor: str, callback: NodeCallback) -> ElementChain:
        """Append a step whose callback produces the next element set.

        *callback* is called as ``callback(elements, browser, token)`` and
        may be a plain function or a coroutine function. Its result is
        materialised into a tuple before the next step runs.

        Raises:
            ChainArgumentError: If *descriptor* is blank or *callback* is
                not callable.
        """
        node = SingleNode(
            descriptor=descriptor,
            previous=self.leaf,
            calling_context=self.context,
            callback=callback,
            modifies_set=True,
        )
        return self._append(node)

    def add_action(self, descriptor: str, callback: NodeCallback) -> ElementChain:
        """Append a step that acts on or asserts against the element set.

        The callback's return value is ignored; the step passes its input
        through unchanged and is marked as not modifying the set.

        Raises:
            ChainArgumentError: If *descriptor* is blank or *callback* is
                not callable.
        """
        if not callable(callback):
            raise ChainArgumentError(f"Node {descriptor!r} requires a callable callback.")

        async def _pass_through(elements: Elements, browser: Any, token: Any) -> Elements:
            result = callback(elements, browser, token)
            if inspect.isawaitable(result):
                await result
            return elements

        node = SingleNode(
            descriptor=descriptor,
            previous=self.leaf,
            calling_context=self.context,
            callback=_pass_through,
            modifies_set=False,
        )
        return self._append(node)

    def add_grouping_node(
        self,
        descriptor: str,
        reducer: Reducer,
        *branch_builders: BranchBuilder,
    ) -> ElementChain:
        """Append a step that forks into nested chains and merges them.

        Each builder receives a fresh empty chain with this chain's options
        and context and returns the nested chain it built. At execution
        time every nested chain receives this step's input; *reducer* gets
        one element set per nested chain, in the order given here.

        Raises:
            ChainArgumentError: If *descriptor* is blank, *reducer* or a
                builder is not callable, or a builder does not return an
                ElementChain.
        """
        if not isinstance(descriptor, str) or not descriptor.strip():
            raise ChainArgumentError("A chain node descriptor must be a non-blank string.")
        if not callable(reducer):
            raise ChainArgumentError(f"Grouping node {descriptor!r} requires a callable reducer.")

        nested: list[ElementChain] = []
        for idx, builder in enumerate(branch_builders):
            if not callable(builder):
                raise ChainArgumentError(
                    f"Branch {idx} of grouping node {descriptor!r} is not callable."
                )
            branch = builder(ElementChain(options=self.options, context=self.context))
            if not isinstance(branch, ElementChain):
                raise ChainArgumentError(
                    f"Branch {idx} of grouping node {descriptor!r} must return an "
                    f"ElementChain, got {type(branch).__name__}."
                )
            nested.append(branch)

        node = GroupingNode(
            descriptor=descriptor,
            previous=self.leaf,
            calling_context=self.context,
            reducer=reducer,
            nested_chains=tuple(nested),
        )
        return self._append(node)

    def _append(self, node: DeclarationNode) -> ElementChain:
        return ElementChain(leaf=node, options=self.options, context=self.context)
