"""Declaration graph: immutable description of element chain steps.

Each node describes one step and points back at the step before it.
Appending a step never copies ancestors, so any number of chain handles
can grow independently from a shared prefix:

    root = chain.select("form")
    a = root.select("input")      # root's node is shared by a and b
    b = root.select("button")

The one piece of mutable state is the per-node cache cell holding the last
output proven correct by a successful evaluation. It is shared by every
chain handle that references the node. It is written without locking:
one browser session is driven by one executor at a time, so a node never
has two concurrent writers. Any move to concurrent evaluation must add
synchronisation here and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Optional, Sequence, Union

from webchain.errors import ChainArgumentError

if TYPE_CHECKING:
    from webchain.browser import Browser
    from webchain.cancellation import CancellationToken
    from webchain.chain.element_chain import ElementChain

__all__ = [
    "Elements",
    "NodeCallback",
    "Reducer",
    "ElementCache",
    "SingleNode",
    "GroupingNode",
    "DeclarationNode",
]

# An element set: an immutable, ordered tuple of driver element handles.
Elements = tuple[Any, ...]

# (elements, browser, token) -> iterable of elements, or an awaitable of one.
NodeCallback = Callable[
    [Elements, "Browser", "CancellationToken"],
    Union[Iterable[Any], Awaitable[Iterable[Any]]],
]

# One element set per nested chain, in declared order -> merged elements.
Reducer = Callable[[Sequence[Elements]], Iterable[Any]]


class ElementCache:
    """Interior-mutable cell holding a node's last proven output."""

    __slots__ = ("elements",)

    def __init__(self) -> None:
        self.elements: Optional[Elements] = None


@dataclass(frozen=True, eq=False)
class _NodeBase:
    descriptor: str
    previous: Optional[DeclarationNode]
    calling_context: Any
    _cache: ElementCache = field(default_factory=ElementCache, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.descriptor, str) or not self.descriptor.strip():
            raise ChainArgumentError("A chain node descriptor must be a non-blank string.")

    @property
    def cached_elements(self) -> Optional[Elements]:
        """Last output of a successful evaluation ending at this node, or None."""
        return self._cache.elements

    def cache_elements(self, elements: Optional[Elements]) -> None:
        """Replace the cached output. The node itself stays frozen."""
        self._cache.elements = None if elements is None else tuple(elements)

    def walk_back(self) -> list[DeclarationNode]:
        """Return this node and its ancestors in declared (root-first) order."""
        nodes: list[DeclarationNode] = []
        current: Optional[DeclarationNode] = self  # type: ignore[assignment]
        while current is not None:
            nodes.append(current)
            current = current.previous
        nodes.reverse()
        return nodes


@dataclass(frozen=True, eq=False)
class SingleNode(_NodeBase):
    """A step that maps the current element set through a callback.

    ``modifies_set`` is False for pure actions and assertions; such nodes
    are declared with a callback that returns its input unchanged.
    """

    callback: NodeCallback = None  # type: ignore[assignment]
    modifies_set: bool = True

    def __post_init__(self) -> None:
        super().__post_init__()
        if not callable(self.callback):
            raise ChainArgumentError(
                f"Node {self.descriptor!r} requires a callable callback."
            )


@dataclass(frozen=True, eq=False)
class GroupingNode(_NodeBase):
    """A step that forks into nested chains and reduces their outputs.

    Every nested chain receives the grouping node's own input set. The
    reducer receives one element set per nested chain, in declared order.
    """

    reducer: Reducer = None  # type: ignore[assignment]
    nested_chains: tuple[ElementChain, ...] = ()

    def __post_init__(self) -> None:
        super().__post_init__()
        if not callable(self.reducer):
            raise ChainArgumentError(
                f"Grouping node {self.descriptor!r} requires a callable reducer."
            )
        object.__setattr__(self, "nested_chains", tuple(self.nested_chains))

    @property
    def modifies_set(self) -> bool:
        return True


# Closed set of declaration node variants; matched exhaustively by the
# execution graph builder and the describer.
DeclarationNode = Union[SingleNode, GroupingNode]
