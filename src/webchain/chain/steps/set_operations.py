"""Set operation steps built on grouping nodes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from webchain.chain.element_chain import BranchBuilder, ElementChain


def _distinct_union(element_sets: Sequence[tuple[Any, ...]]) -> list[Any]:
    """Concatenate *element_sets*, dropping repeats, first occurrence wins."""
    merged: list[Any] = []
    for elements in element_sets:
        for element in elements:
            if element not in merged:
                merged.append(element)
    return merged


class SetOperationSteps:
    def union(self: ElementChain, *branch_builders: BranchBuilder) -> ElementChain:
        """Run every branch on the current set and merge the distinct results.

        Each branch starts from an empty chain, so a branch's first
        ``select`` searches the whole document. Use filters to work on the
        set the union receives.

        Example::

            buttons = chain.select("button").union(
                lambda c: c.with_attribute("type", "submit"),
                lambda c: c.displayed().first(),
            )
        """
        return self.add_grouping_node("union", _distinct_union, *branch_builders)
