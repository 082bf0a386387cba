"""Human-readable rendering of declaration chains and execution traces.

Nodes are grouped by the calling context that declared them, so a trace
reads as the sequence of calls that built the chain::

    click_button('Save') : [
    select('button')
        Input:
            No elements.
        Node Passed - Output:
            2 elements.
    ...
    ]
     -> nodes : [
    ...
    ]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

from selenium.common.exceptions import StaleElementReferenceException

from webchain.chain.context import render_context

if TYPE_CHECKING:
    from webchain.chain.element_chain import ElementChain
    from webchain.chain.execution import ExecutionNode

__all__ = ["ChainDescriber"]

_INDENT_SIZE = 4
# Declared chains are listed more compactly than execution traces.
_DECLARATION_INDENT_SIZE = 2
_MAX_ELEMENT_DETAILS = 20
_DETAIL_ATTRIBUTE_NAMES: tuple[str, ...] = ("id", "class", "aria-label", "text")
_MAX_DETAIL_NAME_LENGTH = max(len(name) for name in _DETAIL_ATTRIBUTE_NAMES)

# Sentinel distinct from None, which is itself a valid calling context.
_NO_CONTEXT = object()


class ChainDescriber:
    """Renders chains for logs and error reports."""

    def describe(self, chain: ElementChain) -> str:
        """Describe the declared steps of *chain*."""
        if chain.leaf is None:
            return "[empty]"

        lines: list[str] = []
        current_context: Any = _NO_CONTEXT
        for node in chain.leaf.walk_back():
            if node.calling_context is not current_context:
                self._start_context(lines, current_context, node.calling_context)
                current_context = node.calling_context
            lines.append(_indent(1, _DECLARATION_INDENT_SIZE) + node.descriptor)
        lines.append("]")
        return "\n".join(lines) + "\n"

    def describe_execution(
        self,
        entry_point: Optional[ExecutionNode],
        capture_element_detail: bool,
    ) -> str:
        """Describe what happened at each node of an execution graph.

        Args:
            entry_point: First node of the execution graph.
            capture_element_detail: Read tag, position and notable
                attributes of up to 20 elements per set. Each read is a
                browser round trip, so this is the expensive variant.
        """
        if entry_point is None:
            return "[empty]"

        lines: list[str] = []
        current_context: Any = _NO_CONTEXT
        state = _RenderState()
        for node in entry_point.iter_chain():
            if node.calling_context is not current_context:
                self._start_context(lines, current_context, node.calling_context)
                current_context = node.calling_context
            self._render_node(lines, node, 0, capture_element_detail, state)
        lines.append("]")
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _start_context(lines: list[str], previous: Any, context: Any) -> None:
        prefix = ""
        if previous is not _NO_CONTEXT:
            lines.append("]")
            prefix = " -> "
        lines.append(f"{prefix}{render_context(context)} : [")

    def _render_node(
        self,
        lines: list[str],
        node: ExecutionNode,
        depth: int,
        capture_detail: bool,
        state: _RenderState,
    ) -> None:
        lines.append(_indent(depth) + node.descriptor)

        if not node.was_executed:
            if state.encountered_error:
                lines.append(_indent(depth + 1) + "not run - previous node failed")
            else:
                lines.append(
                    _indent(depth + 1) + "skipped - using cached results from previous evaluation"
                )
            return

        lines.append(_indent(depth + 2) + "Input:")
        self._render_elements(lines, node.input_elements or (), capture_detail, depth + 3)

        if node.children:
            lines.append(_indent(depth + 2) + "Children: [")
            for child in node.children:
                lines.append(_indent(depth + 3) + "Nested Chain:")
                if child is None:
                    lines.append(_indent(depth + 4) + "[empty]")
                    continue
                for nested in child.iter_chain():
                    self._render_node(lines, nested, depth + 4, capture_detail, state)
            lines.append(_indent(depth + 2) + "]")

        if node.error is not None:
            state.encountered_error = True
            lines.append(_indent(depth + 2) + "NODE FAILED - EXCEPTION " + type(node.error).__name__)
            lines.append(_indent(depth + 3) + str(node.error))
        elif node.output_elements is None:
            # Entered, but the attempt stopped inside a nested chain.
            lines.append(_indent(depth + 2) + "Node Incomplete")
        elif node.modifies_set:
            lines.append(_indent(depth + 2) + "Node Passed - Output:")
            self._render_elements(lines, node.output_elements, capture_detail, depth + 3)
        else:
            lines.append(_indent(depth + 2) + "Node Passed")

    def _render_elements(
        self,
        lines: list[str],
        elements: Sequence[Any],
        capture_detail: bool,
        depth: int,
    ) -> None:
        count = len(elements)
        if count == 0:
            lines.append(_indent(depth) + "No elements.")
        elif count == 1:
            lines.append(_indent(depth) + "1 element.")
        else:
            lines.append(_indent(depth) + f"{count} elements.")

        if not capture_detail:
            return

        for idx, element in enumerate(elements[:_MAX_ELEMENT_DETAILS]):
            try:
                lines.extend(self._element_detail(idx, element, depth))
            except StaleElementReferenceException:
                lines.append(_indent(depth) + f"[{idx}] - element stale - no detail available")
            except Exception as exc:
                lines.append(_indent(depth) + f"[{idx}] - error reading element info - {exc}")

    @staticmethod
    def _element_detail(idx: int, element: Any, depth: int) -> list[str]:
        # Built in full before returning so a read failure part way through
        # leaves no partial detail behind.
        tag_name = element.tag_name
        if element.is_displayed():
            location = element.location
            detail = [
                _indent(depth)
                + f"[{idx}] - <{tag_name} /> at X {location['x']}, Y {location['y']}"
            ]
        else:
            detail = [_indent(depth) + f"[{idx}] - <{tag_name} /> - not displayed"]

        for name in _DETAIL_ATTRIBUTE_NAMES:
            value = element.get_attribute(name)
            if value is not None and str(value).strip():
                padding = " " * (_MAX_DETAIL_NAME_LENGTH - len(name))
                detail.append(_indent(depth + 1) + f"{name}: {padding}{value}")
        return detail


class _RenderState:
    __slots__ = ("encountered_error",)

    def __init__(self) -> None:
        self.encountered_error = False


def _indent(depth: int, size: int = _INDENT_SIZE) -> str:
    return " " * (size * depth)
