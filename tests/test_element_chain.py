"""Tests for the declaration graph and the ElementChain builder.

Cases:
- Appending returns a new handle; the original is unchanged
- Branching handles share their common prefix without copying
- Build-time validation raises ChainArgumentError
- add_action marks the node as not modifying the set and passes input through
- Grouping node builders get a fresh chain with the same options and context
- with_context attributes new nodes to the given context
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webchain import (
    CallContext,
    CancellationToken,
    ChainArgumentError,
    ChainOptions,
    ElementChain,
    GroupingNode,
    SingleNode,
)


def _identity(elements, browser, token):
    return elements


# ---------------------------------------------------------------------------
# Immutability and sharing
# ---------------------------------------------------------------------------


class TestPersistentChain:
    def test_empty_chain(self):
        chain = ElementChain()
        assert chain.leaf is None
        assert chain.any_previous_nodes is False

    def test_append_returns_new_handle(self):
        empty = ElementChain()
        one = empty.add_node("a", _identity)

        assert one is not empty
        assert empty.leaf is None
        assert one.leaf.descriptor == "a"
        assert one.leaf.previous is None
        assert one.any_previous_nodes is True

    def test_branches_share_prefix(self):
        root = ElementChain().add_node("root", _identity)
        left = root.add_node("left", _identity)
        right = root.add_node("right", _identity)

        assert left.leaf.previous is root.leaf
        assert right.leaf.previous is root.leaf
        assert root.leaf.previous is None

    def test_walk_back_is_root_first(self):
        chain = ElementChain().add_node("a", _identity).add_node("b", _identity).add_node("c", _identity)
        assert [n.descriptor for n in chain.leaf.walk_back()] == ["a", "b", "c"]

    def test_nodes_are_frozen(self):
        chain = ElementChain().add_node("a", _identity)
        with pytest.raises(AttributeError):
            chain.leaf.descriptor = "b"  # type: ignore[misc]

    def test_cache_cell_is_shared_between_handles(self):
        root = ElementChain().add_node("root", _identity)
        left = root.add_node("left", _identity)

        root.leaf.cache_elements(["x"])

        assert left.leaf.previous.cached_elements == ("x",)

    def test_options_carried_through_appends(self):
        options = ChainOptions(retry_delay_ms=5)
        chain = ElementChain(options=options).add_node("a", _identity).add_node("b", _identity)
        assert chain.options is options


# ---------------------------------------------------------------------------
# Build-time validation
# ---------------------------------------------------------------------------


class TestValidation:
    @pytest.mark.parametrize("descriptor", ["", "   ", None])
    def test_blank_descriptor_rejected(self, descriptor):
        with pytest.raises(ChainArgumentError):
            ElementChain().add_node(descriptor, _identity)

    def test_missing_callback_rejected(self):
        with pytest.raises(ChainArgumentError):
            ElementChain().add_node("a", None)

    def test_missing_action_callback_rejected(self):
        with pytest.raises(ChainArgumentError):
            ElementChain().add_action("a", None)

    def test_missing_reducer_rejected(self):
        with pytest.raises(ChainArgumentError):
            ElementChain().add_grouping_node("group", None, lambda c: c)

    def test_blank_grouping_descriptor_rejected(self):
        with pytest.raises(ChainArgumentError):
            ElementChain().add_grouping_node(" ", list, lambda c: c)

    def test_branch_must_return_chain(self):
        with pytest.raises(ChainArgumentError, match="must return an ElementChain"):
            ElementChain().add_grouping_node("group", list, lambda c: None)

    def test_branch_must_be_callable(self):
        with pytest.raises(ChainArgumentError):
            ElementChain().add_grouping_node("group", list, "not a builder")

    def test_argument_error_is_value_error(self):
        assert issubclass(ChainArgumentError, ValueError)


# ---------------------------------------------------------------------------
# Node variants
# ---------------------------------------------------------------------------


class TestNodeVariants:
    def test_add_node_modifies_set(self):
        chain = ElementChain().add_node("a", _identity)
        assert isinstance(chain.leaf, SingleNode)
        assert chain.leaf.modifies_set is True

    def test_add_action_passes_input_through(self):
        seen = []

        def _act(elements, browser, token):
            seen.append(elements)
            return ["ignored"]

        chain = ElementChain().add_action("act", _act)
        result = asyncio.run(chain.leaf.callback(("e1", "e2"), None, CancellationToken()))

        assert chain.leaf.modifies_set is False
        assert result == ("e1", "e2")
        assert seen == [("e1", "e2")]

    def test_add_action_awaits_async_callback(self):
        seen = []

        async def _act(elements, browser, token):
            seen.append("ran")

        chain = ElementChain().add_action("act", _act)
        result = asyncio.run(chain.leaf.callback(("e",), None, CancellationToken()))

        assert seen == ["ran"]
        assert result == ("e",)

    def test_grouping_node_holds_nested_chains_in_order(self):
        chain = ElementChain().add_grouping_node(
            "group",
            list,
            lambda c: c.add_node("first", _identity),
            lambda c: c.add_node("second", _identity),
        )

        assert isinstance(chain.leaf, GroupingNode)
        assert chain.leaf.modifies_set is True
        assert [n.leaf.descriptor for n in chain.leaf.nested_chains] == ["first", "second"]

    def test_branch_builder_gets_fresh_chain_with_same_options_and_context(self):
        options = ChainOptions(retry_delay_ms=7)
        ctx = CallContext("outer")
        received = []

        def _builder(c):
            received.append(c)
            return c

        parent = ElementChain(options=options, context=ctx).add_node("parent", _identity)
        parent.add_grouping_node("group", list, _builder)

        assert received[0].leaf is None
        assert received[0].options is options
        assert received[0].context is ctx


# ---------------------------------------------------------------------------
# Calling contexts
# ---------------------------------------------------------------------------


class TestCallingContext:
    def test_with_context_applies_to_new_nodes_only(self):
        ctx = CallContext("click_button", ("Save",))
        before = ElementChain().add_node("a", _identity)
        after = before.with_context(ctx).add_node("b", _identity)

        assert before.leaf.calling_context is None
        assert after.leaf.calling_context is ctx
        assert after.leaf.previous is before.leaf

    def test_call_context_renders_arguments(self):
        assert str(CallContext("fill", ("name", 3, None))) == "fill('name', 3, null)"

    def test_call_contexts_compare_by_identity(self):
        assert CallContext("a") != CallContext("a")
