"""Step vocabulary for ElementChain.

Each family of steps is a mixin built only on ``add_node``,
``add_action`` and ``add_grouping_node``; ElementChain inherits them all.
"""

from webchain.chain.steps.actions import ActionSteps
from webchain.chain.steps.assertions import AssertionSteps
from webchain.chain.steps.scripts import ScriptSteps
from webchain.chain.steps.selection import SelectionSteps
from webchain.chain.steps.set_operations import SetOperationSteps

__all__ = [
    "ActionSteps",
    "AssertionSteps",
    "ScriptSteps",
    "SelectionSteps",
    "SetOperationSteps",
]
