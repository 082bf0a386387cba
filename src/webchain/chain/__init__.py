"""Element chains: declaration, execution and diagnostics.

Public surface exported from this package:
- ElementChain: immutable fluent chain-building handle
- ChainExecutor: retrying, cancellable evaluation against a browser
- ChainDescriber: human-readable rendering of chains and execution traces
- CallContext: calling-context descriptor used to group diagnostic output
- SingleNode / GroupingNode: declaration graph node variants
- ExecutionNode / build_execution_graph: per-attempt execution graph
"""

from webchain.chain.context import CallContext
from webchain.chain.declaration import DeclarationNode, Elements, GroupingNode, SingleNode
from webchain.chain.describer import ChainDescriber
from webchain.chain.element_chain import BranchBuilder, ElementChain
from webchain.chain.execution import (
    ExecutionNode,
    GroupedExecutionNode,
    SingleExecutionNode,
    build_execution_graph,
)
from webchain.chain.executor import ChainExecutor

__all__ = [
    "BranchBuilder",
    "CallContext",
    "ChainDescriber",
    "ChainExecutor",
    "DeclarationNode",
    "Elements",
    "ElementChain",
    "ExecutionNode",
    "GroupedExecutionNode",
    "GroupingNode",
    "SingleExecutionNode",
    "SingleNode",
    "build_execution_graph",
]
