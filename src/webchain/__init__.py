"""webchain - Declarative, retryable element chains for browser automation."""

__version__ = "0.1.0"

# Configuration and cancellation
from webchain.options import ChainOptions
from webchain.cancellation import CancellationToken

# Errors
from webchain.errors import (
    WebChainError,
    ChainArgumentError,
    ChainCancelledError,
    PageNotReadyError,
    ElementAssertionError,
    ScriptError,
)

# Collaborators
from webchain.browser import Browser, SeleniumBrowser
from webchain.scripts import ScriptRunner, SeleniumScriptRunner

# Element chains
from webchain.chain import (
    CallContext,
    ChainDescriber,
    ChainExecutor,
    ElementChain,
    ExecutionNode,
    GroupingNode,
    SingleNode,
    build_execution_graph,
)

# OpenTelemetry (opt-in, not enabled on import)
from webchain.otel import enable_otel, disable_otel, is_otel_enabled

__all__ = [
    # Configuration
    "ChainOptions",
    "CancellationToken",
    # Errors
    "WebChainError",
    "ChainArgumentError",
    "ChainCancelledError",
    "PageNotReadyError",
    "ElementAssertionError",
    "ScriptError",
    # Collaborators
    "Browser",
    "SeleniumBrowser",
    "ScriptRunner",
    "SeleniumScriptRunner",
    # Element chains
    "CallContext",
    "ChainDescriber",
    "ChainExecutor",
    "ElementChain",
    "ExecutionNode",
    "GroupingNode",
    "SingleNode",
    "build_execution_graph",
    # OpenTelemetry
    "enable_otel",
    "disable_otel",
    "is_otel_enabled",
]
