"""OpenTelemetry integration for element chain outcomes.

Element handles and their contents are NEVER exported. Only structured
metadata (outcome, chain descriptor, attempt count, error class) is
emitted, as span events on the current span.

Usage:
    from webchain.otel import enable_otel
    enable_otel(service_name="my-ui-tests")
"""
from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

_otel_enabled: bool = False
_tracer: Any = None


def enable_otel(
    service_name: str,
    exporter: Any = None,
    batch: bool = False,
) -> None:
    """Install a tracer provider for *service_name* and start emitting.

    Args:
        service_name: Value of the ``service.name`` resource attribute.
        exporter: Span exporter to attach. Without one, spans are only
            visible to processors the host adds to the provider later.
        batch: Use a BatchSpanProcessor instead of exporting each span
            as it ends.

    Logs a warning and stays disabled if opentelemetry-sdk is missing.
    """
    global _otel_enabled, _tracer
    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import SERVICE_NAME, Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
    except ImportError as exc:
        logger.warning("[WEBCHAIN_OTEL] opentelemetry-sdk not installed, export disabled: %s", exc)
        return

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    if exporter is not None:
        processor_cls = BatchSpanProcessor if batch else SimpleSpanProcessor
        provider.add_span_processor(processor_cls(exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer("webchain")
    _otel_enabled = True
    logger.info("[WEBCHAIN_OTEL] enabled for service %r", service_name)


def enable_otel_with_tracer(tracer: Any) -> None:
    """Start emitting through an existing tracer, leaving the global provider alone."""
    global _otel_enabled, _tracer
    _tracer = tracer
    _otel_enabled = True


def is_otel_enabled() -> bool:
    """Return True if OTel is currently enabled."""
    return _otel_enabled


def disable_otel() -> None:
    """Stop emitting. The installed tracer provider is not shut down."""
    global _otel_enabled, _tracer
    _otel_enabled = False
    _tracer = None


def emit_chain_event(
    outcome: str,
    descriptor: str = "",
    attempt_count: int = 0,
    error: BaseException | None = None,
) -> None:
    """Emit an element chain outcome as an OTel span event.

    No-op if OTel is not enabled. Never raises.

    Args:
        outcome: One of "retry", "success", "failure", "cancelled".
        descriptor: Descriptor of the chain's leaf node.
        attempt_count: Attempts made so far in this evaluation.
        error: The error that caused the outcome, if any.
    """
    if not _otel_enabled or _tracer is None:
        return
    try:
        from opentelemetry import trace

        current_span = trace.get_current_span()
        if current_span is not None:
            current_span.add_event(
                name=f"webchain.chain.{outcome.lower()}",
                attributes={
                    "webchain.outcome": outcome,
                    "webchain.leaf": descriptor[:500],
                    "webchain.attempts": attempt_count,
                    "webchain.error_class": type(error).__name__ if error is not None else "",
                },
            )
    except Exception as exc:
        logger.debug("[WEBCHAIN_OTEL] could not record %s event: %s", outcome, exc)
