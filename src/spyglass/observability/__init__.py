"""Logging and tracing."""

from spyglass.observability.logging import (
    bind_context,
    clear_context,
    get_logger,
    reset_logging,
    setup_logging,
    unbind_context,
)
from spyglass.observability.tracing import (
    get_tracer,
    operation_span,
    reset_tracing,
    setup_tracing,
    trace_operation_failed,
    traced,
)

__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "get_tracer",
    "operation_span",
    "reset_logging",
    "reset_tracing",
    "setup_logging",
    "setup_tracing",
    "trace_operation_failed",
    "traced",
    "unbind_context",
]
