"""OpenTelemetry tracing for Spyglass.

One span covers a registry walk and one child span covers each reported
operation, so a slow or failing operation type can be found in a trace.
"""

from __future__ import annotations

import functools
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Status, StatusCode, Tracer

from spyglass import __version__

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from spyglass.core.config import TracingSettings

_tracer: Tracer | None = None
_initialized: bool = False

P = ParamSpec("P")
T = TypeVar("T")


def setup_tracing(settings: TracingSettings) -> None:
    """Initialize OpenTelemetry tracing.

    Args:
        settings: Tracing configuration settings.
    """
    global _tracer, _initialized  # noqa: PLW0603

    if _initialized:
        return

    if not settings.enabled:
        _initialized = True
        return

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    # Spans share stderr with the logs; stdout carries the report.
    console = SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    if settings.otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )

            exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
            provider.add_span_processor(BatchSpanProcessor(exporter))
        except ImportError:
            # The exporter ships with the "otlp" extra
            provider.add_span_processor(console)
    else:
        provider.add_span_processor(console)

    trace.set_tracer_provider(provider)

    # The global provider can only be set once per process.
    _tracer = provider.get_tracer("spyglass", __version__)
    _initialized = True


def get_tracer() -> Tracer:
    """Get the configured tracer, or a no-op tracer when tracing is off."""
    if _tracer is None:
        return trace.NoOpTracer()
    return _tracer


def reset_tracing() -> None:
    """Reset tracing state. Useful for testing."""
    global _tracer, _initialized  # noqa: PLW0603
    _tracer = None
    _initialized = False


@contextmanager
def operation_span(type_name: str, nickname: str = "") -> Generator[trace.Span, None, None]:
    """Create a span for reporting one operation type.

    Args:
        type_name: The operation's type name.
        nickname: The operation's nickname.

    Yields:
        The active span.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(
        f"report.operation:{type_name}",
        attributes={
            "operation.type": type_name,
            "operation.nickname": nickname,
        },
    ) as span:
        yield span


def trace_operation_failed(span: trace.Span, error: BaseException) -> None:
    """Record a failure on an operation span.

    Args:
        span: The operation's span.
        error: The error that aborted the walk.
    """
    span.set_attribute("operation.error.type", type(error).__name__)
    span.set_attribute("operation.error.message", str(error))
    span.set_status(Status(StatusCode.ERROR, str(error)))


def traced(
    operation_name: str | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to trace a function.

    Args:
        operation_name: Optional custom name for the span.
            Defaults to the function name.
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            tracer = get_tracer()
            with tracer.start_as_current_span(span_name):
                return func(*args, **kwargs)

        return wrapper

    return decorator
