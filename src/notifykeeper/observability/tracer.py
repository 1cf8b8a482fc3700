"""
Pluggable tracing for lifecycle operations.

The lifecycle manager receives a Tracer instead of calling OpenTelemetry
itself. Swap in NullTracer to switch spans off, or MockTracer to assert on
them in tests.

Example:
    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>> with tracer.span("notifykeeper.lifecycle.renew", {ATTR_SUBSCRIPTION_ID: "S1"}) as span:
    ...     if span:
    ...         span.set_attribute(ATTR_OUTCOME, "renewed")
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.trace import Span, TracerProvider

SpanAttributes = dict[str, Any]


@runtime_checkable
class Tracer(Protocol):
    """
    Anything that can open a span around a block of work.

    ``span`` yields the live span when the tracer records spans, or None;
    callers guard attribute writes with ``if span:``.
    """

    def span(
        self,
        name: str,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[Span | None]: ...

    @property
    def enabled(self) -> bool:
        """True when spans are recorded somewhere."""
        ...


class NullTracer:
    """Tracer that records nothing."""

    @contextmanager
    def span(
        self,
        name: str,
        attributes: SpanAttributes | None = None,
    ) -> Iterator[None]:
        yield None

    @property
    def enabled(self) -> bool:
        return False


class OpenTelemetryTracer:
    """
    Tracer backed by OpenTelemetry.

    Without a configured TracerProvider the API hands out non-recording
    spans, so this is safe to use before telemetry is set up.

    Args:
        tracer_name: Instrumentation scope, usually the module's __name__
        tracer_provider: Provider to use instead of the global one
    """

    def __init__(
        self,
        tracer_name: str,
        tracer_provider: TracerProvider | None = None,
    ) -> None:
        self._tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)

    def span(
        self,
        name: str,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[Span | None]:
        """Start a span and make it current for the duration of the block."""
        return self._tracer.start_as_current_span(name, attributes=attributes or {})

    @property
    def enabled(self) -> bool:
        return True


class MockTracer:
    """
    Tracer that keeps every span it opens in memory.

    Example:
        >>> tracer = MockTracer()
        >>> with tracer.span("notifykeeper.lifecycle.renew_all", {"size": 2}):
        ...     pass
        >>> tracer.span_names
        ['notifykeeper.lifecycle.renew_all']
    """

    def __init__(self) -> None:
        self.spans: list[tuple[str, SpanAttributes | None]] = []

    @contextmanager
    def span(
        self,
        name: str,
        attributes: SpanAttributes | None = None,
    ) -> Iterator[None]:
        self.spans.append((name, attributes))
        yield None

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        """Names of recorded spans, oldest first."""
        return [name for name, _ in self.spans]

    def attributes_of(self, name: str) -> list[SpanAttributes]:
        """Opening attributes of every recorded span called ``name``."""
        return [attrs or {} for span_name, attrs in self.spans if span_name == name]

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """
    Pick a tracer for a component.

    Returns:
        OpenTelemetryTracer when enable_tracing is set, NullTracer otherwise
    """
    if not enable_tracing:
        return NullTracer()
    return OpenTelemetryTracer(name)


__all__ = [
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "SpanAttributes",
    "Tracer",
    "create_tracer",
]
