"""
Unit tests for the Tracer implementations.
"""

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from notifykeeper.observability import (
    ATTR_RESOURCE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)


class TestCreateTracer:
    def test_enabled_returns_opentelemetry_tracer(self):
        tracer = create_tracer(__name__, enable_tracing=True)

        assert isinstance(tracer, OpenTelemetryTracer)
        assert tracer.enabled is True

    def test_disabled_returns_null_tracer(self):
        tracer = create_tracer(__name__, enable_tracing=False)

        assert isinstance(tracer, NullTracer)
        assert tracer.enabled is False

    def test_all_implementations_satisfy_protocol(self):
        for tracer in (NullTracer(), MockTracer(), OpenTelemetryTracer(__name__)):
            assert isinstance(tracer, Tracer)


class TestNullTracer:
    def test_span_yields_none(self):
        with NullTracer().span("noop", {"key": "value"}) as span:
            assert span is None


class TestOpenTelemetryTracer:
    def test_span_without_provider_is_usable(self):
        tracer = OpenTelemetryTracer(__name__)

        with tracer.span("notifykeeper.test", {ATTR_RESOURCE: "/teams/T1/channels"}) as span:
            span.set_attribute("extra", 1)

        assert span is not None

    def test_spans_reach_the_given_provider(self):
        exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        tracer = OpenTelemetryTracer(__name__, tracer_provider=provider)

        with tracer.span("notifykeeper.test", {ATTR_RESOURCE: "/teams/T1/channels"}):
            pass

        (finished,) = exporter.get_finished_spans()
        assert finished.name == "notifykeeper.test"
        assert finished.attributes[ATTR_RESOURCE] == "/teams/T1/channels"
        provider.shutdown()


class TestMockTracer:
    def test_records_spans(self):
        tracer = MockTracer()

        with tracer.span("first", {"a": 1}):
            pass
        with tracer.span("second"):
            pass

        assert tracer.spans == [("first", {"a": 1}), ("second", None)]
        assert tracer.span_names == ["first", "second"]

    def test_attributes_of(self):
        tracer = MockTracer()
        with tracer.span("renew", {"id": "S1"}):
            pass
        with tracer.span("renew"):
            pass

        assert tracer.attributes_of("renew") == [{"id": "S1"}, {}]
        assert tracer.attributes_of("missing") == []

    def test_clear(self):
        tracer = MockTracer()
        with tracer.span("first"):
            pass

        tracer.clear()

        assert tracer.spans == []
