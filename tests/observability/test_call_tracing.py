"""Unit tests for provisioning call spans."""

import grpc
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode

from provlink.ate import AteClient
from provlink.ate.outcome import OK_STATUS, Status
from provlink.observability.config import TracingConfig
from provlink.observability.tracing import CallTracer
from provlink.pa.models import CreateKeyAndCertResponse
from provlink.pa.service import CREATE_KEY_AND_CERT, SERVICE_NAME


@pytest.fixture
def exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return CallTracer(service=SERVICE_NAME, tracer_provider=provider)


class TestCallTracer:
    """Tests for CallTracer."""

    def test_span_attributes(self, tracer, exporter):
        """Test spans are CLIENT spans named after the procedure."""
        with tracer.span(CREATE_KEY_AND_CERT, sku="abc123") as span:
            tracer.finish(span, OK_STATUS)

        (finished,) = exporter.get_finished_spans()
        assert finished.name == "pa.ProvisioningApplianceService/CreateKeyAndCert"
        assert finished.kind == SpanKind.CLIENT
        assert finished.attributes["rpc.system"] == "grpc"
        assert finished.attributes["rpc.method"] == CREATE_KEY_AND_CERT
        assert finished.attributes["provlink.sku"] == "abc123"
        assert finished.attributes["rpc.grpc.status_code"] == 0
        assert finished.status.status_code == StatusCode.OK

    def test_failure_status(self, tracer, exporter):
        """Test failed calls mark the span as an error."""
        with tracer.span(CREATE_KEY_AND_CERT) as span:
            tracer.finish(span, Status(grpc.StatusCode.UNAVAILABLE, "PA down"))

        (finished,) = exporter.get_finished_spans()
        assert finished.status.status_code == StatusCode.ERROR
        assert finished.status.description == "UNAVAILABLE: PA down"
        assert finished.attributes["rpc.grpc.status_code"] == 14
        assert finished.attributes["provlink.status_origin"] == "remote"

    def test_disabled(self, exporter):
        """Test a disabled tracer yields no span."""
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        tracer = CallTracer(TracingConfig(enabled=False), tracer_provider=provider)

        with tracer.span(CREATE_KEY_AND_CERT) as span:
            tracer.finish(span, OK_STATUS)

        assert span is None
        assert exporter.get_finished_spans() == ()

    def test_client_spans(self, tracer, exporter, fake_stub):
        """Test the client opens one span per remote call."""
        fake_stub.program(CREATE_KEY_AND_CERT, CreateKeyAndCertResponse())
        ate = AteClient(fake_stub, tracer=tracer)

        ate.create_key_and_cert("abc123")
        ate.create_key_and_cert("abc123", None, 3)

        spans = exporter.get_finished_spans()
        assert len(spans) == 1
        assert spans[0].attributes["provlink.sku"] == "abc123"
