"""OpenTelemetry spans for provisioning calls.

Spans are created through the OpenTelemetry API only. Without an SDK
configured by the host application they are no-ops.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from opentelemetry import trace as otel_trace
from opentelemetry.trace import Span, SpanKind, StatusCode, TracerProvider

from provlink.observability.config import TracingConfig


class CallTracer:
    """Creates one CLIENT span per Provisioning Appliance call.

    Example:
        >>> tracer = CallTracer()
        >>> with tracer.span("CreateKeyAndCert", sku="abc123") as span:
        ...     outcome = do_call()
        ...     tracer.finish(span, outcome.status)
    """

    def __init__(
        self,
        config: Optional[TracingConfig] = None,
        service: str = "",
        tracer_provider: Optional[TracerProvider] = None,
    ):
        """Initialize the tracer.

        Args:
            config: Tracing configuration.
            service: gRPC service name recorded on spans.
            tracer_provider: Provider to use instead of the global one.
        """
        self.config = config or TracingConfig()
        self.service = service
        self._tracer = otel_trace.get_tracer(
            self.config.tracer_name, tracer_provider=tracer_provider
        )

    @contextmanager
    def span(self, method: str, sku: str = "") -> Iterator[Optional[Span]]:
        """Open a span for a call; yields None when tracing is disabled."""
        if not self.config.enabled:
            yield None
            return

        with self._tracer.start_as_current_span(
            f"{self.service}/{method}" if self.service else method,
            kind=SpanKind.CLIENT,
            attributes={
                "rpc.system": "grpc",
                "rpc.service": self.service,
                "rpc.method": method,
                "provlink.sku": sku,
            },
        ) as span:
            yield span

    def finish(self, span: Optional[Span], status) -> None:
        """Record the call status on a span.

        Args:
            span: Span from span(), or None.
            status: provlink.ate.outcome.Status of the call.
        """
        if span is None:
            return
        span.set_attribute("rpc.grpc.status_code", status.code.value[0])
        span.set_attribute("provlink.status_origin", status.origin.value)
        if status.ok:
            span.set_status(StatusCode.OK)
        else:
            span.set_status(StatusCode.ERROR, str(status))
