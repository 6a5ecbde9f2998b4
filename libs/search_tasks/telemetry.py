"""
OpenTelemetry instruments for task polling and setup pipelines.
Instruments come from the global providers, so they stay no-op
until `configure_telemetry` (or the host process) installs real ones.
"""

from opentelemetry import trace
from opentelemetry.metrics import get_meter, set_meter_provider

from .config import Config

_meter = get_meter("search_tasks")
tracer = trace.get_tracer("search_tasks")

TASK_SUBMISSIONS = _meter.create_counter("task_submissions_total")
TASK_POLLS = _meter.create_counter("task_polls_total")
TASK_WAIT_LAT = _meter.create_histogram("task_wait_seconds", unit="s")
SETUP_STEPS = _meter.create_counter("setup_steps_total")
SETUP_FAILURES = _meter.create_counter("setup_failures_total")


def configure_telemetry(config=Config) -> None:
    """Install OTLP trace/metric exporters when enabled by configuration."""
    if config.OTEL_SDK_DISABLED:
        return

    from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
        OTLPMetricExporter,
    )
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import (
        PeriodicExportingMetricReader,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    resource = Resource.create({"service.name": config.OTEL_SERVICE_NAME})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=config.OTLP_ENDPOINT))
    )
    trace.set_tracer_provider(tracer_provider)
    if config.OTEL_METRICS_ENABLED:
        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=config.OTLP_ENDPOINT),
            export_interval_millis=config.OTEL_METRICS_EXPORT_INTERVAL_MS,
        )
        set_meter_provider(
            MeterProvider(resource=resource, metric_readers=[reader])
        )
