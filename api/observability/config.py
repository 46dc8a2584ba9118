"""
OpenTelemetry Configuration

Sets up distributed tracing and structured logging for the PAJ-SM+ program
core, driven by environment variables.
"""

import os
import json
import logging
from typing import Optional
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

SERVICE_NAME = 'pajsm-core'

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_RECORD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON with trace correlation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            entry["trace_id"] = format(span_context.trace_id, "032x")
            entry["span_id"] = format(span_context.span_id, "016x")

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith('_'):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def build_tracer_provider(environment: str) -> TracerProvider:
    """Create a tracer provider with environment-specific sampling and exporters."""
    sampler = TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0))

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": os.getenv('SERVICE_VERSION', '1.0.0'),
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(sampler=sampler, resource=resource)

    otlp_endpoint = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')

    if environment in ('production', 'staging'):
        # Export only when a collector is configured
        if otlp_endpoint:
            headers = None
            if os.getenv('OTEL_API_KEY'):
                headers = {"Authorization": f"Bearer {os.getenv('OTEL_API_KEY')}"}
            otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, headers=headers)
            tracer_provider.add_span_processor(
                BatchSpanProcessor(otlp_exporter, max_export_batch_size=512)
            )

    elif environment == 'development':
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        if otlp_endpoint:
            tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    return tracer_provider


def setup_observability() -> Optional[TracerProvider]:
    """Initialize OpenTelemetry instrumentation based on environment configuration."""
    environment = os.getenv('ENVIRONMENT', 'development')
    otel_enabled = os.getenv('OTEL_ENABLED', 'true').lower() == 'true'

    setup_structured_logging(environment)

    if not otel_enabled:
        return None

    tracer_provider = build_tracer_provider(environment)
    trace.set_tracer_provider(tracer_provider)
    return tracer_provider


def setup_structured_logging(environment: str) -> None:
    """Configure structured JSON logging with trace correlation."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG,
        'test': logging.WARNING
    }.get(environment, logging.INFO)

    override = os.getenv('LOG_LEVEL')
    if override:
        log_level = logging.getLevelName(override.upper())
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown LOG_LEVEL: {override}")

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    # Configure root logger
    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    if environment == 'development':
        logging.getLogger('domain').setLevel(logging.DEBUG)
        logging.getLogger('services').setLevel(logging.DEBUG)
