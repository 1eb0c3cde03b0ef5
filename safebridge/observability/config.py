# SPDX-License-Identifier: Apache-2.0

"""
OpenTelemetry Configuration

Sets up distributed tracing and logging for the SafeBridge API.
Sampling and exporters depend on the deployment environment.
"""

import os
import logging
from typing import Optional
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

SERVICE_NAME = 'safebridge-api'

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}

logger = logging.getLogger(__name__)

_tracer_provider: Optional[TracerProvider] = None


def setup_observability(environment: str = 'development', enabled: bool = True,
                        service_version: str = '1.0.0') -> Optional[TracerProvider]:
    """
    Initialize OpenTelemetry tracing and structured logging.

    The global tracer provider can only be installed once per process;
    later calls return the provider installed first.
    """
    global _tracer_provider

    setup_structured_logging(environment)

    if not enabled:
        return None

    if _tracer_provider is not None:
        return _tracer_provider

    sampler = TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0))

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": service_version,
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(sampler=sampler, resource=resource)

    otlp_endpoint = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    if otlp_endpoint:
        headers = None
        if os.getenv('OTEL_API_KEY'):
            headers = {"Authorization": f"Bearer {os.getenv('OTEL_API_KEY')}"}
        tracer_provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=otlp_endpoint, headers=headers),
                max_export_batch_size=512
            )
        )
    elif environment == 'development':
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)
    _tracer_provider = tracer_provider

    logger.info(
        "Tracing configured",
        extra={"environment": environment, "otlp_endpoint": otlp_endpoint or ""}
    )

    return tracer_provider


def setup_structured_logging(environment: str):
    """Configure logging levels per environment."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.INFO,
        'test': logging.WARNING
    }.get(environment, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if environment == 'production':
        # Production: keep driver chatter out of the logs
        logging.getLogger('redis').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

    elif environment == 'development':
        logging.getLogger('safebridge.domain').setLevel(logging.DEBUG)
        logging.getLogger('safebridge.services').setLevel(logging.DEBUG)
