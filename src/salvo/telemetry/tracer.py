"""Tracing helpers built on OpenTelemetry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Tracer

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import TelemetryConfig


_TRACER_PROVIDER: TracerProvider | None = None


def get_tracer(name: str = "salvo") -> Tracer:
    """Return a tracer for ``name``.

    Module-level tracers in the engine and service are created at import time,
    before the CLI has read its configuration. The global proxy tracer forwards
    to whichever provider :func:`init_tracing` installs later.
    """
    return trace.get_tracer(name)


def init_tracing(config: TelemetryConfig) -> TracerProvider:
    """Export match spans over OTLP, or print them when no collector is configured."""
    global _TRACER_PROVIDER

    provider = TracerProvider(resource=Resource.create(config.resource))
    if config.otlp_traces_endpoint:
        exporter = OTLPSpanExporter(endpoint=config.otlp_traces_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    else:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _TRACER_PROVIDER = provider
    return provider


def shutdown_tracing() -> None:
    """Flush pending spans and stop the installed provider, if any."""
    global _TRACER_PROVIDER

    if _TRACER_PROVIDER is not None:
        _TRACER_PROVIDER.shutdown()
        _TRACER_PROVIDER = None
