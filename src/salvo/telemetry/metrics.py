"""Match counters exported through OpenTelemetry metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

EXPORT_INTERVAL_MILLIS = 5000

_METER_PROVIDER: MeterProvider | None = None
_METER: Meter | None = None
_INSTRUMENTS: dict[str, Counter] = {}

MetricAttributes = Mapping[str, "str | bool | int | float"]


def get_meter(name: str = "salvo") -> Meter:
    if _METER is not None:
        return _METER
    return otel_metrics.get_meter(name)


def init_metrics(config: TelemetryConfig) -> Meter:
    global _METER_PROVIDER, _METER, _INSTRUMENTS

    readers = []
    if config.otlp_metrics_endpoint:
        exporter = OTLPMetricExporter(endpoint=config.otlp_metrics_endpoint, insecure=True)
        readers.append(
            PeriodicExportingMetricReader(exporter, export_interval_millis=EXPORT_INTERVAL_MILLIS)
        )

    provider = MeterProvider(resource=Resource.create(config.resource), metric_readers=readers)
    otel_metrics.set_meter_provider(provider)

    _METER_PROVIDER = provider
    _METER = provider.get_meter(config.service_name)
    # Counters created against the old meter would keep reporting to it.
    _INSTRUMENTS = {}
    return _METER


def record_match_metric(name: str, value: float, attrs: MetricAttributes | None = None) -> None:
    """Add ``value`` to the counter called ``name``, creating it on first use."""
    counter = _INSTRUMENTS.get(name)
    if counter is None:
        counter = _INSTRUMENTS[name] = get_meter().create_counter(name, unit="1")
    counter.add(value, attributes=dict(attrs or {}))


def shutdown_metrics() -> None:
    """Export the final readings and stop the installed provider, if any."""
    global _METER_PROVIDER, _METER, _INSTRUMENTS

    if _METER_PROVIDER is not None:
        _METER_PROVIDER.shutdown()
    _METER_PROVIDER = None
    _METER = None
    _INSTRUMENTS = {}
