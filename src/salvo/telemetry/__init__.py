"""Public telemetry helpers for salvo."""

from __future__ import annotations

from .config import TelemetryConfig, init_telemetry, load_telemetry_config, shutdown_telemetry
from .logger import configure_logging, get_logger, init_logging
from .metrics import get_meter, init_metrics, record_match_metric
from .tracer import get_tracer, init_tracing

__all__ = [
    "TelemetryConfig",
    "configure_logging",
    "get_logger",
    "get_tracer",
    "get_meter",
    "record_match_metric",
    "init_logging",
    "init_tracing",
    "init_metrics",
    "load_telemetry_config",
    "init_telemetry",
    "shutdown_telemetry",
]
