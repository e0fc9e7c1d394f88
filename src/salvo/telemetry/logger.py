"""Logging helpers: event-style console output plus optional OTLP export.

Engine and service code log short event names (``shot_resolved``,
``action_rejected``) and put the details in ``extra``. The console formatter
appends those details as ``key=value`` pairs so a match can be followed from
the terminal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:
    from .config import TelemetryConfig

ROOT_LOGGER = "salvo"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "otelTraceID", "otelSpanID", "otelTraceSampled", "otelServiceName"}

_otlp_handler: logging.Handler | None = None


class EventFormatter(logging.Formatter):
    """Formats a record and appends its ``extra`` fields and trace ids."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = [
            f"{key}={value}"
            for key, value in sorted(record.__dict__.items())
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        ]
        trace_id = getattr(record, "otelTraceID", None)
        if trace_id and trace_id != "0":
            fields.append(f"trace_id={trace_id}")
        return f"{line} {' '.join(fields)}" if fields else line


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Send ``salvo`` records to stderr at ``level``; safe to call repeatedly."""
    logger = get_logger()
    if not any(isinstance(h.formatter, EventFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(EventFormatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def init_logging(config: TelemetryConfig) -> logging.Logger:
    """Forward ``salvo`` records to the OTLP collector configured in ``config``."""
    global _otlp_handler

    provider = LoggerProvider(resource=Resource.create(config.resource))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    logger = get_logger()
    if _otlp_handler is not None:
        logger.removeHandler(_otlp_handler)
    _otlp_handler = LoggingHandler(level=logging.INFO, logger_provider=provider)
    logger.addHandler(_otlp_handler)
    return logger
