"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from .logger import init_logging
from .metrics import init_metrics, shutdown_metrics
from .tracer import init_tracing, shutdown_tracing

TRUTHY = {"1", "true", "yes", "on"}


def env_flag(*names: str) -> bool | None:
    """Return the first of ``names`` that is set, interpreted as a boolean."""
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in TRUTHY
    return None


def parse_resource_attributes(raw: str) -> dict[str, str]:
    """Parse ``key=value,key=value`` as used by ``OTEL_RESOURCE_ATTRIBUTES``."""
    attrs: dict[str, str] = {}
    for part in raw.split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        attrs[key.strip()] = value.strip()
    return attrs


class TelemetryConfig(BaseModel):
    """Runtime configuration for telemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "salvo"
    service_namespace: str = "battleship"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @property
    def resource(self) -> dict[str, str]:
        """Resource attributes shared by every exporter."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`SALVO_*` + `OTEL_*`)."""

        data: Dict[str, Any] = cls().model_dump()
        data.update(overrides)

        bool_fields = {
            "enable_tracing": ("SALVO_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("SALVO_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("SALVO_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
        }
        for name, env_names in bool_fields.items():
            if name in overrides:
                continue
            env_value = env_flag(*env_names)
            if env_value is not None:
                data[name] = env_value

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        signal_endpoints = {
            "otlp_traces_endpoint": ("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", "v1/traces"),
            "otlp_metrics_endpoint": ("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT", "v1/metrics"),
            "otlp_logs_endpoint": ("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "v1/logs"),
        }
        for name, (env_name, suffix) in signal_endpoints.items():
            if data.get(name):
                continue
            explicit = os.getenv(env_name)
            if explicit:
                data[name] = explicit
            elif base_endpoint:
                data[name] = f"{base_endpoint.rstrip('/')}/{suffix}"

        service_name = os.getenv("OTEL_SERVICE_NAME")
        service_namespace = os.getenv("OTEL_SERVICE_NAMESPACE")
        if service_name:
            data["service_name"] = service_name
        if service_namespace:
            data["service_namespace"] = service_namespace

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            data["resource_attributes"] = {
                **data.get("resource_attributes", {}),
                **parse_resource_attributes(resource_env),
            }

        # A configured endpoint turns its exporter on.
        if data.get("otlp_traces_endpoint"):
            data["enable_tracing"] = True
        if data.get("otlp_metrics_endpoint"):
            data["enable_metrics"] = True
        if data.get("otlp_logs_endpoint"):
            data["enable_logging"] = True

        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise telemetry subsystems lazily."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved


def shutdown_telemetry() -> None:
    """Flush and stop whatever :func:`init_telemetry` installed."""

    shutdown_tracing()
    shutdown_metrics()
