"""
OpenTelemetry Setup and Configuration.

Handles initialization of the tracer provider and exporter.
Supports graceful degradation when OTEL dependencies are not installed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Track whether OTEL is available
_otel_available = False
_telemetry_initialized = False

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    _otel_available = True
except ImportError:
    logger.debug("OpenTelemetry not installed, telemetry will be disabled")


TELEMETRY_ENV_VAR = "BASERCMS_TELEMETRY_ENABLED"


@dataclass
class TelemetryConfig:
    """Configuration for telemetry setup."""

    service_name: str = "basercms-mcp"
    service_version: str = "0.1.0"
    environment: str = field(default_factory=lambda: os.getenv("BASERCMS_ENV", "development"))

    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    otlp_insecure: bool = True

    resource_attributes: dict[str, str] = field(default_factory=dict)


# Global state
_config: TelemetryConfig | None = None
_tracer_provider: Any = None


def init_telemetry(
    service_name: str | None = None,
    otlp_endpoint: str | None = None,
    config: TelemetryConfig | None = None,
) -> bool:
    """
    Initialize OpenTelemetry tracing.

    Call this once at application startup. Can be disabled by setting
    BASERCMS_TELEMETRY_ENABLED=false.

    Returns:
        True if telemetry was initialized, False if OTEL not available or disabled
    """
    global _telemetry_initialized, _config, _tracer_provider

    if _telemetry_initialized:
        logger.debug("Telemetry already initialized")
        return _otel_available

    if _is_telemetry_disabled_by_env():
        logger.info(f"Telemetry disabled via {TELEMETRY_ENV_VAR}")
        _telemetry_initialized = True
        return False

    if not _otel_available:
        logger.warning("OpenTelemetry not installed, telemetry disabled")
        _telemetry_initialized = True
        return False

    _config = config or TelemetryConfig()
    if service_name:
        _config.service_name = service_name
    if otlp_endpoint:
        _config.otlp_endpoint = otlp_endpoint

    try:
        resource_attrs = {
            SERVICE_NAME: _config.service_name,
            SERVICE_VERSION: _config.service_version,
            "deployment.environment": _config.environment,
        }
        resource_attrs.update(_config.resource_attributes)
        resource = Resource.create(resource_attrs)

        _tracer_provider = TracerProvider(resource=resource)
        span_exporter = OTLPSpanExporter(
            endpoint=_config.otlp_endpoint,
            insecure=_config.otlp_insecure,
        )
        _tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
        trace.set_tracer_provider(_tracer_provider)
        logger.info(f"Tracing initialized, exporting to {_config.otlp_endpoint}")

        _telemetry_initialized = True
        return True

    except Exception as e:
        logger.error(f"Failed to initialize telemetry: {e}")
        _telemetry_initialized = True
        return False


def shutdown_telemetry() -> None:
    """Flush pending spans and shut the tracer provider down."""
    global _tracer_provider, _telemetry_initialized

    if not _otel_available or not _telemetry_initialized:
        return

    try:
        if _tracer_provider:
            _tracer_provider.force_flush(timeout_millis=5000)
            _tracer_provider.shutdown()
            logger.debug("Tracer provider shut down")

        _telemetry_initialized = False

    except Exception as e:
        logger.warning(f"Error during telemetry shutdown: {e}")


def _is_telemetry_disabled_by_env() -> bool:
    """Check if telemetry is disabled via environment variable."""
    telemetry_enabled = os.getenv(TELEMETRY_ENV_VAR, "true").lower()
    return telemetry_enabled in ("false", "0", "no", "off")


def get_tracer(name: str = "basercms") -> Any:
    """
    Get a tracer for creating spans.

    Args:
        name: Tracer name (typically module or component name)

    Returns:
        OpenTelemetry Tracer or NoOpTracer if OTEL not available or disabled
    """
    if not _otel_available or _is_telemetry_disabled_by_env():
        return _NoOpTracer()

    return trace.get_tracer(name)


def is_telemetry_enabled() -> bool:
    """Check if telemetry is available and initialized."""
    return _otel_available and _telemetry_initialized


# === No-Op Implementations for Graceful Degradation ===


class _NoOpSpan:
    """No-op span for when OTEL is not available."""

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_attributes(self, attributes: dict[str, Any]) -> None:
        pass

    def add_event(self, name: str, attributes: dict[str, Any] | None = None) -> None:
        pass

    def record_exception(self, exception: Exception) -> None:
        pass

    def set_status(self, status: Any) -> None:
        pass

    def __enter__(self) -> _NoOpSpan:
        return self

    def __exit__(self, *args: Any) -> None:
        pass


class _NoOpTracer:
    """No-op tracer for when OTEL is not available."""

    def start_as_current_span(self, name: str, **kwargs: Any) -> _NoOpSpan:
        return _NoOpSpan()

    def start_span(self, name: str, **kwargs: Any) -> _NoOpSpan:
        return _NoOpSpan()
