"""
Telemetry Module.

Provides OpenTelemetry tracing with a no-op fallback when the SDK is not
installed or telemetry is disabled.

Usage:
    from src.common.telemetry import init_telemetry, get_tracer

    init_telemetry(service_name="basercms-mcp")

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("basercms.create") as span:
        span.set_attribute("entity.kind", "blog_post")
"""

from src.common.telemetry.setup import (
    TelemetryConfig,
    get_tracer,
    init_telemetry,
    is_telemetry_enabled,
    shutdown_telemetry,
)

__all__ = [
    "init_telemetry",
    "shutdown_telemetry",
    "get_tracer",
    "is_telemetry_enabled",
    "TelemetryConfig",
]
