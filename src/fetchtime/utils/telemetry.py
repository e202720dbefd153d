"""OpenTelemetry tracing helpers for FetchTime.

The dispatcher calls :func:`get_tracer` unconditionally. Until
:func:`configure_telemetry` installs an SDK tracer provider, the API hands
back no-op spans, so untraced deployments pay nothing.

Usage::

    from fetchtime.utils.telemetry import ATTR_METHOD, SPAN_DISPATCH, get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span(SPAN_DISPATCH) as span:
        span.set_attribute(ATTR_METHOD, request.method or "")

Real export needs the ``otel`` extra: ``pip install fetchtime-mcp[otel]``.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Span names and attribute keys
# ---------------------------------------------------------------------------

SPAN_DISPATCH = "fetchtime.dispatch"

ATTR_METHOD = "fetchtime.method"
ATTR_REQUEST_ID = "fetchtime.request.id"
ATTR_TOOL_NAME = "fetchtime.tool.name"
ATTR_ERROR_CODE = "fetchtime.error.code"

_INSTRUMENTATION_NAME = "fetchtime"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name*; a no-op tracer until configured."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "fetchtime-mcp",
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``fetchtime-mcp[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        If ``True``, export spans as JSON to stdout. Never enable this for the
        stdio transport, whose stdout carries the protocol.
    otlp_endpoint:
        If set, export spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install fetchtime-mcp[otel]"
        )
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)

    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter()))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install fetchtime-mcp[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
