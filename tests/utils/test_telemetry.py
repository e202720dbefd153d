"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from fetchtime.utils.telemetry import (
    ATTR_ERROR_CODE,
    ATTR_METHOD,
    ATTR_REQUEST_ID,
    ATTR_TOOL_NAME,
    SPAN_DISPATCH,
    _INSTRUMENTATION_NAME,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("fetchtime.server.dispatcher"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span_accepts_attributes(self) -> None:
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span(SPAN_DISPATCH) as span:
            span.set_attribute(ATTR_METHOD, "ping")
            span.set_attribute(ATTR_ERROR_CODE, -32601)


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_configures_with_console(self) -> None:
        try:
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        previous = trace.get_tracer_provider()
        try:
            configure_telemetry(service_name="test-svc", export_to_console=True)
            provider = trace.get_tracer_provider()
            assert provider is not previous or isinstance(provider, TracerProvider)
        finally:
            trace.set_tracer_provider(previous)

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(otlp_endpoint="http://localhost:4317")


class TestAttributeConstants:
    @pytest.mark.parametrize(
        "name", [SPAN_DISPATCH, ATTR_METHOD, ATTR_REQUEST_ID, ATTR_TOOL_NAME, ATTR_ERROR_CODE]
    )
    def test_namespaced(self, name: str) -> None:
        assert name.startswith("fetchtime.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "fetchtime"
