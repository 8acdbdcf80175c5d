"""OpenTelemetry tracing configuration for s3vfs.

Tracing is off unless S3VFS_OTEL_ENABLED=1. Filesystem spans are emitted by
s3vfs.tracing.traced_fs_operation; this module only installs the provider.

Environment Variables:
    S3VFS_OTEL_ENABLED: "1" to enable tracing (default: disabled)
    S3VFS_REQUIRE_OTEL: "1" to raise if the provider cannot be installed
    S3VFS_OTEL_SERVICE_NAME: service.name resource attribute (default: "s3vfs")
    S3VFS_OTEL_EXPORTER: "otlp" or "console" (default: "otlp")
    S3VFS_OTEL_EXPORTER_OTLP_ENDPOINT: Collector endpoint (optional)
    S3VFS_OTEL_EXPORTER_OTLP_PROTOCOL: "grpc" or "http" (default: "grpc")
    S3VFS_OTEL_RESOURCE_ATTRS: Extra resource attributes as "k1=v1,k2=v2"
    S3VFS_OTEL_TEST_CAPTURE: "1" to record spans in memory (tests)

The OTLP exporters are installed with the "otlp" extra.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
    SpanProcessor,
)
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

logger = logging.getLogger(__name__)

S3VFS_OTEL_ENABLED_ENV = "S3VFS_OTEL_ENABLED"
S3VFS_REQUIRE_OTEL_ENV = "S3VFS_REQUIRE_OTEL"
S3VFS_OTEL_SERVICE_NAME_ENV = "S3VFS_OTEL_SERVICE_NAME"
S3VFS_OTEL_EXPORTER_ENV = "S3VFS_OTEL_EXPORTER"
S3VFS_OTEL_ENDPOINT_ENV = "S3VFS_OTEL_EXPORTER_OTLP_ENDPOINT"
S3VFS_OTEL_PROTOCOL_ENV = "S3VFS_OTEL_EXPORTER_OTLP_PROTOCOL"
S3VFS_OTEL_RESOURCE_ATTRS_ENV = "S3VFS_OTEL_RESOURCE_ATTRS"
S3VFS_OTEL_TEST_CAPTURE_ENV = "S3VFS_OTEL_TEST_CAPTURE"

_TRUE_VALUES = ("1", "true", "yes")

_provider: TracerProvider | None = None
_test_exporter: InMemorySpanExporter | None = None


class TracingConfigError(Exception):
    """Raised when S3VFS_REQUIRE_OTEL=1 and the provider cannot be installed."""


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class TracingSettings:
    """Tracing options read from the environment."""

    enabled: bool = False
    required: bool = False
    test_capture: bool = False
    service_name: str = "s3vfs"
    exporter: str = "otlp"
    endpoint: str | None = None
    protocol: str = "grpc"
    resource_attributes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TracingSettings:
        env = os.environ if environ is None else environ
        return cls(
            enabled=_flag(env, S3VFS_OTEL_ENABLED_ENV),
            required=_flag(env, S3VFS_REQUIRE_OTEL_ENV),
            test_capture=_flag(env, S3VFS_OTEL_TEST_CAPTURE_ENV),
            service_name=env.get(S3VFS_OTEL_SERVICE_NAME_ENV, "").strip() or "s3vfs",
            exporter=env.get(S3VFS_OTEL_EXPORTER_ENV, "").strip().lower() or "otlp",
            endpoint=env.get(S3VFS_OTEL_ENDPOINT_ENV, "").strip() or None,
            protocol=env.get(S3VFS_OTEL_PROTOCOL_ENV, "").strip().lower() or "grpc",
            resource_attributes=parse_resource_attributes(
                env.get(S3VFS_OTEL_RESOURCE_ATTRS_ENV, "")
            ),
        )


def parse_resource_attributes(raw: str) -> dict[str, str]:
    """Parse "k1=v1,k2=v2" into a dict, skipping malformed pairs."""
    attributes: dict[str, str] = {}
    for pair in raw.split(","):
        name, sep, value = pair.partition("=")
        if sep and name.strip():
            attributes[name.strip()] = value.strip()
    return attributes


def _otlp_exporter(settings: TracingSettings) -> SpanExporter:
    kwargs = {"endpoint": settings.endpoint} if settings.endpoint else {}
    if settings.protocol == "http":
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter as HTTPSpanExporter,
        )

        return HTTPSpanExporter(**kwargs)

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
        OTLPSpanExporter as GRPCSpanExporter,
    )

    return GRPCSpanExporter(**kwargs)


def _span_processor(settings: TracingSettings) -> SpanProcessor:
    global _test_exporter

    if settings.test_capture:
        _test_exporter = InMemorySpanExporter()
        return SimpleSpanProcessor(_test_exporter)
    if settings.exporter == "console":
        return SimpleSpanProcessor(ConsoleSpanExporter())
    return BatchSpanProcessor(_otlp_exporter(settings))


def is_tracing_enabled() -> bool:
    """Return True if S3VFS_OTEL_ENABLED is set."""
    return _flag(os.environ, S3VFS_OTEL_ENABLED_ENV)


def configure_tracing() -> bool:
    """Install the s3vfs TracerProvider if tracing is enabled.

    Idempotent. OpenTelemetry accepts one global provider per process, so
    later calls reuse the provider installed first.

    Returns:
        True if tracing is enabled and a provider is installed.

    Raises:
        TracingConfigError: If S3VFS_REQUIRE_OTEL=1 and installation fails.
    """
    global _provider

    settings = TracingSettings.from_env()
    if not settings.enabled:
        logger.debug("OpenTelemetry tracing disabled (%s not set)", S3VFS_OTEL_ENABLED_ENV)
        return False
    if _provider is not None:
        return True

    try:
        resource = Resource.create(
            {"service.name": settings.service_name, **settings.resource_attributes}
        )
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(_span_processor(settings))
        trace.set_tracer_provider(provider)
    except Exception as e:
        logger.error("Failed to configure OpenTelemetry tracing: %s", e)
        if settings.required:
            raise TracingConfigError(f"Tracing is required but could not start: {e}") from e
        return False

    _provider = provider
    logger.info(
        "OpenTelemetry tracing configured: service=%s exporter=%s",
        settings.service_name,
        "in-memory" if settings.test_capture else settings.exporter,
    )
    return True


def get_current_trace_id() -> str | None:
    """Return the active trace ID as 32 hex digits, or None outside a span."""
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return format(ctx.trace_id, "032x")


def get_test_spans() -> list[ReadableSpan]:
    """Return spans recorded by the in-memory exporter (empty without test capture)."""
    if _test_exporter is None:
        return []
    return list(_test_exporter.get_finished_spans())


def clear_test_spans() -> None:
    if _test_exporter is not None:
        _test_exporter.clear()


def reset_tracing() -> None:
    """Forget recorded spans between tests.

    The installed provider stays in place; OpenTelemetry cannot replace it.
    """
    clear_test_spans()
