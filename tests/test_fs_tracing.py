"""Tests for filesystem operation spans.

Covers:
- One span per operation, named s3vfs.fs.<operation>
- Backend and bucket attributes; virtual paths exported only as SHA256
- Error attributes on failed operations
- No spans while tracing is disabled
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator

import pytest
from opentelemetry import trace

from s3vfs.errors import ObjectNotFoundError
from s3vfs.observability.tracing import (
    S3VFS_OTEL_ENABLED_ENV,
    S3VFS_OTEL_TEST_CAPTURE_ENV,
    TracingSettings,
    configure_tracing,
    get_current_trace_id,
    get_test_spans,
    parse_resource_attributes,
    reset_tracing,
)
from s3vfs.s3_filesystem import S3FileSystem


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


@pytest.fixture(autouse=True)
def reset_tracing_state() -> Iterator[None]:
    """Reset tracing state before and after each test."""
    reset_tracing()
    yield
    reset_tracing()


@pytest.fixture
def tracing_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable tracing with the in-memory exporter."""
    monkeypatch.setenv(S3VFS_OTEL_ENABLED_ENV, "1")
    monkeypatch.setenv(S3VFS_OTEL_TEST_CAPTURE_ENV, "1")
    assert configure_tracing() is True


def _spans_named(name: str) -> list:
    return [s for s in get_test_spans() if s.name == name]


class TestFilesystemSpans:
    """Spans emitted by S3FileSystem operations."""

    def test_write_file_span(self, tracing_enabled: None, fs: S3FileSystem) -> None:
        fs.write_file("~/upload/secret-report.pdf", b"%PDF")

        spans = _spans_named("s3vfs.fs.write_file")
        assert len(spans) == 1
        attrs = dict(spans[0].attributes or {})
        assert attrs["storage.backend"] == "memory"
        assert attrs["s3vfs.bucket"] == "test-bucket"
        assert attrs["s3vfs.path_sha256"] == _sha256("~/upload/secret-report.pdf")
        assert "s3vfs.destination_path_sha256" not in attrs

    def test_raw_paths_never_exported(self, tracing_enabled: None, fs: S3FileSystem) -> None:
        fs.write_file("~/upload/secret-report.pdf", b"%PDF")
        fs.copy_file("~/upload/secret-report.pdf", "~/archive/secret-report.pdf")

        for span in get_test_spans():
            for value in (span.attributes or {}).values():
                assert "secret-report" not in str(value)

    def test_copy_span_hashes_destination(self, tracing_enabled: None, fs: S3FileSystem) -> None:
        fs.write_file("~/a.txt", b"a")
        fs.copy_file("~/a.txt", "~/b.txt")

        (span,) = _spans_named("s3vfs.fs.copy_file")
        assert span.attributes["s3vfs.destination_path_sha256"] == _sha256("~/b.txt")

    def test_result_attributes(self, tracing_enabled: None, fs: S3FileSystem) -> None:
        fs.write_file("~/upload/a.txt", b"abc")
        fs.write_file("~/upload/b.txt", b"de")

        fs.get_files("~/upload")
        fs.get_file("~/upload/a.txt")
        fs.file_exists("~/upload/b.txt")

        assert _spans_named("s3vfs.fs.get_files")[0].attributes["s3vfs.entry_count"] == 2
        assert _spans_named("s3vfs.fs.get_file")[0].attributes["s3vfs.file_length"] == 3
        assert _spans_named("s3vfs.fs.file_exists")[0].attributes["s3vfs.exists"] is True

    def test_error_span(self, tracing_enabled: None, fs: S3FileSystem) -> None:
        with pytest.raises(ObjectNotFoundError):
            fs.get_file("~/missing.txt")

        (span,) = _spans_named("s3vfs.fs.get_file")
        assert span.attributes["error"] is True
        assert span.attributes["error.type"] == "ObjectNotFoundError"

    def test_recursive_delete_is_one_span(self, tracing_enabled: None, fs: S3FileSystem) -> None:
        fs.create_directory("~/site")
        fs.create_directory("~/site/a")
        fs.write_file("~/site/a/f.txt", b"f")

        fs.delete_directory("~/site")

        assert len(_spans_named("s3vfs.fs.delete_directory")) == 1
        assert _spans_named("s3vfs.fs.delete_file") == []


class TestTracingDisabled:
    """Operations run untraced when tracing is off."""

    def test_no_spans_by_default(self, fs: S3FileSystem) -> None:
        assert configure_tracing() is False

        fs.write_file("~/upload/a.txt", b"a")
        fs.get_files("~/upload")

        assert get_test_spans() == []


class TestTraceCorrelation:
    """Trace IDs for log correlation."""

    def test_trace_id_inside_span(self, tracing_enabled: None) -> None:
        assert get_current_trace_id() is None

        with trace.get_tracer("s3vfs.tests").start_as_current_span("outer"):
            trace_id = get_current_trace_id()

        assert trace_id is not None
        assert len(trace_id) == 32
        int(trace_id, 16)


class TestTracingSettings:
    """Settings parsed from S3VFS_OTEL_* variables."""

    def test_defaults(self) -> None:
        settings = TracingSettings.from_env({})

        assert settings.enabled is False
        assert settings.exporter == "otlp"
        assert settings.protocol == "grpc"
        assert settings.service_name == "s3vfs"
        assert settings.endpoint is None

    def test_from_environment(self) -> None:
        settings = TracingSettings.from_env(
            {
                "S3VFS_OTEL_ENABLED": "true",
                "S3VFS_OTEL_EXPORTER": "Console",
                "S3VFS_OTEL_EXPORTER_OTLP_ENDPOINT": "http://collector:4318",
                "S3VFS_OTEL_EXPORTER_OTLP_PROTOCOL": "http",
                "S3VFS_OTEL_SERVICE_NAME": "cms-uploads",
                "S3VFS_OTEL_RESOURCE_ATTRS": "deployment.environment=prod,team=web",
            }
        )

        assert settings.enabled is True
        assert settings.exporter == "console"
        assert settings.endpoint == "http://collector:4318"
        assert settings.protocol == "http"
        assert settings.service_name == "cms-uploads"
        assert settings.resource_attributes == {
            "deployment.environment": "prod",
            "team": "web",
        }

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("", {}),
            ("a=1", {"a": "1"}),
            (" a = 1 , b=2 ", {"a": "1", "b": "2"}),
            ("novalue,=x,c=3", {"c": "3"}),
            ("url=http://h/?q=1", {"url": "http://h/?q=1"}),
        ],
    )
    def test_parse_resource_attributes(self, raw: str, expected: dict[str, str]) -> None:
        assert parse_resource_attributes(raw) == expected
