"""s3vfs observability module.

Provides the OpenTelemetry tracing setup used by the filesystem spans.
"""

from s3vfs.observability.tracing import configure_tracing, get_current_trace_id

__all__ = ["configure_tracing", "get_current_trace_id"]
