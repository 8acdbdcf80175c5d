"""s3vfs filesystem OpenTelemetry tracing integration.

Provides the decorator that wraps every filesystem operation in a span.

Security:
    - Never export raw virtual paths or object keys in span attributes;
      paths are hashed with SHA256 for correlation
    - No credentials in any span attribute
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from opentelemetry import trace

from s3vfs.observability.tracing import is_tracing_enabled

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_TRACER_NAME = "s3vfs.fs"


def _path_sha256(path: str) -> str:
    return hashlib.sha256(path.encode("utf-8")).hexdigest()


def traced_fs_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace filesystem operations with OpenTelemetry.

    The decorated method's first positional argument, when it is a string,
    is treated as the virtual path and exported only as a hash.

    Args:
        operation: Operation name (e.g., "write_file", "delete_directory").

    Returns:
        Decorated function that emits OTel spans when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(self, *args, **kwargs)

            tracer = trace.get_tracer(_TRACER_NAME)
            with tracer.start_as_current_span(f"s3vfs.fs.{operation}") as span:
                store = getattr(self, "store", None)
                span.set_attribute("storage.backend", getattr(store, "backend_name", "unknown"))
                span.set_attribute("s3vfs.bucket", getattr(store, "bucket", "unknown"))
                if args and isinstance(args[0], str):
                    span.set_attribute("s3vfs.path_sha256", _path_sha256(args[0]))
                if len(args) > 1 and isinstance(args[1], str):
                    span.set_attribute("s3vfs.destination_path_sha256", _path_sha256(args[1]))

                try:
                    result = func(self, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                if result is not None:
                    _add_result_attributes(span, result)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any) -> None:
    """Add result-based attributes to span safely (sizes and counts only)."""
    try:
        from s3vfs.models import FileData

        if isinstance(result, FileData):
            span.set_attribute("s3vfs.file_length", result.length)
        elif isinstance(result, bool):
            span.set_attribute("s3vfs.exists", result)
        elif isinstance(result, list):
            span.set_attribute("s3vfs.entry_count", len(result))
    except Exception as e:
        logger.debug("Failed to add result attributes to span: %s", e)
