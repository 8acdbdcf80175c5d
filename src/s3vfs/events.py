"""s3vfs lifecycle event dispatch.

Hosts register handlers per event kind (or for every kind). Handlers run
synchronously, in registration order, after the filesystem mutation they
describe has succeeded. A handler that raises propagates to the caller of
the filesystem operation; the mutation itself is not undone.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from s3vfs.models import FileEvent, FileEventKind

logger = logging.getLogger(__name__)

EventHandler = Callable[[FileEvent], None]


class FileSystemEvents:
    """Observer list for FileEvent notifications."""

    def __init__(self) -> None:
        self._handlers: list[tuple[FileEventKind | None, EventHandler]] = []
        self._lock = threading.Lock()

    def subscribe(self, kind: FileEventKind, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for one event kind.

        Returns:
            A callable that removes this registration.
        """
        return self._add(kind, handler)

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for every event kind."""
        return self._add(None, handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove every registration of a handler."""
        with self._lock:
            self._handlers = [entry for entry in self._handlers if entry[1] != handler]

    def _add(self, kind: FileEventKind | None, handler: EventHandler) -> Callable[[], None]:
        entry = (kind, handler)
        with self._lock:
            self._handlers.append(entry)

        def remove() -> None:
            with self._lock:
                if entry in self._handlers:
                    self._handlers.remove(entry)

        return remove

    def emit(
        self,
        kind: FileEventKind,
        source_path: str,
        destination_path: str | None = None,
    ) -> FileEvent:
        """Build an event and deliver it to the matching handlers."""
        event = FileEvent(kind=kind, source_path=source_path, destination_path=destination_path)
        with self._lock:
            handlers = [h for k, h in self._handlers if k is None or k is kind]

        logger.debug(
            "Emitting %s source=%s destination=%s to %d handler(s)",
            kind.value,
            source_path,
            destination_path,
            len(handlers),
        )
        for handler in handlers:
            handler(event)
        return event
