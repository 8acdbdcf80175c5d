"""Content-type lookup for uploads.

Extensions are matched case-insensitively. Host-supplied overrides win over
the standard ``mimetypes`` registry; unknown extensions fall back to
``application/octet-stream``.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if not extension.startswith("."):
        extension = "." + extension
    return extension


class MimeTypeLookup:
    """Maps file extensions to content types.

    Args:
        overrides: Extension to content-type pairs taking precedence over
            the standard registry, e.g. ``{".webp": "image/webp"}``. The
            leading dot is optional.
    """

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._overrides = {
            _normalize_extension(ext): content_type
            for ext, content_type in (overrides or {}).items()
            if ext.strip() and content_type.strip()
        }

    def content_type_for(self, extension: str | None) -> str:
        """Return the content type for an extension such as ".jpg" or "jpg"."""
        if not extension or not extension.strip(". "):
            return DEFAULT_CONTENT_TYPE
        extension = _normalize_extension(extension)
        if extension in self._overrides:
            return self._overrides[extension]
        guessed, _ = mimetypes.guess_type("file" + extension)
        return guessed or DEFAULT_CONTENT_TYPE
