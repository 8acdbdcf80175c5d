"""Mapping between host virtual paths and object store keys.

Virtual paths are rooted with "~/" and use "/" separators. Object keys are
the same path with the root marker and any leading "/" removed. A directory
has no native representation in the store: it exists while a zero-byte
sentinel object lives under its key.
"""

from __future__ import annotations

VIRTUAL_ROOT = "~/"
DELIMITER = "/"
SENTINEL_NAME = "__empty"


def to_store_key(virtual_path: str) -> str:
    """Convert a virtual path into an object key.

    >>> to_store_key("~/upload/28/photo.jpg")
    'upload/28/photo.jpg'
    """
    if virtual_path.startswith(VIRTUAL_ROOT):
        virtual_path = virtual_path[len(VIRTUAL_ROOT) :]
    elif virtual_path == "~":
        virtual_path = ""
    return virtual_path.lstrip(DELIMITER)


def to_virtual_path(key: str) -> str:
    """Convert an object key back into a virtual path."""
    return VIRTUAL_ROOT + key


def directory_prefix(key: str) -> str:
    """Return the listing prefix for a directory key.

    The root directory maps to the empty prefix; every other directory gets
    exactly one trailing delimiter so listings stay inside it.
    """
    stripped = key.rstrip(DELIMITER)
    if not stripped:
        return ""
    return stripped + DELIMITER


def sentinel_key(key: str) -> str:
    """Return the key of the sentinel object marking a directory."""
    return directory_prefix(key) + SENTINEL_NAME


def is_sentinel_key(key: str) -> bool:
    return key == SENTINEL_NAME or key.endswith(DELIMITER + SENTINEL_NAME)


def name_from_key(key: str) -> str:
    """Return the last non-empty segment of a key."""
    stripped = key.rstrip(DELIMITER)
    return stripped[stripped.rfind(DELIMITER) + 1 :]


def extension_of(path: str) -> str | None:
    """Return the extension of the last path segment, including the dot.

    >>> extension_of("~/upload/photo.JPG")
    '.JPG'
    """
    name = name_from_key(path)
    dot = name.rfind(".")
    if dot == -1 or dot == len(name) - 1:
        return None
    return name[dot:]
