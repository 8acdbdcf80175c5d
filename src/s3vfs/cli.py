"""s3vfs CLI - command-line access to a bucket through the virtual filesystem.

Usage:
    python -m s3vfs ls PATH
    python -m s3vfs dirs PATH
    python -m s3vfs stat PATH
    python -m s3vfs exists PATH [--directory]
    python -m s3vfs put LOCAL PATH
    python -m s3vfs get PATH LOCAL
    python -m s3vfs cat PATH
    python -m s3vfs rm PATH
    python -m s3vfs cp SRC DST
    python -m s3vfs mv SRC DST
    python -m s3vfs mkdir PATH
    python -m s3vfs rmdir PATH
    python -m s3vfs mvdir SRC DST

Configuration is read from S3VFS_* environment variables (see s3vfs.config).
Results are printed as JSON with deterministic key ordering.

Exit codes:
    0: Success
    1: Failure (configuration, not found, store error, internal error)
    2: Unsupported operation
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import tempfile
from collections.abc import Callable
from typing import Any

from s3vfs.errors import (
    ConfigurationError,
    ConfigurationMissingError,
    FileSystemError,
    ObjectNotFoundError,
    StoreRequestFailedError,
    UnsupportedOperationError,
)
from s3vfs.s3_filesystem import S3FileSystem, create_filesystem


def _output_json(data: dict[str, Any]) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def _error_code(error: FileSystemError) -> str:
    if isinstance(error, ConfigurationMissingError):
        return "CONFIGURATION_MISSING"
    if isinstance(error, ConfigurationError):
        return "CONFIGURATION_INVALID"
    if isinstance(error, ObjectNotFoundError):
        return "NOT_FOUND"
    if isinstance(error, StoreRequestFailedError):
        return "STORE_REQUEST_FAILED"
    if isinstance(error, UnsupportedOperationError):
        return "UNSUPPORTED_OPERATION"
    return "FILESYSTEM_ERROR"


def _make_error_result(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}, "ok": False}


def cmd_ls(fs: S3FileSystem, args: argparse.Namespace) -> int:
    files = fs.get_files(args.path)
    _output_json({"files": [f.to_dict() for f in files], "ok": True})
    return 0


def cmd_dirs(fs: S3FileSystem, args: argparse.Namespace) -> int:
    directories = fs.get_directories(args.path)
    _output_json({"directories": [d.to_dict() for d in directories], "ok": True})
    return 0


def cmd_stat(fs: S3FileSystem, args: argparse.Namespace) -> int:
    _output_json({"file": fs.get_file(args.path).to_dict(), "ok": True})
    return 0


def cmd_exists(fs: S3FileSystem, args: argparse.Namespace) -> int:
    """Report existence; a store failure is reported, not hidden."""
    probe = fs.probe_directory(args.path) if args.directory else fs.probe_file(args.path)
    result: dict[str, Any] = {"exists": probe.exists, "ok": True, "status": probe.status.value}
    if probe.error is not None:
        result["error"] = {"code": _error_code(probe.error), "message": str(probe.error)}
    _output_json(result)
    return 0


def cmd_put(fs: S3FileSystem, args: argparse.Namespace) -> int:
    with open(args.local, "rb") as source:
        fs.write_file(args.path, source)
    _output_json({"ok": True, "written": args.path})
    return 0


def cmd_get(fs: S3FileSystem, args: argparse.Namespace) -> int:
    """Download into a temporary file beside LOCAL, then replace LOCAL.

    LOCAL is left untouched when the download fails.
    """
    directory = os.path.dirname(os.path.abspath(args.local))
    with tempfile.NamedTemporaryFile(
        "wb", dir=directory, prefix=".s3vfs-", suffix=".part", delete=False
    ) as sink:
        temp_path = sink.name
        try:
            written = fs.read_file_contents(args.path, sink)
        except BaseException:
            sink.close()
            os.unlink(temp_path)
            raise
    os.replace(temp_path, args.local)
    _output_json({"bytes": written, "ok": True})
    return 0


def cmd_cat(fs: S3FileSystem, args: argparse.Namespace) -> int:
    fs.read_file_contents(args.path, sys.stdout.buffer)
    sys.stdout.buffer.flush()
    return 0


def cmd_rm(fs: S3FileSystem, args: argparse.Namespace) -> int:
    fs.delete_file(args.path)
    _output_json({"deleted": args.path, "ok": True})
    return 0


def cmd_cp(fs: S3FileSystem, args: argparse.Namespace) -> int:
    fs.copy_file(args.source, args.destination)
    _output_json({"copied": [args.source, args.destination], "ok": True})
    return 0


def cmd_mv(fs: S3FileSystem, args: argparse.Namespace) -> int:
    fs.move_file(args.source, args.destination)
    _output_json({"moved": [args.source, args.destination], "ok": True})
    return 0


def cmd_mkdir(fs: S3FileSystem, args: argparse.Namespace) -> int:
    fs.create_directory(args.path)
    _output_json({"created": args.path, "ok": True})
    return 0


def cmd_rmdir(fs: S3FileSystem, args: argparse.Namespace) -> int:
    fs.delete_directory(args.path)
    _output_json({"deleted": args.path, "ok": True})
    return 0


COMMANDS: dict[str, Callable[[S3FileSystem, argparse.Namespace], int]] = {
    "ls": cmd_ls,
    "dirs": cmd_dirs,
    "stat": cmd_stat,
    "exists": cmd_exists,
    "put": cmd_put,
    "get": cmd_get,
    "cat": cmd_cat,
    "rm": cmd_rm,
    "cp": cmd_cp,
    "mv": cmd_mv,
    "mkdir": cmd_mkdir,
    "rmdir": cmd_rmdir,
}

# Commands rejected before any configuration is read
UNSUPPORTED_COMMANDS: dict[str, str] = {"mvdir": "move_directory"}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="s3vfs",
        description="s3vfs - virtual filesystem over an S3-compatible bucket",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    for name, help_text in [
        ("ls", "List files in a directory"),
        ("dirs", "List sub-directories of a directory"),
        ("stat", "Show file metadata"),
        ("cat", "Write file content to stdout"),
        ("rm", "Delete a file"),
        ("mkdir", "Create a directory"),
        ("rmdir", "Delete a directory and everything below it"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("path", metavar="PATH", help="Virtual path, e.g. ~/upload/photo.jpg")

    exists_parser = subparsers.add_parser(
        "exists", help="Check whether a file or directory exists"
    )
    exists_parser.add_argument("path", metavar="PATH")
    exists_parser.add_argument(
        "--directory",
        action="store_true",
        default=False,
        help="Check for a directory instead of a file",
    )

    put_parser = subparsers.add_parser("put", help="Upload a local file")
    put_parser.add_argument("local", metavar="LOCAL", help="Local file to upload")
    put_parser.add_argument("path", metavar="PATH", help="Destination virtual path")

    get_parser = subparsers.add_parser("get", help="Download a file")
    get_parser.add_argument("path", metavar="PATH", help="Virtual path to download")
    get_parser.add_argument("local", metavar="LOCAL", help="Local destination file")

    for name, help_text in [
        ("cp", "Copy a file"),
        ("mv", "Move a file"),
        ("mvdir", "Move a directory (not supported)"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("source", metavar="SRC")
        sub.add_argument("destination", metavar="DST")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Failure / internal error
        2: Unsupported operation
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command in UNSUPPORTED_COMMANDS:
            raise UnsupportedOperationError(UNSUPPORTED_COMMANDS[args.command])
        fs = create_filesystem()
        return COMMANDS[args.command](fs, args)
    except UnsupportedOperationError as e:
        _output_json(_make_error_result(_error_code(e), str(e)))
        return 2
    except FileSystemError as e:
        _output_json(_make_error_result(_error_code(e), str(e)))
        return 1
    except OSError as e:
        _output_json(_make_error_result("LOCAL_IO_ERROR", str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
