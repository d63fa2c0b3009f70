"""Local file reading for the upload helpers."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from utopia.errors import FileMissingError, FilenameRequiredError, PathIsDirectoryError

log = logging.getLogger(__name__)


def encode_file(filename: str | Path) -> str:
    """Read *filename* and return its content as base64 text."""
    if not filename:
        raise FilenameRequiredError("filename parameter is required")
    path = Path(filename)
    if not path.exists():
        raise FileMissingError(f"file does not exist: {path}")
    if path.is_dir():
        raise PathIsDirectoryError(f"path is a directory: {path}")
    data = path.read_bytes()
    log.debug("encoded %s (%d bytes)", path, len(data))
    return base64.b64encode(data).decode("ascii")


def resolve_upload(filename: str | Path | None, data: str | None) -> tuple[str, str]:
    """Return ``(name, base64 data)`` for an upload.

    *data* is used as is when given; otherwise the file is read. The name sent
    to the server is the file's base name.
    """
    if not filename:
        raise FilenameRequiredError("filename parameter is required")
    if data:
        return Path(filename).name, data
    return Path(filename).name, encode_file(filename)
