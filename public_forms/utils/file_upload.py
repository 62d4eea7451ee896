"""Helpers for selected upload files: size checks, opening, previews."""

from __future__ import annotations

import base64
import logging
import mimetypes
from os import SEEK_END
from pathlib import Path

from fastapi import UploadFile
from starlette.datastructures import Headers

logger = logging.getLogger(__name__)

PREVIEW_PLACEHOLDER = ""
MAX_PREVIEW_BYTES = 5 * 1024 * 1024


class PreviewError(Exception):
    """A local preview could not be generated."""


def get_upload_file_size(file: UploadFile) -> int:
    """Read size from the underlying file object without loading into memory."""
    stream = file.file
    original_pos = stream.tell()
    try:
        stream.seek(0, SEEK_END)
        return stream.tell()
    finally:
        stream.seek(original_pos)


def file_extension(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def read_upload_bytes(file: UploadFile) -> bytes:
    """Read the whole upload without consuming the stream."""
    try:
        file.file.seek(0)
        return file.file.read()
    finally:
        file.file.seek(0)


def open_upload(path: str | Path) -> UploadFile:
    """Wrap a local file as an UploadFile with a guessed content type."""
    path = Path(path)
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return UploadFile(
        filename=path.name,
        file=path.open("rb"),
        headers=Headers({"content-type": content_type}),
    )


def _read_preview(file: UploadFile) -> str:
    content_type = (file.content_type or "").lower()
    if not content_type.startswith(("image/", "video/")):
        raise PreviewError(f"No preview for content type '{content_type or 'unknown'}'")
    try:
        size = get_upload_file_size(file)
        if size > MAX_PREVIEW_BYTES:
            raise PreviewError("File too large to preview")
        data = read_upload_bytes(file)
    except (OSError, ValueError) as exc:
        raise PreviewError("Could not read file") from exc
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def build_file_preview(file: UploadFile | None, placeholder: str = PREVIEW_PLACEHOLDER) -> str:
    """Data URL preview of a selected file; the placeholder when none can be built."""
    if file is None:
        return placeholder
    try:
        return _read_preview(file)
    except PreviewError as exc:
        logger.debug("Preview unavailable: %s", exc)
        return placeholder
