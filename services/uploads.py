"""Validation and storage of base64-encoded image uploads."""
from __future__ import annotations

import base64
import binascii
import re
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool

from config.settings import settings

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class UploadError(ValueError):
    """Raised when an image fails validation or cannot be stored."""


@dataclass
class DecodedImage:
    """An image that passed validation and is ready to be written."""

    question_id: str
    filename: str
    mime_type: str
    data: bytes
    is_attachment: bool = False


def sanitize_filename(filename: str, mime_type: str) -> str:
    """Keep the basename of ``filename`` in a safe character set, with an extension."""

    basename = re.split(r"[/\\]", filename)[-1]
    basename = _UNSAFE_CHARS.sub("_", basename).lstrip(".")
    if not basename:
        basename = f"image_{uuid.uuid4().hex[:12]}"
    if "." not in basename:
        basename = f"{basename}{EXTENSIONS.get(mime_type, '')}"
    return basename


def decode_image(
    question_id: str,
    filename: str,
    mime_type: str,
    data: str,
    is_attachment: bool = False,
) -> DecodedImage:
    if mime_type not in settings.ALLOWED_IMAGE_TYPES:
        raise UploadError(f"Invalid image type: {mime_type}")
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        raw = base64.b64decode(data)
    except (binascii.Error, ValueError) as exc:
        raise UploadError("Invalid image data") from exc
    if len(raw) > settings.MAX_IMAGE_BYTES:
        limit_mb = settings.MAX_IMAGE_BYTES // (1024 * 1024)
        raise UploadError(f"Image exceeds {limit_mb}MB limit")
    return DecodedImage(
        question_id=question_id,
        filename=sanitize_filename(filename, mime_type),
        mime_type=mime_type,
        data=raw,
        is_attachment=is_attachment,
    )


class UploadStore:
    """Session-scoped directory that receives uploaded files."""

    def __init__(self, session_id: str, root: Optional[Path] = None) -> None:
        base = root or Path(settings.UPLOAD_ROOT or tempfile.gettempdir())
        self._directory = base / f"{settings.UPLOAD_DIR_PREFIX}{session_id}"

    @property
    def directory(self) -> Path:
        return self._directory

    async def save(self, image: DecodedImage) -> Path:
        try:
            return await run_in_threadpool(self._write, image.filename, image.data)
        except OSError as exc:
            raise UploadError(f"Failed to save image: {exc.strerror or exc}") from exc

    def _write(self, filename: str, data: bytes) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        stem, dot, suffix = filename.rpartition(".")
        if not dot:
            stem, suffix = filename, ""
        candidate = self._directory / filename
        counter = 1
        while True:
            try:
                with open(candidate, "xb") as handle:
                    handle.write(data)
                return candidate
            except FileExistsError:
                candidate = self._directory / f"{stem}-{counter}{dot}{suffix}"
                counter += 1


__all__ = ["DecodedImage", "EXTENSIONS", "UploadError", "UploadStore", "decode_image", "sanitize_filename"]
