"""Upload storage: collision-resistant file naming, size-capped writes and best-effort deletion."""

import logging
import os
import re
import time
from pathlib import Path
from typing import BinaryIO

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

# Characters kept in stored names; everything else becomes "_".
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
# Leading "<epoch-millis>-" added by stored_name().
_TIMESTAMP_PREFIX = re.compile(r"^\d+-")

CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(Exception):
    """Raised when an uploaded file exceeds the per-file size ceiling."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        self.message = message
        self.filename = filename
        super().__init__(message)


class TooManyFilesError(Exception):
    """Raised when more parts are sent for a field than it accepts."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def sanitize_filename(original: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with an underscore."""
    return _UNSAFE_CHARS.sub("_", original or "")


def stored_name(original: str, timestamp_ms: int | None = None) -> str:
    """Return "<epoch-millis>-<sanitized original>"."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{timestamp_ms}-{sanitize_filename(original)}"


def original_name(filename: str) -> str:
    """Strip the timestamp prefix from a stored name to recover the display name."""
    return _TIMESTAMP_PREFIX.sub("", filename, count=1)


def ensure_upload_dir(upload_dir: str | Path) -> Path:
    """Create the upload directory if it is absent and return it."""
    path = Path(upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_stored_path(upload_dir: str | Path, filename: str) -> Path | None:
    """Path of a stored file, or None if the name would escape the upload directory."""
    base = Path(upload_dir).resolve()
    candidate = (base / filename).resolve()
    if candidate.parent != base:
        return None
    return candidate


def _create_unique(directory: Path, original: str) -> tuple[Path, BinaryIO]:
    """
    Create and open the first free "<millis>-<name>" in directory.

    Uses exclusive creation, so a name taken by a concurrent upload is skipped
    rather than reused.
    """
    timestamp_ms = time.time_ns() // 1_000_000
    while True:
        destination = directory / stored_name(original, timestamp_ms)
        try:
            return destination, destination.open("xb")
        except FileExistsError:
            timestamp_ms += 1


async def save_upload(upload: UploadFile, upload_dir: str | Path, max_bytes: int) -> str:
    """
    Stream an uploaded file into the upload directory and return its stored name.

    Raises UploadTooLargeError once more than max_bytes have been read; the
    partial file is removed before raising. Disk writes run in the threadpool.
    """
    directory = ensure_upload_dir(upload_dir)
    destination, out = _create_unique(directory, upload.filename or "file")
    written = 0
    try:
        with out:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(
                        f"File too large: {upload.filename!r} exceeds "
                        f"{max_bytes // (1024 * 1024)} MB.",
                        filename=upload.filename,
                    )
                await run_in_threadpool(out.write, chunk)
    except BaseException:
        destination.unlink(missing_ok=True)
        raise
    logger.debug("Stored upload %s as %s (%s bytes)", upload.filename, destination.name, written)
    return destination.name


async def save_uploads(
    uploads: list[UploadFile],
    upload_dir: str | Path,
    max_bytes: int,
) -> list[str]:
    """
    Store several uploads; all-or-nothing.

    If any file fails, the files already stored by this call are deleted
    before the error propagates.
    """
    stored: list[str] = []
    try:
        for upload in uploads:
            stored.append(await save_upload(upload, upload_dir, max_bytes))
    except BaseException:
        delete_stored_files(stored, upload_dir)
        raise
    return stored


def delete_stored_file(filename: str, upload_dir: str | Path) -> bool:
    """
    Delete one stored file. Best-effort: a missing file or OS error is logged and
    reported as False, never raised.
    """
    try:
        path = resolve_stored_path(upload_dir, filename)
        if path is None:
            logger.warning("Refusing to delete %r: outside upload directory", filename)
            return False
        path.unlink()
    except FileNotFoundError:
        logger.info("Stored file already missing: %s", filename)
        return False
    except (OSError, ValueError) as e:
        logger.error("Error deleting stored file %s: %s", filename, e)
        return False
    return True


def delete_stored_files(filenames: list[str], upload_dir: str | Path) -> int:
    """Delete each stored file independently; return how many were removed."""
    return sum(1 for name in filenames if name and delete_stored_file(name, upload_dir))


def upload_dir_status(upload_dir: str | Path) -> str:
    """'writable', 'read-only' or 'missing' for the upload directory."""
    path = Path(upload_dir)
    if not path.is_dir():
        return "missing"
    return "writable" if os.access(path, os.W_OK | os.X_OK) else "read-only"
