"""Scoped staging of uploaded files on local disk.

Files are written to the upload folder only for as long as the notification
dispatches that reference them are running; leaving the ``with`` block
removes every staged file, including when the block raises.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from careers.services.draft_service import Attachment
from careers.utils.auth import now_millis

_LOGGER = logging.getLogger(__name__)

MAX_FILE_BYTES = 15 * 1024 * 1024  # 15 MB per file
MAX_APPLICATION_FILES = 6


class UploadRejected(Exception):
    """Raised when an upload breaks the count or size limits."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def is_present(storage: Optional[FileStorage]) -> bool:
    """Return True when a multipart field actually carries a file."""
    return storage is not None and bool(storage.filename)


def _stored_name(original: str, index: int) -> str:
    safe = secure_filename(original) or "upload"
    return f"{now_millis()}-{index}-{safe}"


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        _LOGGER.warning("Could not delete staged upload %s", path, exc_info=True)


@contextmanager
def staged_uploads(
    files: Iterable[Optional[FileStorage]],
    upload_dir: Optional[str] = None,
    *,
    max_files: int = MAX_APPLICATION_FILES,
    max_bytes: int = MAX_FILE_BYTES,
) -> Iterator[List[Attachment]]:
    """Save uploads to disk for the duration of the block and delete them afterwards."""
    present = [storage for storage in files if is_present(storage)]
    if len(present) > max_files:
        raise UploadRejected(f"Please attach at most {max_files} files.")

    target_dir = upload_dir or tempfile.gettempdir()
    os.makedirs(target_dir, exist_ok=True)

    staged: List[Attachment] = []
    written: List[str] = []
    try:
        for index, storage in enumerate(present):
            path = os.path.join(target_dir, _stored_name(storage.filename, index))
            # Tracked before saving so a partial write is removed too.
            written.append(path)
            storage.save(path)
            staged.append(
                Attachment(
                    storage_path=path,
                    original_name=storage.filename,
                    mime_type=storage.mimetype or "application/octet-stream",
                    size=os.path.getsize(path),
                )
            )
            if staged[-1].size > max_bytes:
                raise UploadRejected(
                    f"{storage.filename} is larger than {max_bytes // (1024 * 1024)} MB.",
                    status_code=413,
                )
        yield staged
    finally:
        for path in written:
            _remove(path)
