"""Attachment storage on local disk.

Records only ever hold the returned URLs; the bytes live here.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

from shopdesk.app.core.config import settings
from shopdesk.app.core.exceptions import UnexpectedError, ValidationError
from shopdesk.app.services.activity_log import LogSink, report_failure

logger = logging.getLogger(__name__)

_SAFE_SUFFIX = re.compile(r"\.[A-Za-z0-9]{1,10}")


class FileStorageService:
    """Store uploaded files and hand back absolute URLs for them."""

    def __init__(self, root: str | None = None) -> None:
        self._root = Path(root or settings.UPLOAD_DIR)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def save(self, relative_path: str, data: bytes) -> str:
        """Persist *data* under *relative_path* and return the full path."""
        dest = self._root / relative_path
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        return str(dest)

    def url(self, relative_path: str) -> str:
        base = settings.PUBLIC_BASE_URL.rstrip("/")
        return f"{base}/uploads/{relative_path}"

    def save_upload(self, original_filename: str | None, data: bytes) -> str:
        """Store one upload under a fresh unique name, keeping its extension."""
        suffix = Path(original_filename or "").suffix
        if not _SAFE_SUFFIX.fullmatch(suffix):
            suffix = ""
        name = f"{uuid.uuid4()}{suffix.lower()}"
        self.save(name, data)
        return self.url(name)


def store_uploads(
    storage: FileStorageService,
    files: Sequence[tuple[str | None, BinaryIO]],
    *,
    sink: LogSink | None = None,
) -> list[str]:
    """Save a batch of ``(filename, stream)`` pairs and return their URLs.

    The batch is capped at ``UPLOAD_MAX_FILES`` files of at most
    ``UPLOAD_MAX_BYTES`` each. The count is checked before any stream is read,
    and each file is read and written before the next one is touched. Files
    saved before a failure are kept. Failures are reported to *sink*.
    """
    urls: list[str] = []
    try:
        if len(files) > settings.UPLOAD_MAX_FILES:
            raise ValidationError(
                f"Too many files: at most {settings.UPLOAD_MAX_FILES} per upload"
            )
        for filename, stream in files:
            # One byte past the limit is enough to detect an oversized file
            data = stream.read(settings.UPLOAD_MAX_BYTES + 1)
            if len(data) > settings.UPLOAD_MAX_BYTES:
                raise ValidationError(
                    f"File '{filename}' exceeds the "
                    f"{settings.UPLOAD_MAX_BYTES} byte limit"
                )
            urls.append(storage.save_upload(filename, data))
    except ValidationError as exc:
        if sink is not None:
            report_failure(sink, "store upload", exc, related_item_type="upload")
        raise
    except OSError as exc:
        if sink is not None:
            report_failure(sink, "store upload", exc, related_item_type="upload")
        raise UnexpectedError("Failed to store upload") from exc

    logger.info("Stored %d uploaded files", len(urls))
    return urls
