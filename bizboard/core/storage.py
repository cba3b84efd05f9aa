"""
File storage for uploads.

Objects live under ``<root>/<bucket>/<path>`` on the local filesystem and are
served read-only by the API under a public base URL. Object paths are
relative, use forward slashes and may not climb out of their bucket.
"""

from __future__ import annotations

import os
import time
from pathlib import Path, PurePosixPath
from typing import Optional

from bizboard.core.errors import BadRequestError, ConflictError, StorageError
from bizboard.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_BUCKET = "assets"


def normalize_object_path(path: str) -> str:
    """Return a clean relative object path.

    Raises:
        BadRequestError: For empty, absolute or parent-relative paths.
    """
    cleaned = (path or "").strip().replace("\\", "/")
    if not cleaned:
        raise BadRequestError("חסר נתיב")
    pure = PurePosixPath(cleaned)
    if pure.is_absolute() or any(part == ".." for part in pure.parts):
        raise BadRequestError("נתיב לא חוקי")
    parts = [part for part in pure.parts if part not in ("", ".")]
    if not parts:
        raise BadRequestError("נתיב לא חוקי")
    return "/".join(parts)


def build_object_path(prefix: str, filename: str, stem: str, now_ms: Optional[int] = None) -> str:
    """Name an object ``<prefix>/<stem>-<epoch_ms>.<ext>`` keeping the upload's extension."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ext = PurePosixPath(filename or "").suffix.lstrip(".").lower() or "bin"
    return f"{prefix.strip('/')}/{stem}-{now_ms}.{ext}"


class LocalFileStorage:
    """Bucketed object storage on the local filesystem."""

    def __init__(self, root: str, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _bucket_dir(self, bucket: str) -> Path:
        bucket = (bucket or DEFAULT_BUCKET).strip()
        if not bucket or "/" in bucket or "\\" in bucket or bucket in (".", ".."):
            raise BadRequestError("נתיב לא חוקי")
        return self.root / bucket

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{normalize_object_path(path)}"

    def exists(self, bucket: str, path: str) -> bool:
        return (self._bucket_dir(bucket) / normalize_object_path(path)).exists()

    def save(self, bucket: str, path: str, data: bytes, upsert: bool = False) -> str:
        """Write ``data`` and return the normalized object path.

        Raises:
            ConflictError: If the object exists and ``upsert`` is false.
            StorageError: If the filesystem write fails.
        """
        object_path = normalize_object_path(path)
        target = self._bucket_dir(bucket) / object_path
        if target.exists() and not upsert:
            raise ConflictError("הקובץ כבר קיים")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp = target.with_name(f".{target.name}.part")
            tmp.write_bytes(data)
            os.replace(tmp, target)
        except OSError as e:
            logger.error(f"Failed to store object {bucket}/{object_path}: {e}", exc_info=True)
            raise StorageError() from e
        logger.info(f"Stored object {bucket}/{object_path} ({len(data)} bytes)")
        return object_path

    def read(self, bucket: str, path: str) -> bytes:
        return (self._bucket_dir(bucket) / normalize_object_path(path)).read_bytes()
