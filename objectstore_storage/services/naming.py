"""Unique file naming for uploads."""

from __future__ import annotations

import posixpath
import re
from datetime import datetime, timezone
from typing import Callable

from objectstore_storage.core.storage import ExistsCheck, StoredFile


def _join(*parts: str) -> str:
    cleaned = [part.replace("\\", "/").strip("/") for part in parts if part]
    leading = "/" if parts and parts[0].startswith("/") else ""
    return leading + "/".join(part for part in cleaned if part)


def sanitize_stem(stem: str) -> str:
    """Return an ASCII-safe file stem."""

    ascii_value = stem.encode("ascii", errors="ignore").decode("ascii")
    sanitized = re.sub(r"[^A-Za-z0-9._-]+", "-", ascii_value)
    sanitized = re.sub(r"-+", "-", sanitized).strip("-.")
    return sanitized or "file"


class DatedUniqueFileName:
    """Place uploads under ``YYYY/MM`` and suffix ``-N`` until the name is free."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def target_dir(self, base_dir: str) -> str:
        now = self._clock()
        return _join(base_dir, f"{now.year:04d}", f"{now.month:02d}")

    def __call__(self, file: StoredFile, target_dir: str, exists: ExistsCheck) -> str:
        basename = posixpath.basename(file.name.replace("\\", "/"))
        stem, ext = posixpath.splitext(basename)
        stem = sanitize_stem(stem)
        ext = ext.lower()

        attempt = 0
        while True:
            suffix = f"-{attempt}" if attempt else ""
            candidate = f"{stem}{suffix}{ext}"
            if not exists(candidate, target_dir):
                return _join(target_dir, candidate)
            attempt += 1


__all__ = ["DatedUniqueFileName", "sanitize_stem"]
