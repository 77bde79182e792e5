"""
File storage adapter.

Uploaded files live on the local disk under ``STORAGE_ROOT`` and are addressed
by a relative POSIX path such as ``posts/image/<hex>.jpg``. The same directory
is served read-only by the app under ``STORAGE_URL_PREFIX``.
"""

from __future__ import annotations

import os
import re
import secrets
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional

from .config import get_settings

_SAFE_SUFFIX = re.compile(r"\.[a-z0-9]{1,8}")
_CONTENT_TYPE_SUFFIX = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def absolute_url(path: str, base: Optional[str] = None) -> str:
    """Root a site path at ``PUBLIC_BASE_URL``; absolute URLs pass through."""
    if path.startswith(("http://", "https://")):
        return path
    root = (base or get_settings().public_base_url).rstrip("/")
    return f"{root}/{path.lstrip('/')}"


@dataclass
class PendingUpload:
    """A file received in a request that has not been stored yet."""

    filename: str
    content: bytes = field(repr=False)
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    def suffix(self) -> str:
        candidate = PurePosixPath(self.filename or "").suffix.lower()
        if _SAFE_SUFFIX.fullmatch(candidate):
            return candidate
        return _CONTENT_TYPE_SUFFIX.get((self.content_type or "").lower(), "")


class LocalFileStorage:
    """Stores blobs on disk; names are random so nothing is ever overwritten."""

    def __init__(self, root: str | os.PathLike, url_prefix: str = "/storage") -> None:
        self.root = Path(root).resolve()
        self.url_prefix = "/" + (url_prefix or "").strip("/")

    def _resolve(self, relative: str) -> Path:
        candidate = (self.root / relative).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ValueError(f"Path escapes storage root: {relative!r}")
        return candidate

    def upload(self, upload: PendingUpload, directory: str = "uploads") -> str:
        directory = (directory or "uploads").strip("/")
        target_dir = self._resolve(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        suffix = upload.suffix()
        while True:
            name = f"{secrets.token_hex(20)}{suffix}"
            try:
                with open(target_dir / name, "xb") as fh:
                    fh.write(upload.content)
            except FileExistsError:
                continue
            return f"{directory}/{name}"

    def delete(self, path: Optional[str]) -> None:
        if not path:
            return
        target = self._resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            pass

    def exists(self, path: Optional[str]) -> bool:
        if not path:
            return False
        return self._resolve(path).is_file()

    def url(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            return path
        return absolute_url(f"{self.url_prefix}/{path.lstrip('/')}")


@lru_cache
def get_storage() -> LocalFileStorage:
    settings = get_settings()
    return LocalFileStorage(settings.storage_root, settings.storage_url_prefix)
