"""Blob storage for drop files and time-limited download links."""

from __future__ import annotations

import asyncio
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Final
from urllib.parse import quote

from jose import JWTError, jwt

from trove.db.time import utcnow

_BLOB_READ_SCOPE: Final[str] = "blob-read"
_UPLOAD_PREFIX = re.compile(r"^\d+_")


@dataclass(frozen=True)
class BlobRef:
    """A stored file: full path plus its last path segment."""

    path: str
    name: str

    @property
    def display_name(self) -> str:
        """File name with the upload ordering prefix removed (``1_a.pdf`` -> ``a.pdf``)."""
        return _UPLOAD_PREFIX.sub("", self.name)


def _ref(path: str) -> BlobRef:
    return BlobRef(path=path, name=path.rsplit("/", 1)[-1])


class BlobStore(ABC):
    """Minimal blob interface used by the unlock flow and drop deletion."""

    @abstractmethod
    async def list(self, prefix: str) -> list[BlobRef]:
        """Return every blob whose path starts with `prefix`, sorted by path."""

    @abstractmethod
    async def get_signed_read_url(self, path: str, ttl: timedelta) -> str:
        """Return a URL granting read access to `path` for `ttl`."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove a blob; missing blobs are ignored."""


class MemoryBlobStore(BlobStore):
    """In-process blob store for tests; URLs are not servable."""

    def __init__(self, base_url: str = "memory://blobs") -> None:
        self._base_url = base_url.rstrip("/")
        self._blobs: dict[str, bytes] = {}

    def add_blob(self, path: str, content: bytes = b"") -> None:
        self._blobs[path] = content

    def paths(self) -> list[str]:
        return sorted(self._blobs)

    async def list(self, prefix: str) -> list[BlobRef]:
        return [_ref(path) for path in sorted(self._blobs) if path.startswith(prefix)]

    async def get_signed_read_url(self, path: str, ttl: timedelta) -> str:
        if path not in self._blobs:
            raise FileNotFoundError(path)
        return f"{self._base_url}/{quote(path)}?ttl={int(ttl.total_seconds())}"

    async def delete(self, path: str) -> None:
        self._blobs.pop(path, None)


class LocalBlobStore(BlobStore):
    """Filesystem-backed store whose download links carry a signed JWT.

    Links point at the ``/api/v1/files/{path}`` endpoint, which calls
    `resolve_signed` before streaming the file.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        base_url: str,
        signing_key: str,
        algorithm: str = "HS256",
    ) -> None:
        self._root = Path(root).resolve()
        self._base_url = base_url.rstrip("/")
        self._signing_key = signing_key
        self._algorithm = algorithm

    def _resolve(self, path: str) -> Path:
        candidate = (self._root / path).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            raise PermissionError(f"Path escapes blob root: {path}")
        return candidate

    def _list_sync(self, prefix: str) -> list[BlobRef]:
        if not self._root.exists():
            return []
        paths = (
            file.relative_to(self._root).as_posix()
            for file in self._root.rglob("*")
            if file.is_file()
        )
        return [_ref(path) for path in sorted(paths) if path.startswith(prefix)]

    async def list(self, prefix: str) -> list[BlobRef]:
        return await asyncio.to_thread(self._list_sync, prefix)

    async def save(self, path: str, content: bytes) -> None:
        """Write a blob (used by seeding and tests; uploads are handled elsewhere)."""
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        await asyncio.to_thread(_write)

    async def get_signed_read_url(self, path: str, ttl: timedelta) -> str:
        if not self._resolve(path).is_file():
            raise FileNotFoundError(path)
        claims = {"path": path, "scope": _BLOB_READ_SCOPE, "exp": utcnow() + ttl}
        token = jwt.encode(claims, self._signing_key, algorithm=self._algorithm)
        return f"{self._base_url}/api/v1/files/{quote(path)}?token={token}"

    def resolve_signed(self, path: str, token: str) -> Path:
        """Return the file behind a signed link.

        Raises:
            PermissionError: If the token is invalid, expired or bound to another path.
            FileNotFoundError: If the blob no longer exists.
        """
        try:
            claims = jwt.decode(token, self._signing_key, algorithms=[self._algorithm])
        except JWTError as err:
            raise PermissionError("Invalid or expired download token") from err
        if claims.get("scope") != _BLOB_READ_SCOPE or claims.get("path") != path:
            raise PermissionError("Download token does not match this file")
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(path)
        return target

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        await asyncio.to_thread(target.unlink, missing_ok=True)
