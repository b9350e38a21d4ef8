from __future__ import annotations

import hashlib
import logging
import os
import pickle
import tempfile
import time
from pathlib import Path
from types import TracebackType
from typing import Any

from utilkit.exceptions import ConfigurationError, StorageIOError, ValidationError
from utilkit.util.strings import is_null_or_empty

from ._io import atomic_write_bytes

FRAME_MAGIC = b"UKBC"
_DIGEST_SIZE = hashlib.sha1().digest_size
_HEADER_SIZE = len(FRAME_MAGIC) + _DIGEST_SIZE

logger = logging.getLogger(__name__)


class KeyedBlobCache:
    """Disk-backed cache storing one pickled object per key.

    Each entry lives in a file named exactly like its key inside
    ``directory``. Keys are not escaped, so they must be valid file names.
    The cache is meant to be short-lived: use it as a context manager (or
    call ``close``) to remove the entries it wrote, and the directory if it
    created it, when done.

    Not thread-safe. Writes go through a temp file and an atomic rename, so
    a reader never sees a half-written entry, but concurrent writers to the
    same key still race.
    """

    def __init__(self, directory: str | Path, *, delete_on_close: bool = True) -> None:
        if directory is None:
            raise ConfigurationError("Cannot use a null directory.")

        self._directory = Path(directory)
        self._created_directory = False
        if self._directory.exists():
            if not self._directory.is_dir():
                raise ConfigurationError(f"{self._directory.absolute()} is not a directory.")
        else:
            try:
                self._directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ConfigurationError(
                    f"Could not create directory {self._directory.absolute()}"
                ) from exc
            self._created_directory = True

        self.delete_on_close = delete_on_close
        self._closed = False
        self._written: set[str] = set()
        logger.debug("blob_cache open directory=%s", self._directory.absolute())

    @classmethod
    def in_temp_dir(
        cls,
        name: str | None = None,
        *,
        delete_on_close: bool = True,
    ) -> KeyedBlobCache:
        """Create a cache in the system temp directory.

        Without ``name`` the directory is ``KeyedBlobCache-<epoch millis>``.
        """
        if name is None:
            name = f"{cls.__name__}-{int(time.time() * 1000)}"
        return cls(Path(tempfile.gettempdir()) / name, delete_on_close=delete_on_close)

    @property
    def directory(self) -> Path:
        return self._directory

    def put(self, key: str, value: Any) -> None:
        path = self._entry_path(key)
        if value is None:
            raise ValidationError("Cannot cache a null object.")

        body = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        frame = FRAME_MAGIC + hashlib.sha1(body).digest() + body
        try:
            atomic_write_bytes(path, frame)
        except OSError as exc:
            raise StorageIOError(f"Unable to write cache entry {path.absolute()}") from exc

        self._written.add(key)
        logger.debug("blob_cache put key=%s path=%s bytes=%d", key, path, len(frame))

    def get(self, key: str) -> Any | None:
        path = self._entry_path(key)
        if not path.is_file():
            logger.debug("blob_cache miss key=%s", key)
            return None

        try:
            frame = path.read_bytes()
        except OSError as exc:
            raise StorageIOError(f"Unable to read cache entry {path.absolute()}") from exc

        body = _unframe(frame, path)
        try:
            value = pickle.loads(body)
        except Exception as exc:
            raise StorageIOError(f"Unable to read the object from cache entry {path}.") from exc

        logger.debug("blob_cache hit key=%s", key)
        return value

    def delete(self, key: str | None) -> int:
        """Remove the entry for ``key``; returns the number of failed deletions.

        Blank keys and keys that cannot name an entry (path separators,
        ``.``/``..``) are no-ops.
        """
        if is_null_or_empty(key) or not _is_plain_name(key):
            return 0

        path = self._directory / key
        if not path.exists():
            self._written.discard(key)
            return 0

        failures = _remove(path)
        if not failures:
            self._written.discard(key)
        return failures

    def clear(self) -> int:
        """Remove every entry in the directory; returns the number of failures."""
        failures = 0
        for path in self._directory.iterdir():
            failures += _remove(path)
        self._written.clear()
        if failures:
            logger.warning("blob_cache clear failures=%d directory=%s", failures, self._directory)
        return failures

    def keys(self) -> list[str]:
        return sorted(path.name for path in self._directory.iterdir() if path.is_file())

    def close(self) -> int:
        """Remove the entries this instance wrote; returns the number of failures.

        The directory itself is removed only when this instance created it
        and nothing else is left in it. Files the cache did not write are
        never touched.
        """
        if self._closed or not self.delete_on_close:
            self._closed = True
            return 0

        self._closed = True
        failures = 0
        for key in sorted(self._written):
            path = self._directory / key
            if path.exists():
                failures += _remove(path)
        self._written.clear()

        if not self._created_directory or not self._directory.is_dir():
            return failures
        if any(self._directory.iterdir()):
            logger.debug("blob_cache kept non-empty directory=%s", self._directory)
            return failures

        try:
            self._directory.rmdir()
        except OSError:
            logger.warning("blob_cache close failed to remove directory=%s", self._directory)
            failures += 1
        else:
            logger.debug("blob_cache removed directory=%s", self._directory)
        return failures

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str) or is_null_or_empty(key):
            return False
        return (self._directory / key).is_file()

    def __enter__(self) -> KeyedBlobCache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _entry_path(self, key: str) -> Path:
        if is_null_or_empty(key):
            raise ValidationError("Name cannot be null or empty.")
        if not _is_plain_name(key):
            raise ValidationError(f"Cache key must be a plain file name: {key!r}")
        return self._directory / key


def _unframe(frame: bytes, path: Path) -> bytes:
    if len(frame) < _HEADER_SIZE or not frame.startswith(FRAME_MAGIC):
        raise StorageIOError(f"Cache entry {path} is not a cache file.")

    digest = frame[len(FRAME_MAGIC) : _HEADER_SIZE]
    body = frame[_HEADER_SIZE:]
    if hashlib.sha1(body).digest() != digest:
        raise StorageIOError(f"Cache entry {path} is corrupt (checksum mismatch).")
    return body


def _remove(path: Path) -> int:
    try:
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()
    except OSError:
        logger.warning("blob_cache failed to delete path=%s", path.absolute())
        return 1

    logger.debug("blob_cache deleted path=%s", path)
    return 0


def _is_plain_name(key: str) -> bool:
    if key in {".", ".."}:
        return False
    return os.sep not in key and not (os.altsep and os.altsep in key)
