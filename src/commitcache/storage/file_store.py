"""
Content-addressed local file store.

Implements the StorageBackend protocol over a local directory. Each key maps
to a single file whose name is the SHA256 of the key, so arbitrary key
strings never reach the filesystem. Readers and writers on the same key are
serialized with advisory locks; writes replace the object in place.
"""
from __future__ import annotations

import hashlib
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from ..errors import StorageIoError
from .base import StorageBackend
from .locks import FileLock

__all__ = ["ContentAddressedFileStore"]

logger = logging.getLogger(__name__)


class ContentAddressedFileStore(StorageBackend):
    """
    StorageBackend over a local (or shared mount) directory.
    
    Locking is cooperative and only covers concurrent instances of this
    store. A writer that dies mid-write leaves a truncated object behind,
    visible and unlocked to the next reader.

    For a new key the object file is created before the writer holds its
    exclusive lock. A reader that calls exists() and reader() in that window
    can take the shared lock first and see an empty object, which restores
    fail with ArchiveReadFailed.
    """
    
    def __init__(self, base_dir: str | os.PathLike) -> None:
        self._base_dir = Path(base_dir)
        logger.debug(f"Content-addressed store rooted at {self._base_dir}")
    
    @property
    def base_dir(self) -> Path:
        return self._base_dir
    
    def path_for(self, key: str) -> Path:
        """Return the on-disk location of the object stored under key."""
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._base_dir / digest
    
    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()
    
    @contextmanager
    def reader(self, key: str) -> Iterator[BinaryIO]:
        path = self.path_for(key)
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise StorageIoError(f"Failed to open cache object for key {key!r}: {e}") from e
        
        with stream:
            lock = FileLock(stream.fileno(), name=str(path))
            lock.acquire_shared()
            try:
                logger.debug(f"Reading key {key!r} from {path}")
                yield stream
            finally:
                lock.release()
    
    @contextmanager
    def writer(self, key: str) -> Iterator[BinaryIO]:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIoError(f"Failed to create storage directory {path.parent}: {e}") from e
        
        # Open without O_TRUNC: truncation must wait until the exclusive lock is held
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT, 0o644)
        except OSError as e:
            raise StorageIoError(f"Failed to open cache object for key {key!r}: {e}") from e
        
        with os.fdopen(fd, "wb") as stream:
            lock = FileLock(stream.fileno(), name=str(path))
            lock.acquire_exclusive()
            try:
                try:
                    os.ftruncate(stream.fileno(), 0)
                except OSError as e:
                    raise StorageIoError(f"Failed to truncate {path}: {e}") from e
                logger.debug(f"Writing key {key!r} to {path}")
                yield stream
                stream.flush()
            finally:
                lock.release()
