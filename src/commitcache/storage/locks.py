"""
Advisory file locks.

Cooperative locking over fcntl.flock. Locks belong to the open file
description, so they are released when the descriptor is closed or the
owning process exits; nothing is persisted on disk.
"""
from __future__ import annotations

import fcntl
import logging
from typing import Optional

from ..errors import StorageIoError

__all__ = ["FileLock"]

logger = logging.getLogger(__name__)


class FileLock:
    """
    Shared/exclusive advisory lock bound to an open file descriptor.
    
    Only protects against other cooperating holders of FileLock (or any
    flock user) on the same file; it does not stop plain readers/writers.
    """
    
    def __init__(self, fd: int, name: str = "") -> None:
        self._fd = fd
        self._name = name
        self._mode: Optional[str] = None
    
    @property
    def mode(self) -> Optional[str]:
        """Current lock mode: "shared", "exclusive" or None."""
        return self._mode
    
    def acquire_shared(self) -> None:
        """Block until a shared lock is held."""
        self._acquire(fcntl.LOCK_SH, "shared")
    
    def acquire_exclusive(self) -> None:
        """Block until an exclusive lock is held."""
        self._acquire(fcntl.LOCK_EX, "exclusive")
    
    def release(self) -> None:
        """Release the lock if held."""
        if self._mode is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        except OSError as e:
            raise StorageIoError(f"Failed to release lock on {self._name}: {e}") from e
        logger.debug(f"Released {self._mode} lock on {self._name}")
        self._mode = None
    
    def _acquire(self, operation: int, mode: str) -> None:
        logger.debug(f"Waiting for {mode} lock on {self._name}")
        try:
            fcntl.flock(self._fd, operation)
        except OSError as e:
            raise StorageIoError(f"Failed to acquire {mode} lock on {self._name}: {e}") from e
        self._mode = mode
        logger.debug(f"Acquired {mode} lock on {self._name}")
