"""Tests for advisory file locks."""
from __future__ import annotations

import fcntl
import os

import pytest

from commitcache.errors import StorageIoError
from commitcache.storage.locks import FileLock


@pytest.fixture
def lock_file(tmp_path):
    path = tmp_path / "lockme"
    path.write_bytes(b"")
    return path


def _try_exclusive(path) -> bool:
    """Attempt a non-blocking exclusive lock from an independent descriptor."""
    fd = os.open(path, os.O_RDONLY)
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    finally:
        os.close(fd)
    return True


class TestFileLock:
    """Test FileLock state transitions."""

    def test_shared_blocks_exclusive(self, lock_file):
        fd = os.open(lock_file, os.O_RDONLY)
        try:
            lock = FileLock(fd, name="lockme")
            lock.acquire_shared()
            assert lock.mode == "shared"
            assert _try_exclusive(lock_file) is False
            
            lock.release()
            assert lock.mode is None
            assert _try_exclusive(lock_file) is True
        finally:
            os.close(fd)

    def test_exclusive(self, lock_file):
        fd = os.open(lock_file, os.O_RDWR)
        try:
            lock = FileLock(fd)
            lock.acquire_exclusive()
            assert lock.mode == "exclusive"
            assert _try_exclusive(lock_file) is False
        finally:
            os.close(fd)
        # Closing the descriptor drops the lock
        assert _try_exclusive(lock_file) is True

    def test_release_without_lock_is_noop(self, lock_file):
        fd = os.open(lock_file, os.O_RDONLY)
        try:
            FileLock(fd).release()
        finally:
            os.close(fd)

    def test_bad_descriptor(self, lock_file):
        fd = os.open(lock_file, os.O_RDONLY)
        os.close(fd)
        
        with pytest.raises(StorageIoError, match="shared lock"):
            FileLock(fd, name="lockme").acquire_shared()
