"""
Storage interfaces for commitcache.

These protocols define the boundary between the push/pull pipeline and
storage implementations, enabling clean dependency injection and testing
with fakes.
"""
from __future__ import annotations

from typing import BinaryIO, ContextManager, Protocol, runtime_checkable

__all__ = ["StorageBackend"]


@runtime_checkable
class StorageBackend(Protocol):
    """
    Protocol for cache object storage keyed by an opaque string.
    
    Mutual exclusion is part of the contract: a stream returned by reader()
    holds a shared lock and a stream returned by writer() holds an exclusive
    lock on the object for as long as its context is open. Implementations
    choose the primitive (advisory file locks, conditional writes, ...).
    """
    
    def exists(self, key: str) -> bool:
        """
        Check whether an object is stored under key.
        
        Best-effort: no lock is taken, so the answer may be stale by the
        time the caller acts on it.
        """
        ...

    def reader(self, key: str) -> ContextManager[BinaryIO]:
        """
        Open the object stored under key for reading.
        
        Args:
            key: Cache key
            
        Returns:
            Context manager yielding a binary stream; the shared lock is
            released when the context exits
            
        Raises:
            StorageIoError: If the object is missing or cannot be opened or locked
        """
        ...

    def writer(self, key: str) -> ContextManager[BinaryIO]:
        """
        Open the object stored under key for replacement.
        
        Existing content is discarded once the exclusive lock is held.
        
        Args:
            key: Cache key
            
        Returns:
            Context manager yielding a binary sink; the exclusive lock is
            released when the context exits
            
        Raises:
            StorageIoError: If the object cannot be created, opened or locked
        """
        ...
