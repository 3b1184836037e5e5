"""
Error classes for commitcache.

Provides a clear taxonomy of the failures that can occur while resolving
cache keys, reading or writing the store, and packing or unpacking archives.
Every fatal kind aborts the current operation; none are retried since they
stem from repository or filesystem state that will not change mid-run.
"""
from __future__ import annotations

from typing import Sequence


class CacheError(Exception):
    """Base class for all commitcache errors."""
    pass


class RepositoryNotFound(CacheError):
    """
    No version-control repository could be discovered.
    
    Raised when neither the starting directory nor any of its parents
    contains a git repository.
    """
    pass


class TrunkNotFound(CacheError):
    """None of the configured trunk refs exists in the repository."""
    
    def __init__(self, refs: Sequence[str]):
        super().__init__(f"trunk branch not found (tried {', '.join(refs)})")
        self.refs = list(refs)


class AncestryWalkFailed(CacheError):
    """
    Traversal of the commit history failed.
    
    Raised when:
    - A commit object referenced by HEAD, a ref or a parent link is missing
    - An object in the repository is corrupt and cannot be parsed
    """
    pass


class NoCacheFound(CacheError):
    """None of the restore candidate keys exists in the store."""
    
    def __init__(self, candidates: Sequence[str]):
        super().__init__(f"no cache found for any of {len(candidates)} candidate keys")
        self.candidates = list(candidates)


class ArchiveWriteFailed(CacheError):
    """Packing the requested paths into a compressed bundle failed."""
    pass


class ArchiveReadFailed(CacheError):
    """A bundle could not be decompressed, parsed or extracted."""
    pass


class StorageIoError(CacheError):
    """
    Storage backend I/O failure.
    
    Raised when:
    - The base directory cannot be created
    - An object cannot be opened for reading or writing
    - An advisory lock cannot be acquired
    """
    pass


class RequestedFileMissing(CacheError):
    """
    A requested path was not present in the restored archive.
    
    Non-fatal: instances are collected and reported after extraction
    completes, never raised by the restore pipeline.
    """
    
    def __init__(self, path: str):
        super().__init__(f"requested path not found in cache: {path}")
        self.path = path


__all__ = [
    "CacheError",
    "RepositoryNotFound",
    "TrunkNotFound",
    "AncestryWalkFailed",
    "NoCacheFound",
    "ArchiveWriteFailed",
    "ArchiveReadFailed",
    "StorageIoError",
    "RequestedFileMissing",
]
