"""Storage backends for commitcache."""
from .base import StorageBackend
from .file_store import ContentAddressedFileStore
from .locks import FileLock

__all__ = ["StorageBackend", "ContentAddressedFileStore", "FileLock"]
