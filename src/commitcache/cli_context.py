"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
storage backend, avoiding global state and enabling proper dependency
injection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .operations import Operations, OpsConfig
from .settings import Settings, create_settings_from_env
from .storage.file_store import ContentAddressedFileStore


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.
    
    Settings are read from the environment once, here; everything below the
    CLI receives them explicitly.
    """
    settings: Settings
    _store: Optional[ContentAddressedFileStore] = None
    
    @classmethod
    def from_env(cls) -> CLIContext:
        """Create CLI context from environment variables."""
        return cls(settings=create_settings_from_env())
    
    @property
    def store(self) -> ContentAddressedFileStore:
        """Get or create the storage backend (lazy initialization)."""
        if self._store is None:
            self._store = ContentAddressedFileStore(self.settings.storage_dir)
        return self._store
    
    def operations(self, config: OpsConfig) -> Operations:
        return Operations(config=config, settings=self.settings, store=self.store)
