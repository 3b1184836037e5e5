"""
Operations Facade - Application service layer.

Provides a clean interface between the CLI and the core components, wiring
key resolution, archive packing and the storage backend into the save
(push) and restore (pull) pipelines.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..archive import build_request, check_sources, pack, unpack
from ..errors import NoCacheFound, RequestedFileMissing
from ..keys import KeyPlan, KeyResolver
from ..settings import Settings
from ..storage.base import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpsConfig:
    """
    Configuration for Operations facade.
    
    Centralizes output policy so CLI commands stay thin.
    """
    verbose: bool = False         # Show detailed output


@dataclass(frozen=True)
class PushResult:
    """Outcome of a save: the key written and the paths packed under it."""
    key: str
    files: List[str]


@dataclass(frozen=True)
class PullResult:
    """
    Outcome of a restore.
    
    probed lists every candidate checked, in order, up to and including the
    key that was restored. missing holds one RequestedFileMissing per
    requested path the cache did not contain.
    """
    key: str
    probed: List[str]
    extracted: List[str]
    missing: List[RequestedFileMissing] = field(default_factory=list)


class Operations:
    """
    Application service facade for CLI operations.
    
    Each pipeline is synchronous and sequential: resolve keys, open a
    storage stream, stream-process, close. Exceptions bubble up for central
    exit-code mapping; the only non-fatal outcome is a requested path that
    the restored cache did not contain.
    """
    
    def __init__(self, config: OpsConfig, settings: Settings,
                 store: StorageBackend, resolver: Optional[KeyResolver] = None):
        """
        Initialize Operations facade.
        
        Args:
            config: Output configuration
            settings: Validated settings
            store: Storage backend holding cache objects
            resolver: Key resolver (if None, one reading the repository at
                settings.repo_path is created)
        """
        self.cfg = config
        self.settings = settings
        self.store = store
        self.resolver = resolver if resolver is not None else KeyResolver(settings)

    def push(self, files: Sequence[str], prefix: str, suffix: Optional[str] = None,
             fixed_key: Optional[str] = None) -> PushResult:
        """
        Save files to the cache under the primary key.
        
        Args:
            files: Files and directories to cache
            prefix: Cache name
            suffix: Optional key qualifier
            fixed_key: Literal identifier replacing the commit id
            
        Returns:
            PushResult with the key written
        """
        key = self.resolver.compute_primary_key(prefix, suffix, fixed_key)
        check_sources(files)
        logger.info(f"Saving {len(files)} path(s) under {key}")
        
        with self.store.writer(key) as sink:
            pack(files, sink, zstd_level=self.settings.zstd_level)
        
        return PushResult(key=key, files=list(files))

    def pull(self, files: Sequence[str], prefix: str, suffix: Optional[str] = None,
             fallback_key: Optional[str] = None) -> PullResult:
        """
        Restore files from the closest existing cache.
        
        Args:
            files: Files and directories to restore
            prefix: Cache name
            suffix: Optional key qualifier
            fallback_key: Literal key probed before the trunk keys
            
        Returns:
            PullResult with the key restored and any missing paths
            
        Raises:
            NoCacheFound: If no candidate key exists in the store
        """
        candidates = self.resolver.compute_restore_candidates(prefix, suffix, fallback_key)
        
        probed: List[str] = []
        selected = None
        for key in candidates:
            probed.append(key)
            if self.store.exists(key):
                selected = key
                break
            logger.debug(f"No cache under {key}")
        
        if selected is None:
            raise NoCacheFound(candidates)
        
        logger.info(f"Restoring from {selected}")
        request = build_request(files)
        with self.store.reader(selected) as source:
            report = unpack(source, request)
        
        missing = [RequestedFileMissing(path) for path in report.missing]
        for problem in missing:
            logger.info(str(problem))
        
        return PullResult(key=selected, probed=probed, extracted=report.extracted, missing=missing)

    def keys(self, prefix: str, suffix: Optional[str] = None, *,
             fixed_key: Optional[str] = None,
             fallback_key: Optional[str] = None) -> KeyPlan:
        """Show the save key and restore candidates without touching the store."""
        return self.resolver.describe(prefix, suffix, fixed_key=fixed_key, fallback_key=fallback_key)
