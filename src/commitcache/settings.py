"""
Settings and configuration for commitcache.

Centralizes configuration values and provides validation with fail-fast behavior.
Environment variables are read once at the process boundary; core components
receive a Settings instance and never touch the environment themselves.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

__all__ = ["Settings", "create_settings_from_env", "DEFAULT_STORAGE_DIR", "DEFAULT_TRUNK_REFS"]

DEFAULT_STORAGE_DIR = "/tmp/commitcache"
DEFAULT_TRUNK_REFS: Tuple[str, ...] = (
    "refs/remotes/origin/main",
    "refs/remotes/origin/master",
)


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for commitcache.
    
    Storage Settings:
        storage_dir: Base directory of the content-addressed file store
        zstd_level: Zstandard compression level used when packing
        
    Key Resolution Settings:
        repo_path: Directory from which the repository is discovered upward
        trunk_refs: Full ref names probed in order to find the trunk commit
        walk_limit: Maximum number of commits visited by an ancestry walk
        
    CI Settings:
        ci_ref: Value of the CI ref signal (e.g. GITHUB_REF), if any
        pull_request_marker: Substring of ci_ref marking a pull request build
    """
    storage_dir: str = DEFAULT_STORAGE_DIR
    zstd_level: int = 3
    
    repo_path: str = "."
    trunk_refs: Tuple[str, ...] = DEFAULT_TRUNK_REFS
    walk_limit: int = 10
    
    ci_ref: Optional[str] = None
    pull_request_marker: str = "refs/pull/"
    
    def __post_init__(self):
        """Validate settings on construction."""
        if not self.storage_dir:
            raise ValueError("storage_dir is required")
        
        if not self.trunk_refs:
            raise ValueError("at least one trunk ref is required")
        for ref in self.trunk_refs:
            if not ref or not ref.startswith("refs/"):
                raise ValueError(f"Invalid trunk ref: {ref!r}. Must be a full ref name (refs/...)")
        
        if self.walk_limit <= 0:
            raise ValueError(f"walk_limit must be positive, got {self.walk_limit}")
        
        # zstandard accepts levels 1..22
        if not 1 <= self.zstd_level <= 22:
            raise ValueError(f"zstd_level must be between 1 and 22, got {self.zstd_level}")
        
        if not self.pull_request_marker:
            raise ValueError("pull_request_marker must not be empty")
    
    @property
    def in_pull_request(self) -> bool:
        """Whether the CI signal marks this run as a pull/merge request build."""
        return bool(self.ci_ref) and self.pull_request_marker in self.ci_ref


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.
    
    Environment Variables:
        - COMMITCACHE_STORAGE_DIR (default: /tmp/commitcache)
        - COMMITCACHE_ZSTD_LEVEL (default: 3)
        - COMMITCACHE_REPO_PATH (default: .)
        - COMMITCACHE_TRUNK_REFS (comma separated, default: origin/main then origin/master)
        - COMMITCACHE_WALK_LIMIT (default: 10)
        - GITHUB_REF (optional CI ref signal)
        - COMMITCACHE_PR_MARKER (default: refs/pull/)
    
    Returns:
        Settings object with validated configuration
        
    Raises:
        ValueError: If configuration is invalid
        
    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None
    
    trunk_env = os.getenv("COMMITCACHE_TRUNK_REFS")
    if trunk_env:
        trunk_refs = tuple(ref.strip() for ref in trunk_env.split(",") if ref.strip())
    else:
        trunk_refs = DEFAULT_TRUNK_REFS
    
    return Settings(
        storage_dir=os.getenv("COMMITCACHE_STORAGE_DIR") or DEFAULT_STORAGE_DIR,
        zstd_level=get_int("COMMITCACHE_ZSTD_LEVEL", 3),
        repo_path=os.getenv("COMMITCACHE_REPO_PATH") or ".",
        trunk_refs=trunk_refs,
        walk_limit=get_int("COMMITCACHE_WALK_LIMIT", 10),
        ci_ref=os.getenv("GITHUB_REF") or None,
        pull_request_marker=os.getenv("COMMITCACHE_PR_MARKER") or "refs/pull/",
    )
