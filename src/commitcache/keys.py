"""
Cache key resolution.

Maps "here and now in this repository" to the key a build cache is saved
under, and to the ordered list of keys probed when restoring: nearest
ancestor commits first, then an optional caller-supplied fallback, then the
trunk tip as the final fallback.

Keys are formatted as ``prefix-identifier[-suffix]`` and only ever compared
as opaque strings. The ``-`` delimiter is not escaped, so a key cannot be
parsed back into its parts when the prefix or suffix contains ``-``.
"""
from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import TrunkNotFound
from .settings import Settings
from .vcs import GitHistory, History

__all__ = ["format_key", "KeyResolver", "KeyPlan"]

logger = logging.getLogger(__name__)


def format_key(prefix: str, identifier: str, suffix: Optional[str] = None) -> str:
    """
    Format a cache key.
    
    Examples:
        >>> format_key("ci", "abc123")
        'ci-abc123'
        
        >>> format_key("ci", "abc123", "linux")
        'ci-abc123-linux'
    """
    if suffix:
        return f"{prefix}-{identifier}-{suffix}"
    return f"{prefix}-{identifier}"


def _key_variants(prefix: str, identifier: str, suffix: Optional[str]) -> List[str]:
    """Suffix-qualified key (when a suffix is given) followed by the bare key."""
    variants = []
    if suffix:
        variants.append(format_key(prefix, identifier, suffix))
    variants.append(format_key(prefix, identifier))
    return variants


@dataclass(frozen=True)
class KeyPlan:
    """Primary save key together with the ordered restore candidates."""
    primary: str
    candidates: List[str]


class KeyResolver:
    """
    Resolves cache keys from commit history.
    
    The repository is opened lazily through open_history, once per call, and
    only when history is actually needed (a fixed key never touches it).
    """
    
    def __init__(self, settings: Settings,
                 open_history: Optional[Callable[[], History]] = None) -> None:
        self.settings = settings
        if open_history is None:
            open_history = lambda: GitHistory.discover(settings.repo_path)
        self._open_history = open_history
    
    def compute_primary_key(self, prefix: str, suffix: Optional[str] = None,
                            fixed_key: Optional[str] = None) -> str:
        """
        Compute the key a cache is saved under.
        
        Args:
            prefix: Cache name, to tell caches sharing a store apart
            suffix: Optional qualifier appended to the key
            fixed_key: Literal identifier used instead of a commit id
            
        Returns:
            Formatted cache key
            
        Raises:
            RepositoryNotFound: If no repository encloses the configured path
            TrunkNotFound: If none of the trunk refs exists
            AncestryWalkFailed: If commit objects cannot be read
        """
        if fixed_key is not None:
            return format_key(prefix, fixed_key, suffix)
        
        with closing(self._open_history()) as history:
            head = history.head()
            trunk = self._trunk_commit(history)
            identifier = head
            
            if self.settings.in_pull_request:
                # CI systems build pull requests on a synthetic merge commit;
                # key on the feature branch tip instead.
                parents = history.parents(head)
                if len(parents) > 1:
                    for parent in parents:
                        if parent != trunk:
                            identifier = parent
                            break
                    logger.debug(f"Pull request build: HEAD {head} is a merge, using parent {identifier}")
        
        return format_key(prefix, identifier, suffix)
    
    def compute_restore_candidates(self, prefix: str, suffix: Optional[str] = None,
                                   fallback_key: Optional[str] = None) -> List[str]:
        """
        Compute the ordered list of keys to probe when restoring.
        
        Order: walked ancestor commits (nearest first, suffix-qualified key
        before bare key), then the fallback key, then the trunk commit. The
        trunk keys always terminate the list.
        
        Raises:
            RepositoryNotFound: If no repository encloses the configured path
            TrunkNotFound: If none of the trunk refs exists
            AncestryWalkFailed: If the history walk fails
        """
        with closing(self._open_history()) as history:
            trunk = self._trunk_commit(history)
            head = history.head()
            
            if head == trunk:
                commits = history.walk(head, first_parent=True, limit=self.settings.walk_limit)
            else:
                commits = history.walk(head, boundary=trunk, limit=self.settings.walk_limit)
            
            candidates: List[str] = []
            for commit in commits:
                if commit == trunk:
                    continue
                candidates.extend(_key_variants(prefix, commit, suffix))
        
        if fallback_key is not None:
            candidates.extend(_key_variants(prefix, fallback_key, suffix))
        candidates.extend(_key_variants(prefix, trunk, suffix))
        
        logger.debug(f"Restore candidates for prefix {prefix!r}: {candidates}")
        return candidates
    
    def describe(self, prefix: str, suffix: Optional[str] = None, *,
                 fixed_key: Optional[str] = None,
                 fallback_key: Optional[str] = None) -> KeyPlan:
        """Resolve both the primary key and the restore candidates."""
        return KeyPlan(
            primary=self.compute_primary_key(prefix, suffix, fixed_key),
            candidates=self.compute_restore_candidates(prefix, suffix, fallback_key),
        )
    
    def _trunk_commit(self, history: History) -> str:
        for ref in self.settings.trunk_refs:
            commit = history.resolve_ref(ref)
            if commit is not None:
                logger.debug(f"Trunk {ref} at {commit}")
                return commit
        raise TrunkNotFound(self.settings.trunk_refs)
