"""
Fake commit history for testing.

This implementation explicitly subclasses History to ensure interface changes
break CI immediately, preventing silent drift.
"""
from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, Iterator, List, Optional, Set

from commitcache.errors import AncestryWalkFailed
from commitcache.vcs import History

__all__ = ["FakeHistory"]


class FakeHistory(History):
    """
    In-memory commit graph with named refs.
    
    This is a test double; not for production use. Walks are breadth-first
    from the start commit, which matches date order for the linear and
    simple merge graphs built in tests.
    """
    
    def __init__(self) -> None:
        self._parents: Dict[str, List[str]] = {}
        self._refs: Dict[str, str] = {}
        self._head: Optional[str] = None
        self.opened = 0
        self.closed = 0
        self.walks: List[dict] = []

    def add_commit(self, commit_id: str, parents: Iterable[str] = ()) -> str:
        """Add a commit; parents must already exist."""
        parents = list(parents)
        for parent in parents:
            if parent not in self._parents:
                raise ValueError(f"unknown parent {parent}")
        self._parents[commit_id] = parents
        return commit_id

    def chain(self, ids: Iterable[str], base: Optional[str] = None) -> List[str]:
        """Add a linear run of commits on top of base, oldest first."""
        created = []
        parent = base
        for commit_id in ids:
            self.add_commit(commit_id, [parent] if parent else [])
            created.append(commit_id)
            parent = commit_id
        return created

    def set_head(self, commit_id: str) -> None:
        self._head = commit_id

    def set_ref(self, name: str, commit_id: str) -> None:
        self._refs[name] = commit_id

    def open(self) -> FakeHistory:
        """Factory hook for KeyResolver; counts how often history is opened."""
        self.opened += 1
        return self

    # History protocol

    def head(self) -> str:
        if self._head is None:
            raise AncestryWalkFailed("HEAD is unborn")
        return self._head

    def resolve_ref(self, name: str) -> Optional[str]:
        return self._refs.get(name)

    def parents(self, commit_id: str) -> List[str]:
        if commit_id not in self._parents:
            raise AncestryWalkFailed(f"missing commit {commit_id}")
        return list(self._parents[commit_id])

    def walk(self, start: str, *, boundary: Optional[str] = None,
             first_parent: bool = False, limit: Optional[int] = None) -> Iterator[str]:
        self.walks.append({"start": start, "boundary": boundary,
                           "first_parent": first_parent, "limit": limit})
        excluded = self._ancestors(boundary) if boundary else set()
        
        queue = deque([start])
        seen: Set[str] = {start}
        yielded = 0
        while queue:
            if limit is not None and yielded >= limit:
                return
            commit = queue.popleft()
            if commit in excluded:
                continue
            yield commit
            yielded += 1
            parents = self.parents(commit)
            if first_parent:
                parents = parents[:1]
            for parent in parents:
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)

    def close(self) -> None:
        self.closed += 1

    def _ancestors(self, commit_id: str) -> Set[str]:
        found: Set[str] = set()
        stack = [commit_id]
        while stack:
            commit = stack.pop()
            if commit in found:
                continue
            found.add(commit)
            stack.extend(self.parents(commit))
        return found
