"""
Version-control access for key resolution.

The resolver only needs a handful of read-only capabilities from the
repository: HEAD, named refs, parent links and a bounded ancestry walk.
History captures those as a protocol so tests can inject an in-memory
graph; GitHistory implements it on top of dulwich.
"""
from __future__ import annotations

import logging
import os
from typing import Iterator, List, Optional, Protocol, runtime_checkable

from dulwich.errors import (
    ChecksumMismatch,
    MissingCommitError,
    NotGitRepository,
    ObjectFormatException,
)
from dulwich.objects import Commit
from dulwich.repo import Repo

from .errors import AncestryWalkFailed, RepositoryNotFound

__all__ = ["History", "GitHistory"]

logger = logging.getLogger(__name__)

# Failures surfaced by dulwich when an object is missing or unreadable
_OBJECT_ERRORS = (KeyError, MissingCommitError, ObjectFormatException, ChecksumMismatch, OSError)


@runtime_checkable
class History(Protocol):
    """Read-only view of a repository's commit graph. Commit ids are hex strings."""
    
    def head(self) -> str:
        """Return the commit id HEAD points to."""
        ...

    def resolve_ref(self, name: str) -> Optional[str]:
        """Return the commit id of a full ref name, or None if the ref is absent."""
        ...

    def parents(self, commit_id: str) -> List[str]:
        """Return the ordered parent ids of a commit (first parent first)."""
        ...

    def walk(self, start: str, *, boundary: Optional[str] = None,
             first_parent: bool = False, limit: Optional[int] = None) -> Iterator[str]:
        """
        Lazily yield commit ids reachable from start, nearest first.
        
        Args:
            start: Commit to start from (yielded first)
            boundary: Commit whose ancestry (itself included) is never yielded
            first_parent: Follow only first-parent links
            limit: Maximum number of commits to yield
        """
        ...

    def close(self) -> None:
        ...


class GitHistory(History):
    """History implementation backed by a dulwich Repo."""
    
    def __init__(self, repo: Repo) -> None:
        self._repo = repo
    
    @classmethod
    def discover(cls, start: str | os.PathLike = ".") -> GitHistory:
        """
        Open the repository containing start, searching parent directories.
        
        Raises:
            RepositoryNotFound: If no repository encloses start
        """
        try:
            repo = Repo.discover(str(start))
        except NotGitRepository as e:
            raise RepositoryNotFound(f"no git repository found at or above {os.path.abspath(start)}") from e
        logger.debug(f"Discovered repository at {repo.path}")
        return cls(repo)
    
    def head(self) -> str:
        try:
            return self._repo.head().decode("ascii")
        except _OBJECT_ERRORS as e:
            raise AncestryWalkFailed(f"cannot resolve HEAD: {e}") from e
    
    def resolve_ref(self, name: str) -> Optional[str]:
        try:
            sha = self._repo.refs[name.encode("utf-8")]
        except KeyError:
            return None
        return sha.decode("ascii")
    
    def parents(self, commit_id: str) -> List[str]:
        return [p.decode("ascii") for p in self._commit(commit_id).parents]
    
    def walk(self, start: str, *, boundary: Optional[str] = None,
             first_parent: bool = False, limit: Optional[int] = None) -> Iterator[str]:
        kwargs = {}
        if first_parent:
            kwargs["get_parents"] = lambda commit: commit.parents[:1]
        exclude = [boundary.encode("ascii")] if boundary else None
        try:
            walker = self._repo.get_walker(
                include=[start.encode("ascii")],
                exclude=exclude,
                max_entries=limit,
                **kwargs,
            )
            for entry in walker:
                yield entry.commit.id.decode("ascii")
        except _OBJECT_ERRORS as e:
            raise AncestryWalkFailed(f"history walk from {start} failed: {e}") from e
    
    def close(self) -> None:
        self._repo.close()
    
    def _commit(self, commit_id: str) -> Commit:
        try:
            obj = self._repo[commit_id.encode("ascii")]
        except _OBJECT_ERRORS as e:
            raise AncestryWalkFailed(f"cannot read commit {commit_id}: {e}") from e
        if not isinstance(obj, Commit):
            raise AncestryWalkFailed(f"object {commit_id} is a {obj.type_name.decode()}, not a commit")
        return obj
