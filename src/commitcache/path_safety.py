"""
Path safety utilities for commitcache.

Archive members are rewritten relative to caller-chosen output paths on
restore; these checks keep a crafted or corrupt archive from writing
outside of them.
"""
from __future__ import annotations

from pathlib import Path, PurePosixPath


def safe_member_relpath(path: str) -> str:
    """
    Validate and normalize the part of an archive member below its alias.
    
    Rules:
    - Empty strings and "." are allowed and mean the alias root itself
    - No absolute paths (starting with '/')
    - No parent directory references ('..' components)
    - No backslashes or NUL bytes
    
    Args:
        path: Member path with the leading alias component removed
        
    Returns:
        Normalized relative path ("" for the alias root)
        
    Raises:
        ValueError: If path violates safety rules
        
    Examples:
        >>> safe_member_relpath("lib/out.o")
        'lib/out.o'
        
        >>> safe_member_relpath("")
        ''
        
        >>> safe_member_relpath("../secrets.txt")
        ValueError: unsafe archive path: ../secrets.txt
    """
    if "\\" in path or "\x00" in path:
        raise ValueError(f"unsafe archive path: {path}")
    rel = PurePosixPath(path)
    if rel.is_absolute() or ".." in rel.parts:
        raise ValueError(f"unsafe archive path: {path}")
    s = str(rel)
    return "" if s == "." else s


def split_alias(name: str) -> tuple[str, str]:
    """
    Split an archive member name into its alias and the remainder.
    
    Examples:
        >>> split_alias("3f2a.../lib/out.o")
        ('3f2a...', 'lib/out.o')
        
        >>> split_alias("3f2a...")
        ('3f2a...', '')
    """
    alias, _, rest = name.strip("/").partition("/")
    return alias, rest


def ensure_no_symlink_parents(root: Path, relpath: str) -> None:
    """
    Refuse a member whose parent directories below root include a symlink.
    
    A bundle may restore a symlink and then a later entry beneath it; writing
    that entry would follow the link out of root.
    
    Args:
        root: Output path the member is restored under
        relpath: Member path below root, as returned by safe_member_relpath()
        
    Raises:
        ValueError: If any existing parent of the member below root is a symlink
    """
    current = root
    for part in PurePosixPath(relpath).parts[:-1]:
        current = current / part
        if current.is_symlink():
            raise ValueError(f"unsafe archive path: {relpath} passes through symlink {current}")
