"""
Cache archive packing and selective extraction.

A cache bundle is a tar stream inside a single zstandard frame. Every
requested path is stored under an alias (the SHA256 of the path text) rather
than under its own name, so a bundle entry is independent of the filesystem
layout it was produced from and can be restored to any output path.

Entries are written in caller order; reading is a single forward pass, so
the source never needs to be seekable.
"""
from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tarfile
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Optional

import zstandard as zstd

from .errors import ArchiveReadFailed, ArchiveWriteFailed
from .path_safety import ensure_no_symlink_parents, safe_member_relpath, split_alias

__all__ = [
    "path_alias",
    "pack",
    "unpack",
    "build_request",
    "check_sources",
    "RequestedEntry",
    "ExtractionReport",
]

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MiB


def path_alias(path: str | os.PathLike) -> str:
    """
    Archive-internal name for a requested path.
    
    The path text is normalized first so that "build/", "build" and
    "./build" share an alias; no filesystem lookup is involved.
    """
    text = os.path.normpath(os.fspath(path))
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass
class RequestedEntry:
    """Output location for one alias, marked once something was extracted to it."""
    output_path: str
    extracted: bool = False


@dataclass
class ExtractionReport:
    """Outcome of a selective extraction."""
    extracted: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)


def build_request(paths: Iterable[str | os.PathLike]) -> Dict[str, RequestedEntry]:
    """Map the alias of each path to a fresh RequestedEntry for that path."""
    return {path_alias(p): RequestedEntry(output_path=os.fspath(p)) for p in paths}


def check_sources(paths: Iterable[str | os.PathLike]) -> None:
    """
    Fail if any path to pack does not exist.
    
    Raises:
        ArchiveWriteFailed: Naming the first missing path
    """
    for path in paths:
        if not os.path.lexists(path):
            raise ArchiveWriteFailed(f"cannot pack {os.fspath(path)}: no such file or directory")


def pack(paths: Iterable[str | os.PathLike], sink: BinaryIO, *, zstd_level: int = 3) -> List[str]:
    """
    Write a compressed bundle of paths to sink.
    
    Directories are added recursively with the alias replacing the original
    path prefix; files are added under the alias alone. The sink is not
    closed.
    
    Args:
        paths: Files and directories to pack, in the order they are written
        sink: Binary destination stream
        zstd_level: Zstandard compression level
        
    Returns:
        Aliases written, in order
        
    Raises:
        ArchiveWriteFailed: If a path is missing or any I/O fails. Output
            already written to sink is not rolled back; callers that must
            leave sink untouched for a missing path run check_sources() first.
    """
    paths = [os.fspath(p) for p in paths]
    
    aliases = []
    compressor = zstd.ZstdCompressor(level=zstd_level, write_checksum=True)
    try:
        with compressor.stream_writer(sink, closefd=False) as zstd_writer:
            with tarfile.open(fileobj=zstd_writer, mode="w|", format=tarfile.PAX_FORMAT) as tar:
                for path in paths:
                    alias = path_alias(path)
                    logger.debug(f"Packing {path} as {alias}")
                    tar.add(path, arcname=alias, recursive=True, filter=_canonical_owner)
                    aliases.append(alias)
    except (OSError, tarfile.TarError, zstd.ZstdError) as e:
        raise ArchiveWriteFailed(f"failed to write cache archive: {e}") from e
    return aliases


def unpack(source: BinaryIO, requested: Dict[str, RequestedEntry]) -> ExtractionReport:
    """
    Extract the requested aliases from a compressed bundle.
    
    Entries whose alias is not in requested are skipped. Each extracted
    entry is written to its alias' output path joined with the remainder of
    the entry name; requested entries are marked as extracted in place.
    
    Args:
        source: Binary stream positioned at the start of a bundle
        requested: Alias to output location, as built by build_request()
        
    Returns:
        Report of the output paths extracted and the ones absent from the bundle
        
    Raises:
        ArchiveReadFailed: If the bundle is corrupt, contains unsafe member
            names, or an entry cannot be written
    """
    materialized: Dict[str, Path] = {}
    decompressor = zstd.ZstdDecompressor()
    try:
        with decompressor.stream_reader(source, closefd=False) as zstd_reader:
            with tarfile.open(fileobj=zstd_reader, mode="r|") as tar:
                for member in tar:
                    alias, rest = split_alias(member.name)
                    entry = requested.get(alias)
                    if entry is None:
                        logger.debug(f"Skipping unrequested entry {member.name}")
                        continue
                    
                    root = Path(entry.output_path)
                    relpath = safe_member_relpath(rest)
                    ensure_no_symlink_parents(root, relpath)
                    target = root / relpath
                    _materialize(tar, member, target, materialized)
                    materialized[member.name.strip("/")] = target
                    entry.extracted = True
    except ValueError as e:
        raise ArchiveReadFailed(str(e)) from e
    except (OSError, EOFError, tarfile.TarError, zstd.ZstdError) as e:
        raise ArchiveReadFailed(f"failed to read cache archive: {e}") from e
    
    report = ExtractionReport()
    for entry in requested.values():
        if entry.extracted:
            report.extracted.append(entry.output_path)
        else:
            report.missing.append(entry.output_path)
    return report


def _canonical_owner(tarinfo: tarfile.TarInfo) -> Optional[tarfile.TarInfo]:
    """
    Drop ownership from an entry so restores never depend on local users.
    
    Modes and mtimes are kept: build tools compare timestamps. Device nodes
    and FIFOs are left out of the bundle.
    """
    if not (tarinfo.isreg() or tarinfo.isdir() or tarinfo.issym() or tarinfo.islnk()):
        logger.debug(f"Skipping special file {tarinfo.name}")
        return None
    tarinfo.uid = 0
    tarinfo.gid = 0
    tarinfo.uname = ""
    tarinfo.gname = ""
    return tarinfo


def _materialize(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path,
                 materialized: Dict[str, Path]) -> None:
    """Write one archive member to target, replacing whatever is there."""
    if member.isdir():
        if target.is_symlink() or (target.exists() and not target.is_dir()):
            target.unlink()
        target.mkdir(parents=True, exist_ok=True)
        return
    
    if member.isreg():
        stream = tar.extractfile(member)
        if stream is None:
            raise ArchiveReadFailed(f"cannot read archive entry {member.name}")
        _write_file_atomically(target, stream, mode=member.mode & 0o777, mtime=member.mtime)
        return
    
    _clear_target(target)
    if member.issym():
        os.symlink(member.linkname, target)
    elif member.islnk():
        source = materialized.get(member.linkname.strip("/"))
        if source is None:
            logger.warning(f"Hard link target {member.linkname} was not restored, skipping {target}")
            return
        os.link(source, target)
    else:
        logger.debug(f"Skipping unsupported entry type for {member.name}")


def _clear_target(target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.is_symlink() or target.is_file():
        target.unlink()
    elif target.is_dir():
        shutil.rmtree(target)


def _write_file_atomically(target: Path, stream: BinaryIO, *, mode: int, mtime: float) -> None:
    """Stream content to a temp file next to target, then rename it into place."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=".commitcache.tmp.", dir=target.parent)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
        os.chmod(temp_path, mode)
        os.utime(temp_path, (mtime, mtime))
        
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        os.replace(temp_path, target)
    except Exception:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        raise
