"""
Test error mapping and CLI exit code functionality.

Validates that exceptions are correctly mapped to exit codes and that
the run_and_exit wrapper handles errors appropriately for CLI commands.
"""
from __future__ import annotations

from unittest.mock import Mock

import pytest
import typer

from commitcache.errors import (
    AncestryWalkFailed,
    ArchiveReadFailed,
    ArchiveWriteFailed,
    CacheError,
    NoCacheFound,
    RepositoryNotFound,
    RequestedFileMissing,
    StorageIoError,
    TrunkNotFound,
)
from commitcache.operations.mappers import EXIT_CODES, exit_code_for, run_and_exit


class TestExitCodeMapping:
    """Test exception to exit code mapping."""
    
    @pytest.mark.parametrize("exc,code", [
        (NoCacheFound(["ci-a"]), 1),
        (RepositoryNotFound("none"), 2),
        (TrunkNotFound(["refs/remotes/origin/main"]), 2),
        (ValueError("bad"), 2),
        (AncestryWalkFailed("corrupt"), 3),
        (ArchiveWriteFailed("io"), 4),
        (ArchiveReadFailed("io"), 4),
        (StorageIoError("io"), 5),
    ])
    def test_known_exceptions(self, exc, code):
        assert exit_code_for(exc) == code

    def test_unknown_exception_maps_to_fallback(self):
        unknown_error = Mock()
        unknown_error.__class__.__name__ = "SomeUnknownError"
        
        assert exit_code_for(unknown_error) == 1
        assert exit_code_for(RuntimeError("test")) == 1

    def test_every_fatal_error_is_mapped(self):
        fatal = {
            "RepositoryNotFound", "TrunkNotFound", "AncestryWalkFailed", "NoCacheFound",
            "ArchiveWriteFailed", "ArchiveReadFailed", "StorageIoError",
        }
        assert fatal <= set(EXIT_CODES)
        assert all(code != 0 for code in EXIT_CODES.values())


class TestErrorTaxonomy:
    """Test error class details."""

    def test_common_base(self):
        for cls in (RepositoryNotFound, AncestryWalkFailed, ArchiveWriteFailed,
                    ArchiveReadFailed, StorageIoError):
            assert issubclass(cls, CacheError)

    def test_no_cache_found_keeps_candidates(self):
        exc = NoCacheFound(["ci-a", "ci-b"])
        assert exc.candidates == ["ci-a", "ci-b"]
        assert "2 candidate keys" in str(exc)

    def test_trunk_not_found_lists_refs(self):
        exc = TrunkNotFound(("refs/remotes/origin/main", "refs/remotes/origin/master"))
        assert "refs/remotes/origin/master" in str(exc)

    def test_requested_file_missing(self):
        exc = RequestedFileMissing("build/out.bin")
        assert exc.path == "build/out.bin"
        assert "build/out.bin" in str(exc)


class TestRunAndExit:
    """Test run_and_exit wrapper functionality."""
    
    def test_successful_execution(self):
        assert run_and_exit(lambda: "ok") == "ok"
    
    def test_exception_mapped_to_exit(self, capsys):
        def failing():
            raise NoCacheFound(["ci-a"])
        
        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing)
        
        assert exc_info.value.exit_code == 1
        assert "error:" in capsys.readouterr().err
    
    def test_original_exception_chained(self):
        original = StorageIoError("disk gone")
        
        def failing():
            raise original
        
        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing)
        
        assert exc_info.value.exit_code == 5
        assert exc_info.value.__cause__ is original
