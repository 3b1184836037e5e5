"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and CLI command wrappers
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

EXIT_CODES = {
    "NoCacheFound": 1,
    "RepositoryNotFound": 2,
    "TrunkNotFound": 2,
    "ValueError": 2,
    "AncestryWalkFailed": 3,
    "ArchiveWriteFailed": 4,
    "ArchiveReadFailed": 4,
    "StorageIoError": 5,
}

def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.
    
    Returns:
    - 0: Success
    - 1: No cache found (NoCacheFound) or unknown error
    - 2: Repository/trunk missing or invalid configuration
    - 3: History walk failure (AncestryWalkFailed)
    - 4: Archive write/read failure
    - 5: Storage I/O failure (StorageIoError)
    
    Args:
        exc: Exception to map
        
    Returns:
        Exit code (1-5, with 1 as fallback for unknown exceptions)
    """
    return EXIT_CODES.get(type(exc).__name__, 1)

def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.
    
    Executes the given function; on failure prints a single message to
    stderr and exits with the mapped code, so CLI commands don't need
    individual try/except blocks.
    
    Args:
        func: Function to execute
        
    Returns:
        Function result if successful
        
    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except Exception as e:
        from .printers import print_error
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e
