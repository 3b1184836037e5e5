"""
commitcache CLI

Build caches keyed by git history:
- save: Pack files into the cache under the current commit's key
- restore: Restore files from the closest cache among ancestor commits,
  a fallback key and the trunk tip
- keys: Show the save key and restore candidates without touching the store
"""
from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .cli_context import CLIContext
from .operations import OpsConfig, run_and_exit
from .operations.printers import print_key_plan, print_pull_summary, print_push_summary

app = typer.Typer(name="commitcache", help="Build caches keyed by git history", no_args_is_help=True)


def _configure_logging(verbose: bool) -> None:
    """Route library logging to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, show_time=False)],
        force=True,
    )


@app.command()
def save(
    files: List[str] = typer.Option(..., "--file", "-f", help="File or directory to cache (repeatable)"),
    prefix: str = typer.Option(..., "--prefix", "-p", help="Name of the cache, to tell caches sharing a store apart"),
    suffix: Optional[str] = typer.Option(None, "--suffix", "-s", help="Qualifier appended to the key"),
    fixed_key: Optional[str] = typer.Option(None, "--fixed-key", help="Use this literal instead of the commit id"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output"),
) -> None:
    """Save files to the cache under the current commit's key."""
    _configure_logging(verbose)
    
    def _save() -> None:
        context = CLIContext.from_env()
        ops = context.operations(OpsConfig(verbose=verbose))
        result = ops.push(files, prefix, suffix, fixed_key=fixed_key)
        print_push_summary(result, verbose=verbose)
    
    run_and_exit(_save)


@app.command()
def restore(
    files: List[str] = typer.Option(..., "--file", "-f", help="File or directory to restore (repeatable)"),
    prefix: str = typer.Option(..., "--prefix", "-p", help="Name of the cache, to tell caches sharing a store apart"),
    suffix: Optional[str] = typer.Option(None, "--suffix", "-s", help="Qualifier appended to the key"),
    fallback_key: Optional[str] = typer.Option(None, "--fallback-key", help="Literal key to try before the trunk"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output"),
) -> None:
    """Restore files from the closest existing cache."""
    _configure_logging(verbose)
    
    def _restore() -> None:
        context = CLIContext.from_env()
        ops = context.operations(OpsConfig(verbose=verbose))
        result = ops.pull(files, prefix, suffix, fallback_key=fallback_key)
        print_pull_summary(result, verbose=verbose)
    
    run_and_exit(_restore)


@app.command()
def keys(
    prefix: str = typer.Option(..., "--prefix", "-p", help="Name of the cache"),
    suffix: Optional[str] = typer.Option(None, "--suffix", "-s", help="Qualifier appended to the key"),
    fixed_key: Optional[str] = typer.Option(None, "--fixed-key", help="Literal used for the save key"),
    fallback_key: Optional[str] = typer.Option(None, "--fallback-key", help="Literal key to try before the trunk"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed output"),
) -> None:
    """Show the save key and restore candidates."""
    _configure_logging(verbose)
    
    def _keys() -> None:
        context = CLIContext.from_env()
        ops = context.operations(OpsConfig(verbose=verbose))
        plan = ops.keys(prefix, suffix, fixed_key=fixed_key, fallback_key=fallback_key)
        print_key_plan(plan)
    
    run_and_exit(_keys)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
