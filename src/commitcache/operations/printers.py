"""
Human-readable output formatting.

Centralizes all CLI output formatting. Summaries go to stdout; warnings and
errors go to stderr so scripted callers can capture the key cleanly.
"""
from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..keys import KeyPlan
from .facade import PullResult, PushResult

_console = Console(highlight=False, soft_wrap=True)
_err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def print_push_summary(result: PushResult, verbose: bool = False) -> None:
    """
    Print save summary.
    
    Args:
        result: Outcome of the save
        verbose: List every packed path
    """
    _console.print(f"[bold]Saved[/] {len(result.files)} path(s) to cache key [cyan]{escape(result.key)}[/]")
    if verbose:
        for path in result.files:
            _console.print(f"  {escape(path)}")


def print_pull_summary(result: PullResult, verbose: bool = False) -> None:
    """
    Print restore summary, with one warning per requested path absent from the cache.
    
    Args:
        result: Outcome of the restore
        verbose: Show every probed key and extracted path
    """
    if verbose:
        for key in result.probed[:-1]:
            _console.print(f"[dim]miss[/] {escape(key)}")
        _console.print(f"[green]hit[/]  {escape(result.key)}")
    
    _console.print(f"[bold]Restored[/] {len(result.extracted)} path(s) from cache key [cyan]{escape(result.key)}[/]")
    if verbose:
        for path in result.extracted:
            _console.print(f"  {escape(path)}")
    
    for problem in result.missing:
        _err_console.print(f"[yellow]warning:[/] {escape(str(problem))}")


def print_key_plan(plan: KeyPlan) -> None:
    """
    Print the save key and the ordered restore candidates.
    
    Args:
        plan: Resolved keys
    """
    _console.print(f"[bold]Save key:[/] {escape(plan.primary)}")
    
    table = Table(title="Restore candidates")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="cyan", no_wrap=True)
    for position, key in enumerate(plan.candidates, start=1):
        table.add_row(str(position), escape(key))
    _console.print(table)


def print_error(exc: BaseException) -> None:
    """Print a fatal error to stderr."""
    _err_console.print(f"[red]error:[/] {escape(str(exc))}")
