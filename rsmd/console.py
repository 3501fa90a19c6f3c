"""Rich console utilities for rsmd.

A shared Rich Console plus helpers that turn crosswalk results into
terminal output, with GitHub Actions annotations when running in CI.
"""

import os
from contextlib import contextmanager
from typing import Any, Generator, Iterable, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from rsmd._crosswalk.diagnostics import Diagnostic, Severity

# Detect CI environments
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"
IS_CI = os.getenv("CI") == "true" or IS_GITHUB_ACTIONS

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "step": "bold blue",
        "field": "magenta",
    }
)

# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


@contextmanager
def gha_group(title: str) -> Generator[None, None, None]:
    """
    Context manager for GitHub Actions collapsible groups.

    Usage:
        with gha_group("Details"):
            print("This is collapsible in GHA")
    """
    if IS_GITHUB_ACTIONS:
        print(f"::group::{title}")
    try:
        yield
    finally:
        if IS_GITHUB_ACTIONS:
            print("::endgroup::")


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """Emit a warning that appears in the GitHub Actions job summary."""
    if IS_GITHUB_ACTIONS:
        print(f"::warning title={title}::{message}" if title else f"::warning::{message}")
    elif title:
        console.print(f"[warning]Warning ({title}):[/warning] {message}")
    else:
        console.print(f"[warning]Warning:[/warning] {message}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """Emit an error that appears in the GitHub Actions job summary."""
    if IS_GITHUB_ACTIONS:
        print(f"::error title={title}::{message}" if title else f"::error::{message}")
    elif title:
        console.print(f"[error]Error ({title}):[/error] {message}")
    else:
        console.print(f"[error]Error:[/error] {message}")


def print_summary_table(title: str, data: List[Tuple[str, Any]], show_if_empty: bool = False) -> None:
    """
    Print a two-column summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]
    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for label, value in data:
        table.add_row(label, str(value))
    console.print(table)


def print_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
    """
    Print diagnostics as a table.

    In GitHub Actions every diagnostic is also emitted as an annotation so it
    shows up on the workflow run summary.
    """
    items = list(diagnostics)
    if not items:
        console.print("[success]✓ No metadata inconsistencies found[/success]")
        return

    table = Table(title="Metadata Diagnostics", show_header=True, header_style="bold")
    table.add_column("Severity")
    table.add_column("Field", style="field")
    table.add_column("Message")
    for item in items:
        style = "error" if item.severity is Severity.ERROR else "warning"
        table.add_row(f"[{style}]{item.severity.value}[/{style}]", item.field or "-", item.message)
    console.print(table)

    if IS_GITHUB_ACTIONS:
        for item in items:
            if item.severity is Severity.ERROR:
                gha_error(item.message, title=item.field)
            else:
                gha_warning(item.message, title=item.field)


def print_written_files(paths: List[str]) -> None:
    if not paths:
        console.print("[info]All metadata files already up to date[/info]")
        return
    with gha_group(f"Updated {len(paths)} file(s)"):
        for path in paths:
            console.print(f"  [success]✓[/success] {path}")


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="Metadata Crosswalk Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
        console.print(f"[bold red]{message}[/bold red]", justify="center")
    console.print()
