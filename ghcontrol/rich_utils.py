"""
Rich formatting utilities for consistent terminal output.

"Beauty is in the eye of the beholder. But colors help."

Data goes to stdout so it can be piped; everything meant for a human
(status lines, log events, prompts' context) goes to stderr.
"""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Centralized console instances
console = Console()
err_console = Console(stderr=True)
log_console = Console(stderr=True, log_path=False)


class Colors:
    """Consistent color scheme for the application."""
    SUCCESS = "green"
    ERROR = "red"
    WARNING = "yellow"
    INFO = "cyan"
    MUTED = "dim"
    REPO_NAME = "bold blue"


def log_event(message: str, *, style: str = Colors.MUTED) -> None:
    """Emit a timestamped log event on stderr."""
    log_console.log(f"[{style}]{escape(message)}[/{style}]")


def set_quiet(quiet: bool) -> None:
    """Silence (or restore) log events. Errors are still printed."""
    log_console.quiet = quiet


def print_success(message: str, prefix: str = "✅") -> None:
    """Print a success message in green."""
    err_console.print(f"[{Colors.SUCCESS}]{prefix} {escape(message)}[/{Colors.SUCCESS}]")


def print_error(message: str, prefix: str = "❌") -> None:
    """Print an error message in red."""
    err_console.print(f"[{Colors.ERROR}]{prefix} {escape(message)}[/{Colors.ERROR}]")


def print_warning(message: str, prefix: str = "⚠️") -> None:
    """Print a warning message in yellow."""
    err_console.print(f"[{Colors.WARNING}]{prefix} {escape(message)}[/{Colors.WARNING}]")


def print_info(message: str, prefix: str = "ℹ️") -> None:
    """Print an info message in cyan."""
    err_console.print(f"[{Colors.INFO}]{prefix} {escape(message)}[/{Colors.INFO}]")


def print_json_data(data: Any) -> None:
    """Print a JSON document to stdout."""
    console.print_json(data=data)


def create_data_table(title: str | None = None, show_lines: bool = False) -> Table:
    """Create a styled table for data display."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold blue",
        border_style="blue",
        show_lines=show_lines,
    )
    return table


def format_repo_name(full_name: str) -> str:
    """Format a repository name with consistent styling."""
    return f"[{Colors.REPO_NAME}]{escape(full_name)}[/{Colors.REPO_NAME}]"
