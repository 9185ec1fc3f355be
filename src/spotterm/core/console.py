"""Rich console for output printed outside the terminal UI.

Only used before the blessed UI takes over the screen (startup errors) or by
CLI subcommands that never start it.
"""

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Get the shared Rich Console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print a message with an optional Rich style (e.g. "yellow")."""
    get_console().print(message, style=style)


def print_error(message: str, hint: str | None = None) -> None:
    """Print an error line in red, followed by an optional hint."""
    safe_print(f"❌ {message}", style="bold red")
    if hint:
        safe_print(hint, style="yellow")
