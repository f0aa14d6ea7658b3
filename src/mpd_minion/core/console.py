"""Rich Console construction.

Consoles are created per session and passed around on the SessionContext.
"""

from typing import Optional

from rich.console import Console


def create_console(no_color: bool = False, stderr: bool = False) -> Console:
    """Create a Rich Console.

    Args:
        no_color: Disable colors (for piping output)
        stderr: Write to stderr instead of stdout
    """
    return Console(no_color=no_color, stderr=stderr, highlight=False)


def safe_print(console: Console, message: str, style: Optional[str] = None) -> None:
    """Print using Rich Console with optional styling.

    Args:
        console: Console to print on
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
    """
    if style:
        console.print(message, style=style)
    else:
        console.print(message)
