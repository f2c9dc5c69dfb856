"""
Console Management - Centralized Rich console configuration.

Every piece of CLI output goes through one shared console so width,
color detection and test capture behave the same everywhere.
"""

from typing import Optional

from rich.console import Console
from rich.theme import Theme


# Named styles used by the CLI tables and panels
MEDIAHUB_THEME = Theme({
    "error": "bold red",
    "warning": "yellow",
    "info": "cyan",
    "success": "green",
    "title": "bold magenta",
    "muted": "dim",
})

# Global console instance
_console: Optional[Console] = None


def setup_console(
    force_terminal: Optional[bool] = None,
    width: Optional[int] = None,
    no_color: bool = False,
) -> Console:
    """
    Set up and configure the global Rich console.

    Args:
        force_terminal: Force terminal mode detection
        width: Console width override
        no_color: Disable colors entirely

    Returns:
        Configured Rich Console instance
    """
    global _console

    console_kwargs = {
        "theme": MEDIAHUB_THEME,
        "stderr": False,
        "force_terminal": force_terminal,
        "color_system": None if no_color else "auto",
    }
    if width is not None:
        console_kwargs["width"] = width

    _console = Console(**console_kwargs)
    return _console


def get_console() -> Console:
    """
    Get the global Rich console instance.

    Creates a default console if none exists.
    """
    global _console

    if _console is None:
        _console = setup_console()
    return _console


__all__ = ["setup_console", "get_console", "MEDIAHUB_THEME"]
