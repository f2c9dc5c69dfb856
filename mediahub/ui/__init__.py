"""
UI Layer - Rich console output for the CLI.
"""

from mediahub.ui.console import get_console, setup_console
from mediahub.ui.error_handler import (
    ErrorHandler,
    display_info,
    display_warning,
    get_error_handler,
    handle_error,
)

__all__ = [
    "get_console",
    "setup_console",
    "ErrorHandler",
    "get_error_handler",
    "handle_error",
    "display_warning",
    "display_info",
]
