"""
Error Handler - Rich error panels with context and suggestions.

Each mediahub exception class gets a title and a short list of
suggestions; the panel always shows the original message, which already
names the failing operation and its cause.
"""

import traceback
from typing import Dict, List, Optional, Tuple, Type

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from mediahub.core.exceptions import (
    ConfigurationError,
    ExtractionError,
    MediaHubError,
    ProviderNotFoundError,
    UnsupportedOperationError,
    UpstreamError,
    ValidationError,
)
from mediahub.ui.console import get_console


# Checked in order, so subclasses must come before their bases
_ERROR_STYLES: List[Tuple[Type[Exception], str, List[str]]] = [
    (ConfigurationError, "⚙️  Configuration Error", [
        "Install missing extras, e.g. [cyan]pip install 'mediahub[bypass]'[/cyan]",
        "Check settings.json syntax and values",
        "Disable the provider with [cyan]mediahub disable NAME[/cyan]",
    ]),
    (UnsupportedOperationError, "🚫 Unsupported Operation", [
        "This provider does not offer the operation",
        "Pick a different provider of the same family",
    ]),
    (ProviderNotFoundError, "🔍 Provider Not Found", [
        "List providers with [cyan]mediahub providers[/cyan]",
        "Check the family and provider spelling",
    ]),
    (ExtractionError, "🎞️  Extraction Error", [
        "Try another server from [cyan]mediahub servers[/cyan]",
        "The host may have changed its player",
    ]),
    (UpstreamError, "🌐 Upstream Error", [
        "Check your internet connection",
        "Verify the source website is accessible",
        "Try again in a few moments",
    ]),
    (ValidationError, "✏️  Invalid Input", [
        "Check the command arguments",
    ]),
]


class ErrorHandler:
    """Handles error display with consistent formatting and helpful context."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console

    @property
    def console(self) -> Console:
        return self._console or get_console()

    def _style_for(self, error: Exception) -> Tuple[str, List[str]]:
        for error_type, title, suggestions in _ERROR_STYLES:
            if isinstance(error, error_type):
                return title, list(suggestions)
        if isinstance(error, MediaHubError):
            return "❌ Error", ["Run again with [cyan]--debug[/cyan] for details"]
        return "💥 Unexpected Error", [
            "Try running the command again",
            "Report this issue if it persists",
        ]

    def _fields(self, error: Exception) -> Dict[str, str]:
        fields = {}
        for attr, label in (
            ("capability", "Capability"),
            ("config_path", "Configuration"),
            ("provider", "Provider"),
            ("operation", "Operation"),
            ("server", "Server"),
            ("url", "URL"),
            ("status_code", "Status Code"),
        ):
            value = getattr(error, attr, None)
            if value:
                fields[label] = str(value)
        return fields

    def handle_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """
        Display an error panel.

        Args:
            error: Exception to display
            context: What the CLI was doing when it failed
            show_traceback: Include details and the traceback
        """
        title, suggestions = self._style_for(error)
        if isinstance(error, UpstreamError) and error.status_code:
            if error.status_code == 403:
                suggestions.insert(0, "The source may be blocking automated requests")
            elif error.status_code == 404:
                suggestions.insert(0, "The requested content may no longer be available")
            elif error.status_code >= 500:
                suggestions.insert(0, "The source server is experiencing issues")

        message = str(error) if isinstance(error, MediaHubError) else f"{error.__class__.__name__}: {error}"
        content_parts = [f"[error]{escape(message)}[/error]"]
        for label, value in self._fields(error).items():
            content_parts.append(f"[dim]{label}:[/dim] [cyan]{escape(value)}[/cyan]")
        if context:
            content_parts.append(f"[dim]Context:[/dim] {escape(context)}")

        content_parts.append("\n[info]💡 Suggestions:[/info]")
        content_parts.extend(f"• {suggestion}" for suggestion in suggestions)

        if show_traceback:
            details = getattr(error, "details", None)
            if details:
                content_parts.append(f"\n[dim]Details:[/dim]\n{escape(str(details))}")
            content_parts.append(f"\n[dim]Traceback:[/dim]\n{escape(''.join(traceback.format_exception(error)))}")

        self.console.print(Panel("\n".join(content_parts), title=title, border_style="red", padding=(1, 2)))

    def display_warning(self, message: str, title: str = "⚠️  Warning") -> None:
        self.console.print(Panel(f"[warning]{escape(message)}[/warning]", title=title, border_style="yellow", padding=(1, 2)))

    def display_info(self, message: str, title: str = "ℹ️  Information") -> None:
        self.console.print(Panel(f"[info]{escape(message)}[/info]", title=title, border_style="cyan", padding=(1, 2)))


# Global error handler instance
_error_handler = ErrorHandler()


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    return _error_handler


def handle_error(error: Exception, context: Optional[str] = None, show_traceback: bool = False) -> None:
    """Display an error using the global error handler."""
    _error_handler.handle_error(error, context, show_traceback)


def display_warning(message: str, title: str = "⚠️  Warning") -> None:
    """Display a warning message using the global error handler."""
    _error_handler.display_warning(message, title)


def display_info(message: str, title: str = "ℹ️  Information") -> None:
    """Display an information message using the global error handler."""
    _error_handler.display_info(message, title)


# Export error handling functions
__all__ = [
    "ErrorHandler",
    "get_error_handler",
    "handle_error",
    "display_warning",
    "display_info",
]
