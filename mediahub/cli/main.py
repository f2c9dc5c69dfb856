"""
CLI Main Application - Typer app driving the provider registry end to end.

Commands build the default registry from configuration, run one provider
operation and render the result with Rich. Every mediahub error is shown
as a panel naming the operation; the exit code is 1.
"""

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import typer

from mediahub import __version__
from mediahub.cli.display import DisplayManager
from mediahub.core.bypass import CloudscraperBypass
from mediahub.core.capabilities import CLOUDFLARE_BYPASS, Capabilities
from mediahub.core.config_manager import ConfigManager
from mediahub.core.exceptions import (
    ConfigurationError,
    MediaHubError,
    ProviderNotFoundError,
    UnsupportedOperationError,
)
from mediahub.core.logging_setup import setup_logging
from mediahub.core.models import MediaFamily
from mediahub.core.registry import ProviderRegistry
from mediahub.providers.catalog import build_default_registry
from mediahub.ui import display_info, display_warning, get_console, handle_error, setup_console


logger = logging.getLogger(__name__)

app = typer.Typer(
    name="mediahub",
    help="Search and resolve anime, manga, movies, novels, comics and books across providers",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@dataclass
class CLIState:
    """Per-invocation state shared by commands through ``ctx.obj``."""

    config_manager: ConfigManager
    debug: bool = False
    skipped: List[str] = field(default_factory=list)


def _state(ctx: typer.Context) -> CLIState:
    return ctx.obj


def _build_capabilities(config_manager: ConfigManager) -> Capabilities:
    """Offer every capability that can be built in this environment."""
    try:
        bypass = CloudscraperBypass(timeout=config_manager.settings.network.timeout)
    except ConfigurationError as e:
        logger.info(f"Cloudflare bypass unavailable: {e}")
        return Capabilities()
    return Capabilities({CLOUDFLARE_BYPASS: bypass})


def _run(ctx: typer.Context, context: str, action: Callable[[ProviderRegistry], Awaitable[Any]]) -> Any:
    """Build the registry, run one async action, always close providers."""
    state = _state(ctx)

    async def runner() -> Any:
        registry = build_default_registry(
            state.config_manager,
            _build_capabilities(state.config_manager),
            skipped=state.skipped,
        )
        try:
            return await action(registry)
        finally:
            await registry.close_all()

    try:
        return asyncio.run(runner())
    except MediaHubError as e:
        handle_error(e, context, show_traceback=state.debug)
        if isinstance(e, ProviderNotFoundError) and state.skipped:
            display_warning("Providers skipped at startup:\n" + "\n".join(state.skipped))
        raise typer.Exit(1)


def _streaming_provider(registry: ProviderRegistry, family: MediaFamily, name: str, operation: str) -> Any:
    if family not in (MediaFamily.ANIME, MediaFamily.MOVIES):
        raise UnsupportedOperationError(
            f"{family.value} providers have no episode servers or video sources",
            provider=name,
            operation=operation,
        )
    return registry.get(family, name)


def _version_callback(value: bool) -> None:
    if value:
        get_console().print(f"[title]mediahub[/title] version [success]{__version__}[/success]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version information and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory path",
        file_okay=False,
        dir_okay=True,
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging and tracebacks"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
) -> None:
    """
    mediahub - one contract for many media sources.
    """
    setup_console(no_color=no_color)

    try:
        config_manager = ConfigManager(config_dir)
    except ConfigurationError as e:
        handle_error(e, "During application initialization", show_traceback=debug)
        raise typer.Exit(1)

    setup_logging(config_manager.settings.logging, debug=debug)
    ctx.obj = CLIState(config_manager=config_manager, debug=debug)


@app.command("providers")
def list_providers(ctx: typer.Context) -> None:
    """List registered providers by family."""
    async def action(registry: ProviderRegistry) -> None:
        DisplayManager().providers(registry.stats())

    _run(ctx, "Listing providers", action)
    state = _state(ctx)
    if state.skipped:
        display_warning("Providers skipped at startup:\n" + "\n".join(state.skipped))


@app.command()
def search(
    ctx: typer.Context,
    family: MediaFamily = typer.Argument(..., case_sensitive=False, help="Media family, e.g. ANIME"),
    provider: str = typer.Argument(..., help="Provider name, e.g. KickAssAnime"),
    query: str = typer.Argument(..., help="Search text"),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Result page"),
) -> None:
    """Search one provider."""
    async def action(registry: ProviderRegistry) -> None:
        envelope = await registry.get(family, provider).search(query, page)
        DisplayManager().search_results(envelope, query, provider)

    _run(ctx, f"Searching {provider} for '{query}'", action)


@app.command()
def info(
    ctx: typer.Context,
    family: MediaFamily = typer.Argument(..., case_sensitive=False, help="Media family, e.g. ANIME"),
    provider: str = typer.Argument(..., help="Provider name"),
    media_id: str = typer.Argument(..., metavar="ID", help="Id exactly as returned by search"),
) -> None:
    """Show the full info record of a title."""
    async def action(registry: ProviderRegistry) -> None:
        record = await registry.get(family, provider).fetch_info(media_id)
        DisplayManager().info(record)

    _run(ctx, f"Fetching info for {media_id} from {provider}", action)


@app.command()
def servers(
    ctx: typer.Context,
    provider: str = typer.Argument(..., help="Provider name"),
    episode_id: str = typer.Argument(..., help="Episode id from the info record"),
    family: MediaFamily = typer.Option(MediaFamily.ANIME, "--family", "-f", case_sensitive=False),
) -> None:
    """List the servers hosting an episode."""
    async def action(registry: ProviderRegistry) -> None:
        parser = _streaming_provider(registry, family, provider, "fetch_episode_servers")
        DisplayManager().servers(await parser.fetch_episode_servers(episode_id))

    _run(ctx, f"Fetching servers for {episode_id} from {provider}", action)


@app.command()
def sources(
    ctx: typer.Context,
    provider: str = typer.Argument(..., help="Provider name"),
    episode_id: str = typer.Argument(..., help="Episode id from the info record"),
    server: Optional[str] = typer.Option(None, "--server", "-s", help="Preferred server name"),
    family: MediaFamily = typer.Option(MediaFamily.ANIME, "--family", "-f", case_sensitive=False),
) -> None:
    """Resolve playable sources for an episode."""
    async def action(registry: ProviderRegistry) -> None:
        parser = _streaming_provider(registry, family, provider, "resolve_sources")
        DisplayManager().source(await parser.resolve_sources(episode_id, server=server))

    _run(ctx, f"Resolving sources for {episode_id} from {provider}", action)


@app.command()
def enable(ctx: typer.Context, name: str = typer.Argument(..., help="Provider name")) -> None:
    """Enable a provider in settings.json."""
    _toggle(ctx, name, True)


@app.command()
def disable(ctx: typer.Context, name: str = typer.Argument(..., help="Provider name")) -> None:
    """Disable a provider in settings.json."""
    _toggle(ctx, name, False)


def _toggle(ctx: typer.Context, name: str, enabled: bool) -> None:
    config_manager = _state(ctx).config_manager
    try:
        if enabled:
            config_manager.enable_provider(name)
        else:
            config_manager.disable_provider(name)
    except ConfigurationError as e:
        handle_error(e, f"Updating provider {name}", show_traceback=_state(ctx).debug)
        raise typer.Exit(1)
    display_info(f"{name} {'enabled' if enabled else 'disabled'} ({config_manager.settings_file})")


def cli_main() -> None:
    """
    Main CLI entry point for the mediahub command.
    """
    try:
        app()
    except KeyboardInterrupt:
        get_console().print("\n[warning]Operation cancelled by user[/warning]")
        sys.exit(130)
    except Exception as e:
        handle_error(e, "Unexpected error in CLI")
        sys.exit(1)


__all__ = ["app", "cli_main"]
