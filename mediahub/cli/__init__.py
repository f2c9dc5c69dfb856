"""
CLI Layer - Typer commands over the provider registry.
"""

from mediahub.cli.main import app, cli_main

__all__ = ["app", "cli_main"]
