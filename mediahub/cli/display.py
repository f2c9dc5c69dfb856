"""
CLI Display - Rich tables and panels for mediahub records.
"""

from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mediahub.core.models import (
    NOT_AVAILABLE,
    ChildRecord,
    EpisodeServer,
    MediaInfo,
    ProviderStats,
    SearchResult,
    Source,
)
from mediahub.ui import get_console


def _cell(value: object) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return escape(str(value))


class DisplayManager:
    """Renders records returned by providers."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def providers(self, stats: Iterable[ProviderStats]) -> None:
        table = Table(title="Registered Providers", title_style="title", show_lines=False)
        table.add_column("Family", style="info")
        table.add_column("Name", style="bold")
        table.add_column("Class Path")
        table.add_column("Base URL", style="muted")
        table.add_column("Status")

        rows = list(stats)
        for entry in rows:
            status = "[success]working[/success]" if entry.is_working else "[warning]broken[/warning]"
            table.add_row(entry.family.value, _cell(entry.name), _cell(entry.class_path), _cell(entry.base_url), status)

        if not rows:
            self.console.print("[warning]No providers registered.[/warning]")
            return
        self.console.print(table)

    def search_results(self, envelope: SearchResult, query: str, provider: str) -> None:
        if not envelope.results:
            self.console.print(f"[warning]No results for '{escape(query)}' on {escape(provider)}.[/warning]")
            return

        table = Table(title=f"{escape(provider)}: '{escape(query)}'", title_style="title")
        table.add_column("#", justify="right", style="muted")
        table.add_column("ID", style="info")
        table.add_column("Title", style="bold")
        table.add_column("Released")
        for index, result in enumerate(envelope.results, start=1):
            table.add_row(str(index), _cell(result.id), _cell(result.title), _cell(result.release_date))
        self.console.print(table)

        pages = f" of {envelope.total_pages}" if envelope.total_pages else ""
        more = " (more available)" if envelope.has_next_page else ""
        self.console.print(f"[muted]Page {envelope.current_page}{pages}{more}[/muted]")

    def info(self, record: MediaInfo) -> None:
        lines = [f"[title]{escape(record.title)}[/title]", ""]
        for label, value in (
            ("ID", record.id),
            ("URL", record.url),
            ("Status", record.status.value),
            ("Released", record.release_date),
            ("Start", record.start_date),
            ("End", record.end_date),
            ("Genres", ", ".join(record.genres) or NOT_AVAILABLE),
            ("Synonyms", ", ".join(record.synonyms) or NOT_AVAILABLE),
        ):
            lines.append(f"[muted]{label}:[/muted] {_cell(value)}")
        for field_name in ("type", "season", "total_episodes", "total_chapters"):
            if field_name in type(record).model_fields:
                value = getattr(record, field_name)
                lines.append(f"[muted]{field_name.replace('_', ' ').title()}:[/muted] {_cell(getattr(value, 'value', value))}")
        lines.extend(["", _cell(record.description)])
        self.console.print(Panel("\n".join(lines), border_style="info", padding=(1, 2)))

        children = getattr(record, "episodes", None) or getattr(record, "chapters", None)
        if children:
            self.children(children)

    def children(self, children: Iterable[ChildRecord]) -> None:
        table = Table(title_style="title")
        table.add_column("No.", justify="right")
        table.add_column("ID", style="info")
        table.add_column("Title")
        for child in children:
            number = int(child.number) if float(child.number).is_integer() else child.number
            table.add_row(str(number), _cell(child.id), _cell(child.title))
        self.console.print(table)

    def servers(self, servers: Iterable[EpisodeServer]) -> None:
        rows = list(servers)
        if not rows:
            self.console.print("[warning]The provider offers no servers for this episode.[/warning]")
            return
        table = Table(title="Servers", title_style="title")
        table.add_column("Name", style="bold")
        table.add_column("URL", style="muted")
        for server in rows:
            table.add_row(_cell(server.name), _cell(server.url))
        self.console.print(table)

    def source(self, source: Source) -> None:
        table = Table(title="Sources", title_style="title")
        table.add_column("Quality", style="bold")
        table.add_column("HLS")
        table.add_column("URL", style="muted", overflow="fold")
        for video in source.sources:
            table.add_row(_cell(video.quality), "yes" if video.is_m3u8 else "no", _cell(video.url))
        self.console.print(table)

        for subtitle in source.subtitles:
            self.console.print(f"[muted]Subtitle ({escape(subtitle.lang)}):[/muted] {escape(subtitle.url)}")
        if source.headers:
            headers = ", ".join(f"{k}: {v}" for k, v in source.headers.items())
            self.console.print(f"[muted]Required headers:[/muted] {escape(headers)}")


__all__ = ["DisplayManager"]
