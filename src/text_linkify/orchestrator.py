"""Main orchestrator that runs the linkify pipeline over one page."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
from rich.console import Console
from rich.table import Table

from text_linkify.config import AppConfig
from text_linkify.controller import LinkifyController, LinkifyStats
from text_linkify.dom import AsyncioScheduler, DocumentHost
from text_linkify.errors import PageLoadError
from text_linkify.fetcher import BaseFetcher, HttpFetcher, PlaywrightFetcher
from text_linkify.output import HtmlFileOutput
from text_linkify.settings import SettingsStore, SiteSettings
from text_linkify.utils.url_utils import get_host, is_web_url

logger = logging.getLogger(__name__)


@dataclass
class LinkifyResult:
    """Result of linkifying one page."""

    source: str
    host: str = ""
    site: SiteSettings = field(default_factory=SiteSettings)
    stats: LinkifyStats = field(default_factory=LinkifyStats)
    html: str = ""
    output_path: Path | None = None
    load_duration: float = 0.0
    linkify_duration: float = 0.0
    output_duration: float = 0.0

    @property
    def total_duration(self) -> float:
        return self.load_duration + self.linkify_duration + self.output_duration


class Orchestrator:
    """Coordinates loading, linkifying and writing a page."""

    def __init__(self, config: AppConfig, console: Console | None = None):
        self.config = config
        self.console = console or Console()
        self.settings = SettingsStore(config.settings_path)

    async def run(self, source: str, write: bool = True) -> LinkifyResult:
        """Execute the full pipeline for a file path or URL."""
        result = LinkifyResult(source=source)

        start = time.monotonic()
        html, url = await self._load(source)
        result.load_duration = time.monotonic() - start

        result.host = self.config.host or get_host(url)
        logger.debug("Loaded %s (%d chars), host %r", source, len(html), result.host)
        result.site = self.settings.site_settings(result.host)

        start = time.monotonic()
        document, controller = await self.linkify(html, url, result.site)
        result.linkify_duration = time.monotonic() - start
        result.stats = controller.stats
        result.html = document.serialize()
        logger.info(
            "Linkified %s: %d link(s), %d code(s)",
            source,
            result.stats.links_created,
            result.stats.codes_attached,
        )

        if write:
            start = time.monotonic()
            output = HtmlFileOutput(self.config.output.path)
            result.output_path = await output.write(result.html)
            result.output_duration = time.monotonic() - start
            self.console.print(f"[green]Written to {result.output_path}[/green]")

        self._print_summary(result)
        return result

    async def linkify(
        self, html: str, url: str, site: SiteSettings
    ) -> tuple[DocumentHost, LinkifyController]:
        """Run the controller over a static document until no work is left."""
        scheduler = AsyncioScheduler()
        document = DocumentHost.from_html(html, scheduler, url=url)
        controller = LinkifyController(
            document,
            site,
            self.config.linkify,
            self.config.code_search,
        )
        controller.start()
        await scheduler.wait_idle()
        controller.stop()
        return document, controller

    async def _load(self, source: str) -> tuple[str, str]:
        """Return ``(html, url)`` for a URL or a local file."""
        if not is_web_url(source):
            path = Path(source)
            if not path.exists():
                raise PageLoadError(f"No such file: {source}")
            async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
                html = await f.read()
            return html, path.resolve().as_uri()

        self.console.print(f"[blue]Fetching {source}...[/blue]")
        async with self._create_fetcher() as fetcher:
            fetch_result = await fetcher.fetch_with_retry(source)
        if not fetch_result.success:
            raise PageLoadError(
                f"Failed to load {source}: {fetch_result.failure_reason}", fetch_result
            )
        if self.config.verbose and fetch_result.attempts > 1:
            self.console.print(f"[dim]Loaded after {fetch_result.attempts} attempts[/dim]")
        # Keep the requested URL: its fragment may carry an access code
        return fetch_result.html, source

    def _create_fetcher(self) -> BaseFetcher:
        """Create the appropriate fetcher based on config."""
        if self.config.fetcher.use_js:
            return PlaywrightFetcher(self.config.fetcher)
        return HttpFetcher(self.config.fetcher)

    def _print_summary(self, result: LinkifyResult) -> None:
        """Print a post-run summary report."""
        stats = result.stats
        table = Table(title="Linkify summary", show_header=False, box=None, pad_edge=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Host", result.host or "-")
        table.add_row("Linkify", _on_off(result.site.linkify_enabled))
        table.add_row("Drive recognition", _on_off(result.site.drive_enabled))
        table.add_row("Containers processed", str(stats.containers_processed))
        table.add_row("Links created", f"[green]{stats.links_created}[/green]")
        table.add_row("Codes attached", str(stats.codes_attached))
        table.add_row("Existing links updated", str(stats.anchors_updated))
        if stats.rewrite_errors:
            table.add_row("Rewrite errors", f"[red]{stats.rewrite_errors}[/red]")
        table.add_row("Time", f"{result.total_duration:.2f}s")

        self.console.print()
        self.console.print(table)


def _on_off(value: bool) -> str:
    return "[green]on[/green]" if value else "[yellow]off[/yellow]"
