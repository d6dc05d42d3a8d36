"""Command-line interface for text-linkify."""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from text_linkify import __version__
from text_linkify.autofill import AutoFiller
from text_linkify.config import DEFAULT_SETTINGS_PATH, AppConfig, FetcherConfig
from text_linkify.drives import DriveRegistry
from text_linkify.errors import LinkifyError
from text_linkify.fetcher import PlaywrightFetcher
from text_linkify.orchestrator import Orchestrator
from text_linkify.settings import SettingsStore
from text_linkify.utils.url_utils import code_from_fragment, get_host

app = typer.Typer(
    name="text-linkify",
    help="Turn plain-text URLs into links and attach cloud-drive access codes.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()


class ToggleTarget(str, Enum):
    """Switches flipped by the toggle command."""

    GLOBAL_LINKIFY = "global-linkify"
    GLOBAL_DRIVE = "global-drive"
    SITE_LINKIFY = "site-linkify"
    SITE_DRIVE = "site-drive"


def version_callback(value: bool):
    if value:
        console.print(f"text-linkify version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


def _load_config(config_path: Optional[Path]) -> AppConfig:
    if config_path is None:
        return AppConfig()
    try:
        return AppConfig.from_toml(config_path)
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]Invalid config {config_path}: {e}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Plain-text URL linkifier with cloud-drive access-code recovery."""
    pass


@app.command()
def linkify(
    source: str = typer.Argument(..., help="HTML file path or http(s) URL"),
    output: Path = typer.Option(
        Path("./linkified.html"),
        "--output",
        "-o",
        help="Output HTML file path",
    ),
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Hostname used for per-site settings (default: the URL's host)",
    ),
    js: bool = typer.Option(
        False,
        "--js/--no-js",
        help="Render URLs with a headless browser before linkifying",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
    ),
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        help=f"Settings file (default: {DEFAULT_SETTINGS_PATH})",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """
    Convert plain-text URLs in an HTML page into hyperlinks.

    Drive links get a [bold]#pwd=[/bold] fragment when an access code is found nearby.

    Examples:

        text-linkify linkify page.html -o out.html

        text-linkify linkify https://example.com/post --js --host example.com
    """
    config = _load_config(config_path)
    config.output.path = output
    config.fetcher.use_js = js or config.fetcher.use_js
    config.verbose = verbose or config.verbose
    if host:
        config.host = host
    if settings_path:
        config.settings_path = settings_path
    configure_logging(config.verbose)

    orchestrator = Orchestrator(config, console)

    try:
        asyncio.run(orchestrator.run(source))
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(130)
    except LinkifyError as e:
        console.print(f"[red]Error: {e}[/red]")
        if config.verbose:
            console.print_exception()
        raise typer.Exit(1)


@app.command()
def autofill(
    url: str = typer.Argument(..., help="Drive page URL carrying #pwd=<code>"),
    headless: bool = typer.Option(
        False,
        "--headless/--headed",
        help="Run the browser without a window",
    ),
    timeout: float = typer.Option(
        15.0,
        "--timeout",
        help="Seconds to wait for the access-code input to appear",
    ),
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        help=f"Settings file (default: {DEFAULT_SETTINGS_PATH})",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Open a drive page and fill in the access code from its URL fragment."""
    configure_logging(verbose)

    if not code_from_fragment(url):
        console.print("[red]URL carries no #pwd=<code> fragment.[/red]")
        raise typer.Exit(1)

    store = SettingsStore(settings_path or DEFAULT_SETTINGS_PATH)
    site = store.site_settings(get_host(url))
    if not site.drive_enabled:
        console.print(f"[yellow]Drive recognition is disabled for {site.host}.[/yellow]")
        raise typer.Exit(0)

    config = AppConfig()
    config.autofill.observe_timeout_seconds = timeout
    filler = AutoFiller(config.autofill)

    async def _run():
        async with PlaywrightFetcher(FetcherConfig(headless=headless)) as fetcher:
            return await fetcher.autofill(url, filler)

    try:
        result = asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(130)

    if not filler.filled:
        console.print(f"[yellow]No access code input found: {result.error}[/yellow]")
        raise typer.Exit(1)

    clicked = f" and clicked '{filler.clicked}'" if filler.clicked else ""
    console.print(f"[green]Filled access code{clicked}.[/green] Now at {result.final_url}")


@app.command()
def toggle(
    target: ToggleTarget = typer.Argument(..., help="Which switch to flip"),
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Site hostname (required for site-* switches)",
    ),
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        help=f"Settings file (default: {DEFAULT_SETTINGS_PATH})",
    ),
):
    """Flip a global switch or a per-site blacklist entry."""
    store = SettingsStore(settings_path or DEFAULT_SETTINGS_PATH)

    if target in (ToggleTarget.SITE_LINKIFY, ToggleTarget.SITE_DRIVE) and not host:
        console.print("[red]--host is required for site switches.[/red]")
        raise typer.Exit(1)

    if target == ToggleTarget.GLOBAL_LINKIFY:
        enabled = store.toggle_global_linkify()
        label = "Global: Linkify"
    elif target == ToggleTarget.GLOBAL_DRIVE:
        enabled = store.toggle_global_drive()
        label = "Global: Drive Recognition"
    elif target == ToggleTarget.SITE_LINKIFY:
        enabled = store.toggle_site_linkify(host or "")
        label = f"Site {host}: Linkify"
    else:
        enabled = store.toggle_site_drive(host or "")
        label = f"Site {host}: Drive Recognition"

    state = "[green]Enabled[/green]" if enabled else "[yellow]Disabled[/yellow]"
    console.print(f"{label} {state}")


@app.command()
def status(
    host: Optional[str] = typer.Option(None, "--host", help="Site hostname to check"),
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        help=f"Settings file (default: {DEFAULT_SETTINGS_PATH})",
    ),
):
    """Show the current switches and, for a host, what applies there."""
    store = SettingsStore(settings_path or DEFAULT_SETTINGS_PATH)
    settings = store.load()

    table = Table(title=f"Settings ({store.path})")
    table.add_column("Switch", style="cyan")
    table.add_column("State", justify="center")

    table.add_row("Global: Linkify", _state(settings.global_linkify_enabled))
    table.add_row("Global: Drive Recognition", _state(settings.global_drive_enabled))
    table.add_row("Linkify blacklist", ", ".join(settings.linkify_blacklist) or "-")
    table.add_row("Drive blacklist", ", ".join(settings.drive_blacklist) or "-")
    if host:
        table.add_row(f"Site {host}: Linkify", _state(settings.linkify_enabled_for(host)))
        table.add_row(f"Site {host}: Drive Recognition", _state(settings.drive_enabled_for(host)))

    console.print(table)


@app.command("list-drives")
def list_drives():
    """List recognized cloud-drive providers."""
    table = Table(title="Recognized Cloud Drives")
    table.add_column("Name", style="cyan")
    table.add_column("URL Pattern")
    table.add_column("Code Labels")

    for rule in DriveRegistry.list_rules():
        table.add_row(rule.name, rule.pattern, ", ".join(rule.code_labels))

    console.print(table)


def _state(enabled: bool) -> str:
    return "[green]Enabled[/green]" if enabled else "[yellow]Disabled[/yellow]"


if __name__ == "__main__":
    app()
