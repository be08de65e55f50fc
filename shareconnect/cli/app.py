"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from shareconnect import __version__
from shareconnect.core.classifier import classify
from shareconnect.core.compatibility import is_compatible, select_profile
from shareconnect.core.magnet import parse_magnet
from shareconnect.core.router import DispatchRouter
from shareconnect.exceptions import ConfigurationError, NoCompatibleProfileError
from shareconnect.models.config import AppSettings
from shareconnect.models.profile import Profile, ServiceKind, TorrentClient
from shareconnect.storage.config_manager import ConfigManager
from shareconnect.storage.profile_store import ProfileStore
from shareconnect.web.metadata import MetadataFetcher

from .formatters import (
    print_classification,
    print_magnet_panel,
    print_metadata_panel,
    print_outcome,
    print_profiles_table,
    print_settings,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("shareconnect")

app = typer.Typer(
    name="shareconnect",
    help=(
        "Send shared links to your self-hosted download services. Use"
        " 'shareconnect <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)
profiles_app = typer.Typer(help="Manage service profiles.", no_args_is_help=True)
app.add_typer(profiles_app, name="profiles")


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "shareconnect"


class AppState:
    """Paths resolved by the main callback, shared by every command."""

    def __init__(self, config_dir: Path):
        self.config_dir = config_dir

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.ini"

    @property
    def profiles_file(self) -> Path:
        return self.config_dir / "profiles.ini"

    def settings(self) -> AppSettings:
        return ConfigManager(self.config_file).load_settings()

    def profiles(self) -> ProfileStore:
        return ProfileStore(self.profiles_file)


state = AppState(get_config_dir())


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Directory holding config.ini and profiles.ini.",
        envvar="SHARECONNECT_CONFIG_DIR",
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current settings."
    ),
):
    """ShareConnect CLI"""
    if version:
        console.print(f"[bold]shareconnect[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("shareconnect").setLevel(log_level)

    if config_dir is not None:
        state.config_dir = config_dir.expanduser()

    if show_config:
        print_settings(state.config_file, state.settings())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command(name="classify")
def classify_command(url: str = typer.Argument(..., help="The URL to classify.")):
    """Show the detected type of a URL and which profiles accept it."""
    print_classification(url, classify(url), state.profiles().list_profiles())


@app.command(name="magnet")
def magnet_command(uri: str = typer.Argument(..., help="A magnet: URI.")):
    """Decode a magnet link."""
    print_magnet_panel(parse_magnet(uri))


@app.command(name="metadata")
def metadata_command(url: str = typer.Argument(..., help="The URL to preview.")):
    """Fetch the title, description and thumbnail of a URL."""
    settings = state.settings()
    fetcher = MetadataFetcher(timeout=settings.metadata_timeout)
    metadata = asyncio.run(fetcher.fetch(url))
    print_metadata_panel(url, metadata)


def _resolve_profile(
    store: ProfileStore, url: str, name_or_id: Optional[str], force: bool
) -> Profile:
    profiles = store.list_profiles()
    if not profiles:
        raise ConfigurationError(
            "No profiles configured. Add one with 'shareconnect profiles add'."
        )

    if name_or_id is None:
        profile = select_profile(profiles, url)
        if profile is None:
            raise NoCompatibleProfileError(
                f"No profile accepts this {classify(url).value} URL: {url}"
            )
        return profile

    profile = store.find(name_or_id)
    if not force and not is_compatible(profile.service_kind, classify(url)):
        raise NoCompatibleProfileError(
            f"Profile '{profile.name}' ({profile.service_label}) does not accept "
            f"{classify(url).value} URLs."
        )
    return profile


@app.command(name="send")
def send_command(
    url: str = typer.Argument(..., help="The URL to send."),
    profile_name: Optional[str] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Profile name or id. Defaults to the best compatible profile.",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Send even if the profile does not accept the URL type."
    ),
):
    """Send a URL to a download service."""
    settings = state.settings()
    profile = _resolve_profile(state.profiles(), url, profile_name, force)

    router = DispatchRouter(settings)
    outcome = asyncio.run(router.dispatch(profile, url))
    print_outcome(profile, url, outcome)
    if not outcome.success:
        raise typer.Exit(code=1)


@app.command(name="open")
def open_command(
    url: Optional[str] = typer.Argument(None, help="The URL to paste into the Web UI."),
    profile_name: str = typer.Option(
        ..., "--profile", "-p", help="Profile name or id."
    ),
):
    """Open a service's Web UI in a browser and paste the URL into it."""
    settings = state.settings()
    profile = state.profiles().find(profile_name)

    try:
        from shareconnect.web.playwright_host import open_interactive_session
    except ImportError as e:
        raise ConfigurationError(
            "The browser extra is not installed. Run: pip install 'shareconnect[browser]'"
            " && playwright install chromium"
        ) from e

    phase = asyncio.run(
        open_interactive_session(
            profile, url, settings, on_notify=lambda m: console.print(f"[cyan]{escape(m)}[/cyan]")
        )
    )
    log.info(f"Web UI session ended in phase '{phase.value}'.")


@profiles_app.command(name="list")
def profiles_list(
    url: Optional[str] = typer.Option(
        None, "--url", help="Mark which profiles accept this URL."
    ),
):
    """List configured profiles."""
    print_profiles_table(state.profiles().list_profiles(), url)


@profiles_app.command(name="add")
def profiles_add(
    name: str = typer.Argument(..., help="Display name of the profile."),
    base_url: str = typer.Option(..., "--url", help="Base URL, e.g. http://192.168.1.10"),
    port: int = typer.Option(..., "--port", help="Service port."),
    service: ServiceKind = typer.Option(
        ServiceKind.METUBE, "--service", case_sensitive=False, help="Service type."
    ),
    client: Optional[TorrentClient] = typer.Option(
        None, "--client", case_sensitive=False, help="Torrent client (torrent service only)."
    ),
    username: Optional[str] = typer.Option(None, "--username", "-u"),
    password: Optional[str] = typer.Option(None, "--password"),
    default: bool = typer.Option(False, "--default", help="Make this the default profile."),
):
    """Add a service profile."""
    try:
        profile = Profile(
            name=name,
            base_url=base_url,
            port=port,
            service_kind=service,
            torrent_client=client,
            username=username,
            password=password,
            is_default=default,
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid profile:\n{e}") from e

    profile = state.profiles().add(profile)
    console.print(
        f"[green]✓ Added profile '{escape(profile.name)}'[/green] [dim]({profile.id})[/dim]"
    )


@profiles_app.command(name="remove")
def profiles_remove(
    name_or_id: str = typer.Argument(..., help="Profile name or id."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Remove a service profile."""
    store = state.profiles()
    profile = store.find(name_or_id)
    if not force and not typer.confirm(f"Remove profile '{profile.name}'?"):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()
    store.delete(profile.id)
    console.print(f"[green]✓ Removed profile '{escape(profile.name)}'.[/green]")


@profiles_app.command(name="set-default")
def profiles_set_default(
    name_or_id: str = typer.Argument(..., help="Profile name or id."),
):
    """Make a profile the default."""
    store = state.profiles()
    profile = store.set_default(store.find(name_or_id).id)
    console.print(f"[green]✓ '{escape(profile.name)}' is now the default profile.[/green]")
