"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Iterable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shareconnect.core.classifier import UrlType, url_type_description
from shareconnect.core.compatibility import (
    filter_compatible,
    profile_support_description,
)
from shareconnect.models.config import AppSettings
from shareconnect.models.magnet import MagnetDescriptor
from shareconnect.models.outcome import DispatchOutcome
from shareconnect.models.profile import Profile
from shareconnect.utils.formatting import format_bytes, mask_secret
from shareconnect.web.metadata import UrlMetadata


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your config.ini and profiles.ini.",
            "• Run `shareconnect profiles list` to review your profiles.",
        ],
        "ProfileNotFoundError": [
            "• Run `shareconnect profiles list` to see profile names and ids.",
            "• Profile names are matched exactly, then case-insensitively.",
        ],
        "NoCompatibleProfileError": [
            "• Run `shareconnect classify <URL>` to see how the URL is detected.",
            "• Add a profile for a service that accepts this kind of URL.",
            "• Use `--force` together with `--profile` to send it anyway.",
        ],
        "TransportError": [
            "• Make sure the service is running and reachable from this machine.",
            "• Check the base URL and port of the profile.",
        ],
        "ApiError": [
            "• The service rejected the request; check the profile credentials.",
            "• Run the command with -vv for the full response.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_profiles_table(profiles: Iterable[Profile], url: str | None = None):
    """Lists profiles; with a URL, marks which of them accept it."""
    console = Console()
    profiles = list(profiles)
    if not profiles:
        console.print(
            "[yellow]No profiles configured.[/yellow] "
            "Add one with [cyan]shareconnect profiles add[/cyan]."
        )
        return

    compatible_ids = {p.id for p in filter_compatible(profiles, url)} if url else None

    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("", width=1)
    table.add_column("Name", style="bold cyan")
    table.add_column("Service")
    table.add_column("Address", style="dim")
    table.add_column("Auth")
    table.add_column("Id", style="dim", no_wrap=True)
    if compatible_ids is not None:
        table.add_column("Accepts URL", justify="center")

    for profile in profiles:
        row = [
            "[yellow]★[/yellow]" if profile.is_default else "",
            escape(profile.name),
            profile.service_label,
            profile.root_url,
            escape(f"{profile.username} / {mask_secret(profile.password)}")
            if profile.has_credentials
            else "[dim]none[/dim]",
            str(profile.id),
        ]
        if compatible_ids is not None:
            row.append("[green]✓[/green]" if profile.id in compatible_ids else "[red]✗[/red]")
        table.add_row(*row)

    console.print(table)


def print_classification(url: str, url_type: UrlType, profiles: Iterable[Profile]):
    """Shows the detected URL type and the profiles able to receive it."""
    console = Console()
    compatible = filter_compatible(profiles, url)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("URL:", f"[dim]{escape(url)}[/dim]")
    table.add_row("Type:", f"{url_type.value} ({url_type_description(url_type)})")
    table.add_row(
        "Compatible profiles:",
        ", ".join(
            f"{escape(p.name)} [dim]({profile_support_description(p.service_kind)})[/dim]"
            for p in compatible
        )
        or "[yellow]none[/yellow]",
    )
    console.print(Panel(table, title="[bold]Classification[/bold]", border_style="cyan"))


def print_magnet_panel(descriptor: MagnetDescriptor):
    """Displays the decoded fields of a magnet link."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Title:", escape(descriptor.title))
    table.add_row("Category:", descriptor.category.label)
    table.add_row("Info Hash:", escape(descriptor.info_hash or "") or "[dim]unknown[/dim]")
    if descriptor.exact_length is not None:
        table.add_row("Size:", format_bytes(descriptor.exact_length))
    table.add_row("Trackers:", str(descriptor.tracker_count))
    for tracker in descriptor.trackers:
        table.add_row("", f"[dim]{escape(tracker)}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold]Magnet Link[/bold]",
            subtitle=f"[dim]{escape(descriptor.description)}[/dim]",
            border_style="magenta",
        )
    )


def print_metadata_panel(url: str, metadata: UrlMetadata):
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Title:", escape(metadata.title or "") or "[dim]unknown[/dim]")
    table.add_row("Site:", escape(metadata.site_name or "") or "[dim]unknown[/dim]")
    if metadata.description:
        table.add_row("Description:", escape(metadata.description))
    if metadata.thumbnail_url:
        table.add_row("Thumbnail:", f"[dim]{escape(metadata.thumbnail_url)}[/dim]")
    console.print(Panel(table, title=f"[bold]{escape(url)}[/bold]", border_style="cyan"))


def print_outcome(profile: Profile, url: str, outcome: DispatchOutcome):
    """Prints the result of a dispatch; errors show the raw error detail."""
    console = Console()
    if outcome.success:
        console.print(
            f"[bold green]✓ Sent to {escape(profile.name)}[/bold green] "
            f"[dim]({profile.service_label}, HTTP {outcome.http_status})[/dim]"
        )
        console.print(f"  [dim]{escape(url)}[/dim]")
    else:
        console.print(f"[bold red]✗ {escape(outcome.error_detail or '')}[/bold red]")


def print_settings(config_path: Path, settings: AppSettings):
    """Displays the effective application settings."""
    console = Console()
    content = ""
    for key in sorted(AppSettings.get_ini_keys()):
        value = getattr(settings, key)
        content += escape(f"{key} = {'' if value is None else value}\n")

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{escape(str(config_path))}[/dim])",
            border_style="cyan",
        )
    )
