"""
Main entry point for the shareconnect application.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console

from shareconnect.cli.app import app
from shareconnect.cli.formatters import format_error_with_suggestions
from shareconnect.exceptions import ShareConnectError


def main() -> None:
    """Runs the CLI and turns uncaught errors into an error panel and exit code."""
    log = logging.getLogger("shareconnect")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Operation cancelled by user.[/yellow]")
        sys.exit(0)
    except ShareConnectError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
