"""Resolve command - show where a request would be loaded from."""

import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.markup import escape

from ..console import console
from ..errors import FlatModuleError
from ..paths import create_resolver
from ..request import Requester


@click.command("resolve")
@click.argument("request")
@click.option(
    "--from",
    "from_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File making the request (default: interactive session in the current directory)",
)
@click.option("--main", "is_main", is_flag=True, help="Resolve as the program entry point")
def resolve_cmd(request: str, from_file: Path | None, is_main: bool):
    """Resolve REQUEST to its candidate directories and file.

    Examples:

        \b
        flatmod resolve foo
        flatmod resolve foo@1.x --from lib/index.js
        flatmod resolve @scope/pkg/lib/util
    """
    try:
        resolver = create_resolver()
        requester = Requester.for_file(from_file) if from_file else None
        candidates = resolver.resolve(request, requester)
        found = resolver.resolve_final_path(request, candidates, is_main)
    except (FlatModuleError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if candidates:
        console.print("[bold]Candidate directories:[/bold]")
        for candidate in candidates:
            console.print(f"  [cyan]{escape(str(candidate))}[/cyan]")
    else:
        console.print("[dim]No candidate directories[/dim]")

    if found is None:
        console.print(f"[red]Error:[/red] Cannot find module '{escape(request)}'")
        sys.exit(1)

    console.print(f"[green]✓[/green] {escape(str(found))}")
