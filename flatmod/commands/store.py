"""Store inspection commands - versions and store roots."""

import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from ..console import console
from ..paths import create_resolver
from ..topdir import FlatMode

_MODE_STYLES = {
    FlatMode.UNKNOWN: "yellow",
    FlatMode.ENABLED: "green",
    FlatMode.DISABLED: "red",
}


@click.command("versions")
@click.argument("name")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root holding the store (default: current directory)",
)
def versions_cmd(name: str, root: Path | None):
    """List the installed versions of module NAME."""
    try:
        resolver = create_resolver()
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    root = (root or Path.cwd()).absolute()
    module_dir = resolver.module_dir(root, name)
    versions = resolver.registry.versions_of(module_dir)

    if not versions:
        console.print(f"[yellow]No versions of '{escape(name)}' installed under {escape(str(root))}[/yellow]")
        sys.exit(1)

    table = Table(title=f"Versions of {escape(name)}", show_header=True, header_style="bold cyan")
    table.add_column("Version", style="green")
    table.add_column("Default", justify="center")
    table.add_column("Location", style="magenta")

    for version in reversed(versions.all):
        is_default = version == versions.default
        location = module_dir if is_default else module_dir / resolver.layout.versions_dir / version
        table.add_row(escape(version), "✓" if is_default else "", escape(str(location)))

    console.print(table)


@click.command("topdir")
@click.argument("directory", required=False, type=click.Path(file_okay=False, path_type=Path))
def topdir_cmd(directory: Path | None):
    """Show the store root that serves DIRECTORY (default: current directory)."""
    try:
        resolver = create_resolver()
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    origin = (directory or Path.cwd()).absolute()
    context = resolver.locator.locate(origin)
    if context is None:
        console.print(f"[red]Error:[/red] No {resolver.layout.store_dir} directory serves {escape(str(origin))}")
        sys.exit(1)

    shared = resolver.resolutions.shared_resolutions(context)
    style = _MODE_STYLES[context.flat_mode]

    console.print(f"[bold]Root:[/bold] {escape(str(context.root))}")
    console.print(f"[bold]Flat mode:[/bold] [{style}]{context.flat_mode.value}[/{style}]")
    if context.linked is not None:
        console.print(f"[bold]Linked:[/bold] yes (marker {escape(str(context.linked.marker_file))})")
    else:
        console.print("[bold]Linked:[/bold] no")
    if shared is not None:
        console.print(f"[bold]Shared resolutions:[/bold] {len(shared)} entries")
    else:
        console.print("[bold]Shared resolutions:[/bold] [dim]none[/dim]")
