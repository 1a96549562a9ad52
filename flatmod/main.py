"""flatmod CLI - inspect how requests resolve against a flat dependency store."""

import logging
from pathlib import Path

import click

from .commands import resolve_cmd
from .commands import topdir_cmd
from .commands import versions_cmd
from .logging_setup import enable_console_debug
from .logging_setup import init_json_logging
from .paths import create_settings

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.version_option(package_name="flatmod")
@click.option("--verbose", "-v", is_flag=True, help="Print resolution decisions to stderr")
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSONL log file (default: $FLATMOD_LOG_PATH or ./flatmod.log.jsonl)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_path: Path | None):
    """flatmod - flat dependency store resolver."""
    log_settings = create_settings().get_logging()
    init_json_logging(log_path or log_settings.get("path"), log_settings.get("level"))
    if verbose:
        enable_console_debug()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


cli.add_command(resolve_cmd)
cli.add_command(versions_cmd)
cli.add_command(topdir_cmd)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
