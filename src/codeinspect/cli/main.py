"""codeinspect CLI - cinspect command."""

import click

from codeinspect import __version__
from codeinspect.cli.analyze import analyze_command
from codeinspect.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="cinspect")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """codeinspect - dependency, feature and blast-radius analysis for large codebases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(analyze_command, name="analyze")


if __name__ == "__main__":
    cli()
