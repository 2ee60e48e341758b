"""Main CLI entry point for trace-anything.

Defines the CLI group and registers all subcommands.

Commands:
    run       - Run a script or module with classes traced

Subcommand help:
    trace-anything COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from trace_anything import __version__

from .commands.run import run


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  trace-anything run -t player:Player app.py      Trace every Player in app.py
  trace-anything run -t player:Player -m app      Same, running a module

Options File (--config):
  A JSON object of tracing options, e.g.
  {"in_place": false, "skip_properties": ["buffer"], "extra_events": ["ended"]}
  Original camelCase names (inPlace, skipProperties, ...) are accepted.
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """trace-anything: Trace calls, attribute access and events on Python objects."""
    if version:
        click.echo(f"trace-anything {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(run)


def main() -> None:
    """CLI entry point."""
    cli()
