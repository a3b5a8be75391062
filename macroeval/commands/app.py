"""
Defines the main Click command group for macroeval.

This module provides:
- The root `cli` command group for the application.
- Integration with Rich-enhanced Click classes (`RichGroup`).
- Registration of subcommands from other modules.

Usage:
Import `cli` to initialize and run the command-line interface.
"""

import click
from macroeval.commands.base import RichGroup
from macroeval.commands.evaluate import evaluate, get, resolve


@click.group(
    cls=RichGroup,
    help="""
    macroeval Command Palette

    Evaluate {%...%} constructs in text and in stored values.
    """,
)
@click.version_option(package_name="macroeval", prog_name="macroeval")
def cli() -> None:
    """
    The root Click command group for macroeval.
    """
    pass


# Explicitly annotate `cli` as `click.Group` for static type checking
cli: click.Group = cli

# Register subcommands
cli.add_command(evaluate)
cli.add_command(get)
cli.add_command(resolve)
