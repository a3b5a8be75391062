"""
Evaluation Commands

This module provides CLI commands that evaluate text and stored values
against a JSON key/value store.

Commands:
- eval <text>: Evaluate constructs in a piece of text.
- get <key>: Show the evaluated value of one key.
- resolve: Show every key with its raw and evaluated value.
"""

from pathlib import Path
from rich.markup import escape
from rich.table import Table
from rich.text import Text
import click
from macroeval.commands.base import RichCommand, rich_help
from macroeval.config.settings import appsettings, console, storeFile_resolve
from macroeval.lib.exceptions import MacroError
from macroeval.lib.log import LOG
from macroeval.lib.store import ConfigValues

store_option = click.option(
    "--store",
    "store",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON store file (defaults to MACRO_STORE_FILE or the user config dir).",
)


def _values_load(store: Path | None) -> ConfigValues:
    """
    Build the evaluated view of the store file.

    With neither --store nor MACRO_STORE_FILE given, a missing per-user
    store file means an empty store.

    :param store: Explicit store file, or None for the configured one.
    :return: ConfigValues over the store.
    :raises MacroError: If the store cannot be loaded or resolved.
    """
    path: Path = store or storeFile_resolve(appsettings)
    if store is None and appsettings.store_file is None and not path.exists():
        LOG(f"No store at {path}, evaluating without stored values")
        return ConfigValues({})
    LOG(f"Loading store {path}")
    return ConfigValues.from_file(path)


@click.command(
    "eval",
    cls=RichCommand,
    short_help="Evaluate constructs in text",
    help=rich_help(
        description="Evaluate every construct in TEXT against the store.",
        usage="macroeval eval [--store FILE] <text>",
        args={"<text>": "Text holding constructs, e.g. '{%Integer-divide::7::2%}'."},
    ),
)
@store_option
@click.argument("text", type=str)
def evaluate(store: Path | None, text: str) -> None:
    """
    Evaluate a piece of text and print the result.

    :param store: Optional store file.
    :param text: Text to evaluate.
    """
    try:
        values: ConfigValues = _values_load(store)
        console.print(values.engine.evaluate_string(text), markup=False, highlight=False)
    except MacroError as e:
        LOG(f"Error evaluating '{text}': {e}")
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise SystemExit(1)


@click.command(
    "get",
    cls=RichCommand,
    short_help="Show the evaluated value of a key",
    help=rich_help(
        description="Show the evaluated value stored under KEY.",
        usage="macroeval get [--store FILE] [--integer --default N] <key>",
        args={
            "<key>": "Key to evaluate, case-insensitive.",
            "--integer": "Read the value as a positive integer.",
            "--default": "Integer used when the value is not a positive integer.",
        },
    ),
)
@store_option
@click.option("--integer", is_flag=True, default=False, help="Read as a positive integer.")
@click.option("--default", "default", type=int, default=0, help="Fallback integer.")
@click.argument("key", type=str)
def get(store: Path | None, integer: bool, default: int, key: str) -> None:
    """
    Print the evaluated value of one key.

    :param store: Optional store file.
    :param integer: Extract a positive integer instead of text.
    :param default: Fallback for integer extraction.
    :param key: Key to evaluate.
    """
    try:
        values: ConfigValues = _values_load(store)
        if integer:
            console.print(
                f"[bold cyan]{escape(key)}:[/bold cyan] {values.integer_extract(key, default)}"
            )
            return
        if key not in values.raw:
            console.print(f"[bold red]Key '{escape(key)}' not found[/bold red]")
            raise SystemExit(1)
        console.print(f"[bold cyan]{escape(key)}:[/bold cyan] ", end="")
        console.print(values.value_get(key), markup=False, highlight=False)
    except MacroError as e:
        LOG(f"Error evaluating key '{key}': {e}")
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise SystemExit(1)


@click.command(
    "resolve",
    cls=RichCommand,
    short_help="Show every key evaluated",
    help=rich_help(
        description="Show every key of the store with its raw and evaluated value.",
        usage="macroeval resolve [--store FILE]",
        args={},
    ),
)
@store_option
def resolve(store: Path | None) -> None:
    """
    Print a table of raw and evaluated values.

    :param store: Optional store file.
    """
    try:
        values: ConfigValues = _values_load(store)
        table: Table = Table(title="Store values")
        table.add_column("Key", style="cyan")
        table.add_column("Raw", style="yellow")
        table.add_column("Evaluated", style="green")
        for key, evaluated in values.values_resolve().items():
            table.add_row(Text(key), Text(values.raw[key] or ""), Text(evaluated or ""))
        console.print(table)
    except MacroError as e:
        LOG(f"Error resolving store: {e}")
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise SystemExit(1)
