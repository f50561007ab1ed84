import sys
from pathlib import Path

import rich_click as click
from rich.syntax import Syntax

from inkgen import generate, load_metadata
from inkgen.errors import GeneratorError

from .settings import COLOR_CHOICES
from .utils import base_options, find_metadata, make_console, print_error, setup_logging


@click.command(short_help="Print the generated module instead of writing it")
@click.option("-a", "--abi", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Contract metadata JSON.")
@click.option("--legacy/--no-legacy", default=None, help="Render enums as loose interfaces instead of tagged unions.")
@click.option("--hooks", is_flag=True, help="Print the React hooks file as well.")
@click.option(
    "-c", "--config", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON project file with a [cyan]typegen[/] section.",
)
@click.option("-v", "--verbose", count=True, help="Log progress, repeat for debug output.")
@click.option(
    "--color",
    type=click.Choice(COLOR_CHOICES),
    default="auto",
    help="Force the command to output with/without terminal colors.",
)
def show(abi, legacy, hooks, config, verbose, color):
    """Print the generated TypeScript module with syntax highlighting"""
    console = make_console(color)
    setup_logging(verbose)

    try:
        options = base_options(config).override(legacy=legacy, hooks=hooks or None)
        result = generate(load_metadata(find_metadata(abi)), options)
    except GeneratorError as e:
        print_error(console, e)
        sys.exit(1)

    for name, text in result.files.items():
        console.print(f"[bold magenta]// {name}[/]")
        console.print(Syntax(text, "typescript"))
        console.print()
