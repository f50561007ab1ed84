import sys
from pathlib import Path

import rich_click as click
from rich.table import Table

from inkgen import generate, load_metadata
from inkgen.errors import GeneratorError

from .settings import COLOR_CHOICES
from .utils import base_options, find_metadata, make_console, print_error, setup_logging


@click.command(short_help="List every declaration the generator emits")
@click.option("-a", "--abi", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Contract metadata JSON.")
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
def types(abi, config, verbose, color):
    """List the declarations of the generated module, in module order"""
    console = make_console(color)
    setup_logging(verbose)

    try:
        result = generate(load_metadata(find_metadata(abi)), base_options(config))
    except GeneratorError as e:
        print_error(console, e)
        sys.exit(1)

    table = Table(title=f"Declarations of {result.surface.name}")
    table.add_column("Name", style="bold cyan")
    table.add_column("Kind")
    table.add_column("Fingerprint", style="dim")
    table.add_column("TypeIds", justify="right")
    table.add_column("Source path", style="magenta")

    for decl in result.declarations:
        table.add_row(
            decl.name,
            decl.kind,
            decl.fingerprint[:12],
            ", ".join(str(t) for t in decl.type_ids),
            decl.path_text,
        )

    console.print(table)
