import sys
from pathlib import Path

import rich_click as click
from rich.syntax import Syntax

from inkgen import generate, load_metadata, write
from inkgen.errors import GeneratorError

from .settings import COLOR_CHOICES
from .utils import base_options, find_metadata, make_console, print_error, setup_logging


@click.command(short_help="Generate TypeScript bindings from contract metadata")
@click.option(
    "-a", "--abi", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Contract metadata JSON. Defaults to the first file in [cyan]artifacts/[/] or [cyan]target/ink/metadata.json[/].",
)
@click.option(
    "-o", "--output", type=click.Path(file_okay=False, path_type=Path),
    help="Output directory for the generated files. [default: ./types]",
)
@click.option("--hooks/--no-hooks", default=None, help="Also generate React hooks.")
@click.option("--legacy/--no-legacy", default=None, help="Render enums as loose interfaces instead of tagged unions.")
@click.option(
    "-c", "--config", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON project file with a [cyan]typegen[/] section. Defaults to [cyan]inkgen.json[/] when present.",
)
@click.option("--max-depth", type=click.IntRange(min=1), help="Maximum type nesting depth.")
@click.option("-v", "--verbose", count=True, help="Log progress, repeat for debug output.")
@click.option(
    "--color",
    type=click.Choice(COLOR_CHOICES),
    default="auto",
    help="""Force the command to output with/without terminal colors. By default output colours if the terminal supports it.
See the [underline blue][link=https://rich.readthedocs.io/en/stable/console.html#color-systems]Rich documentation[/link][/] for more info on what the options mean.""",
)
def typegen(abi, output, hooks, legacy, config, max_depth, verbose, color):
    """Generate TypeScript types, call surfaces and optionally React hooks for a contract"""
    console = make_console(color)
    setup_logging(verbose)

    try:
        options = base_options(config).override(
            output_dir=output, hooks=hooks, legacy=legacy, max_depth=max_depth
        )
        path = find_metadata(abi)
        console.print(f":mag: Reading metadata from [magenta]{path}[/]")
        result = generate(load_metadata(path), options)
        written = write(result)
    except GeneratorError as e:
        print_error(console, e)
        sys.exit(1)

    console.print(
        f"[bold green]:white_check_mark: Generated bindings for [magenta]{result.surface.name}[/]: "
        f"{len(result.declarations)} types, {len(result.surface.queries)} queries, "
        f"{len(result.surface.transactions)} transactions, {len(result.surface.events)} events[/]"
    )
    for target in written:
        console.print(f"    [cyan]{target}[/]")

    console.print()
    console.print("Import them with:")
    location = options.output_dir.as_posix()
    if not options.output_dir.is_absolute():
        location = "./" + location
    console.print(Syntax(
        f'import type {{ {result.names.contract} }} from "{location}/{result.module_name}";', "typescript"
    ))
