import rich_click as click

from inkgen import __version__

from .settings import CONTEXT_SETTINGS
from .typegen import typegen
from .show import show
from .types import types


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, prog_name="inkgen")
def cli():
    # Initialize the CLI group
    pass


cli.add_command(typegen)
cli.add_command(show)
cli.add_command(types)

if __name__ == "__main__":
    cli()
