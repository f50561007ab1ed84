import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

from inkgen import GeneratorOptions, load_options
from inkgen.errors import ConfigurationError, GeneratorError

from .settings import LOG_FORMAT, DEFAULT_CONFIG


def setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def make_console(color: str) -> Console:
    return Console(color_system=None if color == "none" else color, highlight=False)


def find_metadata(abi: Optional[Path], root: Path = Path(".")) -> Path:
    """An explicit path wins, then the first ``artifacts/*.json``, then ``target/ink/metadata.json``."""
    if abi is not None:
        return Path(abi)

    artifacts = sorted((root / "artifacts").glob("*.json"))
    if artifacts:
        return artifacts[0]

    fallback = root / "target" / "ink" / "metadata.json"
    if fallback.is_file():
        return fallback

    raise ConfigurationError(
        "No contract metadata found in artifacts/ or target/ink/metadata.json, "
        "build the contract first or pass --abi"
    )


def base_options(config: Optional[Path], root: Path = Path(".")) -> GeneratorOptions:
    """Options from an explicit file, else from ``inkgen.json`` when present, else defaults."""
    if config is not None:
        return load_options(config)
    default = root / DEFAULT_CONFIG
    if default.is_file():
        return load_options(default)
    return GeneratorOptions()


def print_error(console: Console, error: GeneratorError) -> None:
    console.print(f"[bold red] :police_car_light: {escape(str(error))}[/]")
