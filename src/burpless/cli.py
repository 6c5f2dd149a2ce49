"""Command line interface for burpless."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from burpless.config import load_glue_references, load_run_config
from burpless.errors import ConfigurationError
from burpless.glue import HookGlue, ParameterTypeGlue, StepGlue
from burpless.runtime import run_features


@click.group()
@click.version_option(package_name="burpless")
@click.option("--verbose", "-v", is_flag=True, help="Log glue loading at DEBUG level")
def cli(verbose: bool) -> None:
    """Burpless - run gherkin features against glue defined as data."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("features", required=False)
@click.option(
    "--glue",
    "-g",
    "glue_refs",
    multiple=True,
    help="Glue to load, as module:attribute (repeatable)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Run configuration file (default: ./burpless.yaml if present)",
)
@click.argument("behave_args", nargs=-1, type=click.UNPROCESSED)
def run(
    features: str | None,
    glue_refs: tuple[str, ...],
    config_path: Path | None,
    behave_args: tuple[str, ...],
) -> None:
    """Run FEATURES; options after -- are passed to behave."""
    try:
        config = load_run_config(config_path).merged(
            features=features, glue=list(glue_refs), args=list(behave_args)
        )
        glues = load_glue_references(config.glue)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    sys.exit(run_features(config.features, glues, config.args))


@cli.command("list-glue")
@click.option("--glue", "-g", "glue_refs", multiple=True, help="module:attribute")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
)
def list_glue(glue_refs: tuple[str, ...], config_path: Path | None) -> None:
    """Show the steps, hooks and parameter types a run would load."""
    try:
        config = load_run_config(config_path).merged(glue=list(glue_refs))
        glues = load_glue_references(config.glue)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if not glues:
        click.echo("No glue definitions found")
        return

    table = Table(title=f"Glue ({len(glues)} definitions)")
    table.add_column("Kind")
    table.add_column("Definition")
    table.add_column("Location")
    for glue in glues:
        if isinstance(glue, StepGlue):
            table.add_row(
                f"step ({glue.keyword})", escape(glue.pattern_text), str(glue.location)
            )
        elif isinstance(glue, HookGlue):
            table.add_row(
                "hook", f"{glue.phase} (order {glue.order})", str(glue.location)
            )
        elif isinstance(glue, ParameterTypeGlue):
            table.add_row(
                "parameter type",
                escape(f"{{{glue.name}}} {' | '.join(glue.regexps)}"),
                str(glue.location),
            )
    Console(soft_wrap=True).print(table)
