#!/usr/bin/env python3
"""
Main CLI Entry Point for the Receipt Reconciler

Provides the command-line interface for reconciling receipts against credit
card statement charges.
"""

from pathlib import Path

import click

from ..core.config import get_config
from ..core.json_utils import read_json


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Receipt Reconciler - match receipts to credit card charges

    Scores receipt/charge pairings, auto-matches confident ones, learns from
    accepted and skipped suggestions, and keeps receipt files organized by
    statement.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)

    # Set environment if specified
    if config_env:
        import os

        os.environ["RECONCILER_ENV"] = config_env

    # Configure debug logging if requested
    if debug:
        import logging
        import os

        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("reconciler").setLevel(logging.DEBUG)

    # Store global options
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = get_config()

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data directory: {ctx.obj['config'].data_dir}")

    if debug:
        click.echo("Debug logging enabled")


@main.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from reconciler import __author__, __version__

    click.echo(f"Receipt Reconciler v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]
    matching = config_obj.matching
    storage = config_obj.storage

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Repository File: {storage.repository_file}")
    click.echo(f"  Model Weights File: {storage.weights_file}")
    click.echo(f"  Skip Ledger File: {storage.skip_ledger_file}")
    click.echo(f"  Merchant Aliases File: {storage.aliases_file}")
    click.echo(f"  Score Blend: {matching.rule_weight:.0%} rules / {matching.learned_weight:.0%} learned")
    click.echo(f"  Inclusion Floor: {matching.inclusion_floor}%")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


@main.command("import-data")
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_data(ctx: click.Context, document: Path) -> None:
    """
    Import statements, charges and receipts from a JSON document.

    The document holds "statements", "charges" and "receipts" lists in the
    same shape the repository stores them (amount strings are dollars).

    Example:
      reconciler import-data august.json
    """
    from ..storage.json_repository import JsonRepository

    config_obj = ctx.obj["config"]
    repository = JsonRepository(config_obj.storage.repository_file)
    try:
        repository.import_records(read_json(document))
    except (KeyError, TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid import document {document}: {e}") from e

    click.echo(f"✅ Imported {document.name}: {repository.summary_text()}")


# Import match command group
from .match import match  # noqa: E402

main.add_command(match)


if __name__ == "__main__":
    main()
