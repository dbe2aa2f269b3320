"""fieldrules CLI entry point."""

import click

from fieldrules.settings import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: FIELDRULES_LOG_LEVEL or WARNING).")
def cli(log_level: str | None):
    """fieldrules: declarative field validation CLI."""
    configure_logging(log_level)


# Register subcommands
from fieldrules.cli.form_cmd import check, validate  # noqa: E402

cli.add_command(validate)
cli.add_command(check)
