"""Main CLI entry point for rules-engine."""

import click
from .commands.rules import rules_commands
from ..exceptions import ConfigurationError
from ..utils.logger import setup_logger


@click.group()
@click.version_option(version="1.0.0")
@click.option("--log-level", default=None, help="Override the configured log level")
def cli(log_level):
    """Tabletop rulebook search and cross-reference engine."""
    try:
        setup_logger(level=log_level)
    except ConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="--log-level")


# Register command groups
cli.add_command(rules_commands)


if __name__ == "__main__":
    cli()
