"""qmetrics CLI main entry point."""

import click

from qmetrics import __version__
from qmetrics.cli.commands import analyze_command


@click.group()
@click.version_option(version=__version__)
def main():
    """qmetrics - Trading Performance Analytics"""
    pass


# Register commands
main.add_command(analyze_command)


if __name__ == "__main__":
    main()
