"""xtbdict CLI main entry point."""

import click


@click.group()
def cli():
    """xtbdict - Build XTBook dictionary bundles from wiki dumps."""


# Register commands at module level so tests can import cli with commands attached
from .commands.build import build
from .commands.explain import explain

cli.add_command(build)
cli.add_command(explain)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
