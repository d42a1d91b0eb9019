"""Operator-facing messages, all written to stderr."""

import click


def status(message: str, verbose: bool) -> None:
    """Progress detail, shown only with --verbose."""
    if verbose:
        click.echo(message, err=True)


def info(message: str) -> None:
    click.echo(message, err=True)


def warning(message: str) -> None:
    click.echo(f"Warning: {message}", err=True)


def error(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
