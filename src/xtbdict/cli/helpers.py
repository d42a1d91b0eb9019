"""CLI helper utilities shared across commands."""

import functools

import click

from ..config import BuildConfig, resolve_config

SOURCES_HELP = """\
SOURCE is one of:
  federated        dump from the federated mirror network (falls back to the origin)
  secondary        dump from the secondary mirror; WIKIID must end in -text or -images
  packaged-export  pre-packaged export, sharded by the first two letters of WIKIID
  <path>           local dump file (.xml, .xml.bz2, .bz2, .xml.gz, .gz)
"""


def build_options(func):
    """Attach the options shared by every command that resolves a build."""

    @click.option(
        "--output-dir",
        type=click.Path(file_okay=False),
        help="Where bundles are written (overrides $XTBDICT_OUTPUT_DIR)",
    )
    @click.option(
        "--preset-dir",
        type=click.Path(file_okay=False),
        help="Metadata preset directory (overrides $XTBDICT_PRESET_DIR)",
    )
    @click.option(
        "--mirror", help="Primary federated mirror URL (overrides $XTBDICT_MIRROR)"
    )
    @click.option(
        "--lexicon",
        type=click.Path(),
        help="Reading lexicon for the annotator (overrides $XTBDICT_LEXICON)",
    )
    @click.option(
        "--full-articles",
        is_flag=True,
        help="Extract whole articles instead of summaries",
    )
    @click.option("--verbose", "-v", is_flag=True, help="Show stage commands")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper


def config_from_options(
    output_dir, preset_dir, mirror, lexicon, full_articles, verbose
) -> BuildConfig:
    return resolve_config(
        output_dir=output_dir,
        preset_dir=preset_dir,
        mirror=mirror,
        lexicon=lexicon,
        summary_only=not full_articles,
        verbose=verbose,
    )


def echo_usage(usage: str) -> None:
    """Print usage for a malformed invocation; this is help, not failure."""
    click.echo(f"Usage: {usage}")
    click.echo()
    click.echo(SOURCES_HELP, nl=False)
