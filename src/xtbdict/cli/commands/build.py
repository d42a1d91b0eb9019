"""Build command - produce a dictionary bundle from a wiki dump."""

import sys

import click

from ... import console
from ...builder import build_dictionary
from ...errors import (
    AcquisitionError,
    BuildError,
    ImageConversionError,
    SourceValidationError,
    StageFailure,
    UsageRequested,
)
from ...resolver import resolve_arguments
from ..helpers import build_options, config_from_options, echo_usage


@click.command(context_settings=dict(ignore_unknown_options=True))
@click.argument("args", nargs=-1)
@build_options
def build(args, output_dir, preset_dir, mirror, lexicon, full_articles, verbose):
    """Build a dictionary bundle.

    \b
    Arguments: SOURCE WIKIID DATE [SPLITSIZE]

    The bundle is written to <WIKIID>-<DATE>.xtbdict. When a metadata preset
    exists for WIKIID it is archived as <WIKIID>-<DATE>.xtbdict.tar, or as
    numbered volumes (.tar.000, .tar.001, ...) of SPLITSIZE bytes each.

    Examples:
        # Federated mirror, with fallback to the origin
        xtbdict build federated jawiki 20240101

        # Archive split into 100 MiB volumes
        xtbdict build federated enwiki 20240101 100M

        # Local dump
        xtbdict build ./testwiki.xml.bz2 testwiki 20240101
    """
    config = config_from_options(
        output_dir, preset_dir, mirror, lexicon, full_articles, verbose
    )

    try:
        spec = resolve_arguments(args, config)
        result = build_dictionary(spec, config)
    except UsageRequested as e:
        echo_usage(str(e))
        return
    except SourceValidationError as e:
        console.error(f"Invalid arguments: {e}")
        sys.exit(1)
    except AcquisitionError as e:
        console.error(f"Acquisition failed: {e}")
        sys.exit(1)
    except StageFailure as e:
        console.error(f"Pipeline {e}")
        sys.exit(1)
    except ImageConversionError as e:
        console.error(f"Image conversion failed: {e}")
        sys.exit(1)
    except BuildError as e:
        console.error(str(e))
        sys.exit(1)

    for archive in result.archives:
        click.echo(str(archive))
