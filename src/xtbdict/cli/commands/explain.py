"""Explain command - show what a build would run, without running it."""

import sys

import click

from ... import console
from ...acquire import acquisition_for, candidate_urls
from ...builder import bundle_paths, uses_image_path
from ...errors import SourceValidationError, UsageRequested
from ...image_pipeline import IMAGE_LIST
from ...packager import ArchiveSpec, find_preset, plan_archive_stages
from ...process_utils import format_command
from ...resolver import parse_split_size, resolve_arguments
from ...tools import annotator_stage, indexer_stage, writer_stage
from ...text_pipeline import plan_text_stages
from ..helpers import build_options, config_from_options, echo_usage


def _echo_stages(title, stages):
    click.echo(f"{title}:")
    for stage in stages:
        click.echo(f"  {stage.name}: {format_command(stage.argv)}")


@click.command(context_settings=dict(ignore_unknown_options=True))
@click.argument("args", nargs=-1)
@build_options
def explain(args, output_dir, preset_dir, mirror, lexicon, full_articles, verbose):
    """Show the resolved source and the stages a build would run.

    Takes the same arguments as ``build``. Nothing is probed, downloaded or
    written.

    Examples:
        xtbdict explain federated jawiki 20240101
        xtbdict explain secondary commons-images 20240101 650M
    """
    config = config_from_options(
        output_dir, preset_dir, mirror, lexicon, full_articles, verbose
    )

    try:
        spec = resolve_arguments(args, config)
    except UsageRequested as e:
        echo_usage(str(e))
        return
    except SourceValidationError as e:
        console.error(f"Invalid arguments: {e}")
        sys.exit(1)

    paths = bundle_paths(spec, config)
    urls = candidate_urls(spec)

    click.echo(f"Source: {spec.kind}")
    click.echo(f"Bundle: {paths.bundle_dir}")
    for url in urls:
        click.echo(f"Probe:  {url}")

    acquisition = acquisition_for(spec, urls[0] if urls else None)
    if uses_image_path(spec):
        click.echo(f"Images: {acquisition.url} (resized in parallel)")
        _echo_stages(
            "Write",
            [writer_stage(config.tools, paths.stage_dir, images=True)],
        )
        click.echo(f"  stdin: {paths.work_dir / IMAGE_LIST}")
    else:
        _echo_stages("Extract", plan_text_stages(acquisition, paths, config))
        _echo_stages(
            "Post-process",
            [
                annotator_stage(config.tools, config.lexicon),
                indexer_stage(config.tools, paths.bundle_dir),
            ],
        )

    if find_preset(config.preset_dir, spec.wiki_id) is None:
        click.echo("Archive: skipped (no metadata preset)")
        return

    split_size = parse_split_size(spec.split_size) if spec.split_size else None
    _echo_stages(
        "Archive",
        plan_archive_stages(
            ArchiveSpec(bundle_dir=paths.bundle_dir, split_size=split_size), paths
        ),
    )
